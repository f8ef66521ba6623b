import logging
import math
from typing import Callable, Optional, Tuple

from duel.errors import StaleTargetError
from duel.models import Direction, PlayerState, Projectile, Room, RoundPhase
from duel.payloads import parse_attack, parse_projectile
from .phases import RoundPhaseMachine
from .replication import Replicator
from .rules import MatchRules
from .scheduler import ScheduledTask


logger = logging.getLogger(__name__)


class CombatResolver:
    """Melee and projectile resolution.

    Attack animations and projectile visuals are always replicated; damage and
    ammo only count while the room is ACTIVE.
    """

    def __init__(self, replicator: Replicator, scheduler, rules: MatchRules, lock,
                 find_room: Callable[[str], Optional[Room]], phases: RoundPhaseMachine):
        self.replicator = replicator
        self.scheduler = scheduler
        self.rules = rules
        self.lock = lock
        self.find_room = find_room
        self.phases = phases

    def melee(self, room: Room, attacker_id: str, data) -> None:
        attacker = room.players.get(attacker_id)
        if attacker is None:
            return
        self.replicator.to_others(room, attacker_id, 'opponentAttack', {'attackerId': attacker_id})
        if room.phase is not RoundPhase.ACTIVE:
            return

        ax, ay = parse_attack(attacker, data)
        for target in room.others(attacker_id):
            if math.hypot(ax - target.x, ay - target.y) >= self.rules.melee_range:
                continue
            if target.guarding:
                self.replicator.player_state(room, target)
            else:
                self._apply_damage(room, attacker_id, target, self.rules.melee_damage)
            if room.phase is not RoundPhase.ACTIVE:
                break

    def fire_projectile(self, room: Room, shooter_id: str, data) -> Optional[ScheduledTask]:
        """Returns the scheduled impact, if the shot has a target."""
        shooter = room.players.get(shooter_id)
        if shooter is None:
            return None
        direction = parse_projectile(data)
        active = room.phase is RoundPhase.ACTIVE
        if active:
            if shooter.projectiles_remaining <= 0:
                logger.debug(f"[projectile-reject] room={room.id} sid={shooter_id} out of ammo")
                return None
            shooter.projectiles_remaining -= 1

        projectile = Projectile(shooter_id, shooter.x, shooter.y, direction, shooter.color)
        self.replicator.player_state(room, shooter)
        self.replicator.to_room(room, 'projectileFired', projectile.to_dict())
        if not active:
            return None

        hit = self._select_target(room, shooter, direction)
        if hit is None:
            return None
        target, distance = hit
        travel_ms = self.rules.travel_time_ms(distance)

        room_id = room.id
        target_id = target.id
        task: Optional[ScheduledTask] = None

        def _impact():
            self._on_projectile_impact(room_id, projectile, target_id, task)

        task = self.scheduler.schedule(travel_ms, _impact, name=f"projectile:{room_id}:{shooter_id}")
        room.pending_projectiles.append(task)
        logger.debug(f"[projectile-set] room={room_id} shooter={shooter_id} target={target_id} travel={travel_ms:.0f}ms")
        return task

    def _select_target(self, room: Room, shooter: PlayerState, direction: Direction) -> Optional[Tuple[PlayerState, float]]:
        # First eligible candidate in join order; a shot never hits twice
        for target in room.others(shooter.id):
            dx = target.x - shooter.x
            dy = target.y - shooter.y
            if dx * direction.sign <= 0:
                continue
            if abs(dx) > self.rules.projectile_range or abs(dy) > self.rules.projectile_vertical_tolerance:
                continue
            return target, abs(dx)
        return None

    def _on_projectile_impact(self, room_id: str, projectile: Projectile, target_id: str, task: ScheduledTask) -> None:
        with self.lock:
            room = self.find_room(room_id)
            if room is not None and task in room.pending_projectiles:
                room.pending_projectiles.remove(task)
            try:
                self._resolve_impact(room, projectile, target_id)
            except StaleTargetError as exc:
                logger.debug(f"[projectile-drop] room={room_id} target={target_id} reason={exc}")

    def _resolve_impact(self, room: Optional[Room], projectile: Projectile, target_id: str) -> None:
        if room is None:
            raise StaleTargetError('room closed')
        if room.phase is not RoundPhase.ACTIVE:
            raise StaleTargetError(f"phase is {room.phase.value}")
        target = room.players.get(target_id)
        if target is None:
            raise StaleTargetError('target left')
        if target.knocked_out:
            raise StaleTargetError('target already down')

        if target.guarding:
            self.replicator.player_state(room, target)
            return
        self._apply_damage(room, projectile.shooter_id, target, self.rules.projectile_damage)

    def _apply_damage(self, room: Room, attacker_id: str, target: PlayerState, damage: int) -> None:
        target.hp = max(0, target.hp - damage)
        self.replicator.send(target.id, 'attacked', {'hp': target.hp})
        self.replicator.player_state(room, target)
        if target.hp <= 0:
            self.phases.knockout(room, attacker_id, target.id)
