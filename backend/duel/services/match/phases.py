import logging
from typing import Callable, Optional

from duel.models import Room, RoundPhase
from .replication import Replicator
from .rules import MatchRules
from .scheduler import ScheduledTask


logger = logging.getLogger(__name__)

MIN_PLAYERS = 2


class RoundPhaseMachine:
    """WARMUP -> COUNTDOWN -> ACTIVE -> WARMUP, per room.

    The phase itself lives on the Room; this object only drives transitions.
    Callers hold the registry lock. The countdown completion takes the lock
    itself since it runs from the scheduler.
    """

    def __init__(self, replicator: Replicator, scheduler, rules: MatchRules, lock,
                 find_room: Callable[[str], Optional[Room]]):
        self.replicator = replicator
        self.scheduler = scheduler
        self.rules = rules
        self.lock = lock
        self.find_room = find_room

    def set_ready(self, room: Room, sid: str, ready: bool) -> bool:
        """Record a readiness toggle. Returns True when room state changed.

        Un-readying during a countdown aborts it; anything while ACTIVE is ignored.
        """
        if sid not in room.players:
            return False
        if room.phase is RoundPhase.COUNTDOWN:
            if ready:
                return False
            self.force_warmup(room)
            self.replicator.ready_states(room)
            self.replicator.room_list()
            return True
        if room.phase is not RoundPhase.WARMUP:
            return False

        was_ready = sid in room.ready_players
        if ready:
            room.ready_players.add(sid)
        else:
            room.ready_players.discard(sid)
        if was_ready == ready:
            # Still answer with a snapshot so a confused client resyncs
            self.replicator.ready_states(room, sid=sid)
            return False

        self.replicator.ready_states(room)
        self.replicator.room_list()
        self.try_start(room)
        return True

    def try_start(self, room: Room) -> bool:
        if room.phase is not RoundPhase.WARMUP:
            logger.debug(f"[countdown-reject] room={room.id} phase={room.phase.value}")
            return False
        if len(room.players) < MIN_PLAYERS or len(room.ready_players) < MIN_PLAYERS:
            return False

        room.ready_players.clear()
        for player in room.players.values():
            player.reset_for_round(self.rules.max_hp, self.rules.max_projectiles)
        room.phase = RoundPhase.COUNTDOWN

        self.replicator.phase(room)
        for player in room.players.values():
            self.replicator.send(player.id, 'attacked', {'hp': player.hp})
        # Clients drop buffered opponent updates on restartGame, so it must
        # precede the reset states
        self.replicator.to_room(room, 'restartGame')
        for player in room.players.values():
            self.replicator.player_state(room, player)
        self.replicator.ready_states(room)
        self.replicator.room_list()

        room_id = room.id
        task: Optional[ScheduledTask] = None

        def _complete():
            self._on_countdown_complete(room_id, task)

        task = self.scheduler.schedule(self.rules.countdown_duration_ms, _complete, name=f"countdown:{room_id}")
        room.pending_countdown = task
        logger.info(f"[countdown-set] room={room_id} duration={self.rules.countdown_duration_ms}ms")
        return True

    def _on_countdown_complete(self, room_id: str, task: ScheduledTask) -> None:
        with self.lock:
            room = self.find_room(room_id)
            if room is None or room.pending_countdown is not task or room.phase is not RoundPhase.COUNTDOWN:
                logger.info(f"[countdown-abort] room={room_id} stale completion")
                return
            room.pending_countdown = None
            room.phase = RoundPhase.ACTIVE
            logger.info(f"[countdown-fire] room={room_id} round active")
            self.replicator.phase(room)

    def cancel_countdown(self, room: Room) -> bool:
        task = room.pending_countdown
        room.pending_countdown = None
        if task is None:
            return False
        task.cancel()
        logger.info(f"[countdown-cancel] room={room.id}")
        return True

    def cancel_projectiles(self, room: Room) -> None:
        for task in room.pending_projectiles:
            task.cancel()
        room.pending_projectiles.clear()

    def force_warmup(self, room: Room) -> bool:
        """Drop back to WARMUP from COUNTDOWN or ACTIVE, clearing readiness.

        Does not publish readiness; callers follow up with their own snapshot.
        """
        if room.phase is RoundPhase.WARMUP:
            return False
        room.ready_players.clear()
        if room.phase is RoundPhase.COUNTDOWN:
            self.cancel_countdown(room)
            self.replicator.to_room(room, 'roundCountdownCancelled')
        self.cancel_projectiles(room)
        room.phase = RoundPhase.WARMUP
        self.replicator.phase(room)
        return True

    def knockout(self, room: Room, winner_id: str, loser_id: str) -> None:
        logger.info(f"[knockout] room={room.id} winner={winner_id} loser={loser_id}")
        self.replicator.send(winner_id, 'gameover', {'result': 'WIN'})
        self.replicator.send(loser_id, 'gameover', {'result': 'LOSE'})
        self.cancel_projectiles(room)
        room.ready_players.clear()
        room.phase = RoundPhase.WARMUP
        self.replicator.phase(room)
        self.replicator.ready_states(room)
        self.replicator.room_list()

    def close(self, room: Room) -> None:
        """Room is going away: nothing scheduled for it may fire."""
        self.cancel_countdown(room)
        self.cancel_projectiles(room)
