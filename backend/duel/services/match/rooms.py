import logging
import threading
from typing import Dict, List, Optional

from duel.broadcast import Broadcaster
from duel.errors import InvalidRoomId, RoomFull
from duel.models import PlayerState, Room, SPAWN_POSITIONS
from duel.payloads import merge_update, sanitize_room_id
from .combat import CombatResolver
from .phases import MIN_PLAYERS, RoundPhaseMachine
from .replication import Replicator
from .rules import MatchRules


logger = logging.getLogger(__name__)


class RoomRegistry:
    """Owns every room of the process and funnels all membership changes.

    All public methods take ``lock``; socket handlers and scheduled callbacks
    hold it while touching any room.
    """

    def __init__(self, broadcaster: Broadcaster, scheduler, rules: Optional[MatchRules] = None):
        self.rules = rules or MatchRules()
        self.scheduler = scheduler
        self.lock = threading.RLock()
        self.capacity = len(SPAWN_POSITIONS)
        self.rooms: Dict[str, Room] = {}
        self._memberships: Dict[str, str] = {}

        self.replicator = Replicator(broadcaster, self.list_rooms)
        self.broadcaster = broadcaster
        self.phases = RoundPhaseMachine(self.replicator, scheduler, self.rules, self.lock, self.get_room)
        self.combat = CombatResolver(self.replicator, scheduler, self.rules, self.lock, self.get_room, self.phases)

    def get_room(self, room_id: str) -> Optional[Room]:
        return self.rooms.get(room_id)

    def room_of(self, sid: str) -> Optional[Room]:
        room_id = self._memberships.get(sid)
        return self.rooms.get(room_id) if room_id else None

    def list_rooms(self) -> List[dict]:
        with self.lock:
            return [room.to_summary() for room in self.rooms.values()]

    def join(self, sid: str, raw_room_id) -> str:
        """Put ``sid`` into a room, creating the room on first use.

        Raises InvalidRoomId or RoomFull without touching any state.
        """
        room_id = sanitize_room_id(raw_room_id, self.rules.room_id_max_length)
        if room_id is None:
            raise InvalidRoomId()

        with self.lock:
            current = self.room_of(sid)
            if current is not None and current.id == room_id:
                # Rejoin: resend what a fresh joiner would see
                self.replicator.sync_joiner(current, current.players[sid])
                self.replicator.ready_states(current, sid=sid)
                return room_id

            target = self.rooms.get(room_id)
            if target is not None and target.is_full:
                logger.info(f"[room-full] room={room_id} sid={sid}")
                raise RoomFull()

            if current is not None:
                self.leave(sid)

            if target is None:
                target = Room(room_id, capacity=self.capacity)
                self.rooms[room_id] = target
                logger.info(f"[room-create] room={room_id}")

            spawn_index = target.free_spawn_index()
            player = PlayerState(sid, spawn_index, hp=self.rules.max_hp,
                                 projectiles_remaining=self.rules.max_projectiles)
            target.players[sid] = player
            self._memberships[sid] = room_id
            self.broadcaster.enter(sid, room_id)
            logger.info(f"[room-join] room={room_id} sid={sid} spawn={spawn_index}")

            self.replicator.joined(target, player)
            self.replicator.ready_states(target)
            self.replicator.room_list()
            return room_id

    def leave(self, sid: str) -> Optional[PlayerState]:
        """Remove ``sid`` from its room. No-op when it is not in one."""
        with self.lock:
            room_id = self._memberships.pop(sid, None)
            room = self.rooms.get(room_id) if room_id else None
            if room is None:
                return None

            player = room.players.pop(sid, None)
            room.ready_players.discard(sid)
            self.broadcaster.exit(sid, room.id)
            logger.info(f"[room-leave] room={room.id} sid={sid} remaining={len(room.players)}")

            if room.is_empty:
                self.phases.close(room)
                del self.rooms[room.id]
                logger.info(f"[room-destroy] room={room.id}")
            else:
                self.replicator.player_left(room, sid)
                if len(room.players) < MIN_PLAYERS:
                    self.phases.force_warmup(room)
                self.replicator.ready_states(room)
            self.replicator.room_list()
            return player

    def leave_room(self, sid: str) -> Optional[str]:
        """Explicit leave: ``leave`` plus a private ``roomLeft`` reply."""
        with self.lock:
            room = self.room_of(sid)
            if room is None:
                return None
            self.leave(sid)
            self.replicator.send(sid, 'roomLeft', {'roomId': room.id})
            return room.id

    def set_ready(self, sid: str, ready: bool) -> bool:
        with self.lock:
            room = self.room_of(sid)
            if room is None:
                return False
            return self.phases.set_ready(room, sid, ready)

    def update_player(self, sid: str, data) -> Optional[PlayerState]:
        with self.lock:
            room = self.room_of(sid)
            if room is None:
                return None
            player = merge_update(room.players[sid], data, self.rules.max_hp, self.rules.name_max_length)
            self.replicator.player_moved(room, player)
            return player

    def attack(self, sid: str, data) -> None:
        with self.lock:
            room = self.room_of(sid)
            if room is not None:
                self.combat.melee(room, sid, data)

    def fire_projectile(self, sid: str, data):
        with self.lock:
            room = self.room_of(sid)
            if room is None:
                return None
            return self.combat.fire_projectile(room, sid, data)

    def close(self) -> None:
        """Cancel every pending timer; used on app teardown."""
        with self.lock:
            for room in self.rooms.values():
                self.phases.close(room)
            self.rooms.clear()
            self._memberships.clear()
