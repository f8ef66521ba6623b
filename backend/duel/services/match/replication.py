from typing import Callable, List, Optional

from duel.broadcast import Broadcaster, Scope
from duel.models import PlayerState, Room


class Replicator:
    """Fan-out rules for every state change a room produces.

    Player-initiated movement goes to the rest of the room; authoritative
    combat changes go to the whole room, sender included; the room list goes
    to every connection.
    """

    def __init__(self, broadcaster: Broadcaster, list_rooms: Callable[[], List[dict]]):
        self.broadcaster = broadcaster
        self.list_rooms = list_rooms

    def send(self, sid: str, event: str, payload=None) -> None:
        self.broadcaster.publish(Scope.SELF, event, payload, sid=sid)

    def to_room(self, room: Room, event: str, payload=None) -> None:
        self.broadcaster.publish(Scope.ROOM_ALL, event, payload, room_id=room.id)

    def to_others(self, room: Room, sid: str, event: str, payload=None) -> None:
        self.broadcaster.publish(Scope.ROOM_OTHERS, event, payload, sid=sid, room_id=room.id)

    def room_list(self, sid: Optional[str] = None) -> None:
        payload = {'rooms': self.list_rooms()}
        if sid is None:
            self.broadcaster.publish(Scope.GLOBAL, 'roomList', payload)
        else:
            self.send(sid, 'roomList', payload)

    def joined(self, room: Room, player: PlayerState) -> None:
        """Late-join sync in both directions."""
        self.sync_joiner(room, player)
        self.to_others(room, player.id, 'playerUpdate', player.to_dict())
        self.to_others(room, player.id, 'spawnInfo', {'id': player.id, 'spawnIndex': player.spawn_index})

    def sync_joiner(self, room: Room, player: PlayerState) -> None:
        sid = player.id
        self.send(sid, 'roomJoined', {'roomId': room.id})
        self.send(sid, 'playerUpdate', player.to_dict())
        self.send(sid, 'spawnInfo', {'id': sid, 'spawnIndex': player.spawn_index})
        for other in room.others(sid):
            self.send(sid, 'playerUpdate', other.to_dict())
            self.send(sid, 'spawnInfo', {'id': other.id, 'spawnIndex': other.spawn_index})
        self.send(sid, 'roundPhase', {'phase': room.phase.value})

    def player_moved(self, room: Room, player: PlayerState) -> None:
        self.to_others(room, player.id, 'playerUpdate', player.to_dict())

    def player_state(self, room: Room, player: PlayerState) -> None:
        self.to_room(room, 'playerUpdate', player.to_dict())

    def player_left(self, room: Room, sid: str) -> None:
        self.to_room(room, 'playerLeft', {'id': sid})

    def ready_states(self, room: Room, sid: Optional[str] = None) -> None:
        if sid is None:
            self.to_room(room, 'readyStates', room.ready_snapshot())
        else:
            self.send(sid, 'readyStates', room.ready_snapshot())

    def phase(self, room: Room) -> None:
        self.to_room(room, 'roundPhase', {'phase': room.phase.value})
