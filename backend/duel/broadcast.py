from enum import Enum
from typing import Any, Optional


class Scope(Enum):
    SELF = 'self'
    ROOM_OTHERS = 'room-others'
    ROOM_ALL = 'room-all'
    GLOBAL = 'global'


def room_channel(room_id: str) -> str:
    return f"room:{room_id}"


class Broadcaster:
    """Single publish primitive over the Socket.IO server.

    Usable from handlers and from background tasks alike: it only goes through
    the server-level ``socketio.emit`` and room manager.
    """

    def __init__(self, socketio, namespace: str):
        self.socketio = socketio
        self.namespace = namespace

    def publish(self, scope: Scope, event: str, payload: Any = None, *,
                sid: Optional[str] = None, room_id: Optional[str] = None) -> None:
        args = () if payload is None else (payload,)
        if scope is Scope.SELF:
            if sid is None:
                raise ValueError('SELF scope needs a sid')
            self.socketio.emit(event, *args, to=sid, namespace=self.namespace)
        elif scope is Scope.ROOM_OTHERS:
            if sid is None or room_id is None:
                raise ValueError('ROOM_OTHERS scope needs a sid and a room_id')
            self.socketio.emit(event, *args, to=room_channel(room_id), skip_sid=sid, namespace=self.namespace)
        elif scope is Scope.ROOM_ALL:
            if room_id is None:
                raise ValueError('ROOM_ALL scope needs a room_id')
            self.socketio.emit(event, *args, to=room_channel(room_id), namespace=self.namespace)
        else:
            self.socketio.emit(event, *args, namespace=self.namespace)

    def enter(self, sid: str, room_id: str) -> None:
        self.socketio.server.enter_room(sid, room_channel(room_id), namespace=self.namespace)

    def exit(self, sid: str, room_id: str) -> None:
        self.socketio.server.leave_room(sid, room_channel(room_id), namespace=self.namespace)
