from flask import current_app, request

from duel.errors import RoomJoinError
from duel.payloads import parse_ready
from duel.services.match import RoomRegistry
from duel.services.match import latency


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


class MatchEvents:
    """Socket.IO handlers for one RoomRegistry."""

    def __init__(self, registry: RoomRegistry):
        self.registry = registry

    def handle_connect(self, auth=None):
        sid = _get_sid()
        current_app.logger.info(f"[connect] sid={sid}")
        self.registry.replicator.send(sid, 'yourId', sid)
        self.registry.replicator.room_list(sid=sid)

    def handle_disconnect(self, reason=None):
        sid = _get_sid()
        current_app.logger.info(f"[disconnect] sid={sid} reason={reason}")
        self.registry.leave(sid)

    def handle_request_room_list(self, data=None):
        self.registry.replicator.room_list(sid=_get_sid())

    def handle_join_room(self, data=None):
        sid = _get_sid()
        raw_room_id = data.get('roomId') if isinstance(data, dict) else None
        try:
            self.registry.join(sid, raw_room_id)
        except RoomJoinError as exc:
            current_app.logger.info(f"[room-join-error] sid={sid} room={raw_room_id!r} error={exc.message}")
            self.registry.replicator.send(sid, 'roomJoinError', {'message': exc.message})

    def handle_leave_room(self, data=None):
        self.registry.leave_room(_get_sid())

    def handle_set_ready_state(self, data=None):
        ready = parse_ready(data)
        if ready is None:
            return
        self.registry.set_ready(_get_sid(), ready)

    def handle_update(self, data=None):
        self.registry.update_player(_get_sid(), data)

    def handle_attack(self, data=None):
        self.registry.attack(_get_sid(), data)

    def handle_projectile(self, data=None):
        self.registry.fire_projectile(_get_sid(), data)

    def handle_latency_test(self, data=None):
        pong = latency.echo(data)
        if pong is not None:
            self.registry.replicator.send(_get_sid(), 'latencyPong', pong)


def register_socketio_handlers(socketio, registry: RoomRegistry, namespace: str = '/ws') -> MatchEvents:
    """Bind every match message to ``registry`` on ``namespace``."""
    events = MatchEvents(registry)
    socketio.on_event('connect', events.handle_connect, namespace=namespace)
    socketio.on_event('disconnect', events.handle_disconnect, namespace=namespace)
    socketio.on_event('requestRoomList', events.handle_request_room_list, namespace=namespace)
    socketio.on_event('joinRoom', events.handle_join_room, namespace=namespace)
    socketio.on_event('leaveRoom', events.handle_leave_room, namespace=namespace)
    socketio.on_event('setReadyState', events.handle_set_ready_state, namespace=namespace)
    socketio.on_event('update', events.handle_update, namespace=namespace)
    socketio.on_event('attack', events.handle_attack, namespace=namespace)
    socketio.on_event('projectile', events.handle_projectile, namespace=namespace)
    socketio.on_event('latencyTest', events.handle_latency_test, namespace=namespace)
    return events
