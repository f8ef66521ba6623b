import logging
import threading
import time
from typing import Optional

import socketio

from duel.services.match.scheduler import BackgroundScheduler
from .lag_buffer import DEFAULT_DELAY_MS, LagBuffer
from .view import MatchView


logger = logging.getLogger(__name__)


def now_ms() -> float:
    return time.time() * 1000.0


class MatchClient:
    """python-socketio client bound to a MatchView.

    Every server message updates ``view``; the methods below are the client's
    side of the protocol.
    """

    def __init__(self, namespace: str = '/ws', lag_buffer_ms: float = DEFAULT_DELAY_MS,
                 sio: Optional[socketio.Client] = None, scheduler=None):
        self.namespace = namespace
        self.sio = sio or socketio.Client(reconnection=False)
        self.view = MatchView(LagBuffer(scheduler or BackgroundScheduler(self.sio), lag_buffer_ms))
        self._pong = threading.Event()
        self._bind()

    def _bind(self):
        view = self.view
        handlers = {
            'yourId': view.on_your_id,
            'roomList': view.on_room_list,
            'roomJoined': view.on_room_joined,
            'roomJoinError': view.on_room_join_error,
            'roomLeft': view.on_room_left,
            'spawnInfo': view.on_spawn_info,
            'readyStates': view.on_ready_states,
            'roundPhase': view.on_round_phase,
            'roundCountdownCancelled': view.on_round_countdown_cancelled,
            'playerUpdate': view.on_player_update,
            'opponentAttack': view.on_opponent_attack,
            'projectileFired': view.on_projectile_fired,
            'attacked': view.on_attacked,
            'gameover': view.on_gameover,
            'restartGame': view.on_restart_game,
            'playerLeft': view.on_player_left,
            'latencyPong': self._on_latency_pong,
        }
        for event, handler in handlers.items():
            self.sio.on(event, handler, namespace=self.namespace)

    def _on_latency_pong(self, data):
        rtt = self.view.on_latency_pong(data, now_ms())
        logger.debug(f"[latency] rtt={rtt}")
        self._pong.set()

    def connect(self, url: str) -> None:
        self.sio.connect(url, namespaces=[self.namespace])

    def disconnect(self) -> None:
        self.view.lag_buffer.cancel_all()
        self.sio.disconnect()

    def _emit(self, event: str, payload=None) -> None:
        if payload is None:
            self.sio.emit(event, namespace=self.namespace)
        else:
            self.sio.emit(event, payload, namespace=self.namespace)

    def request_room_list(self) -> None:
        self._emit('requestRoomList')

    def join_room(self, room_id: str) -> None:
        self._emit('joinRoom', {'roomId': room_id})

    def leave_room(self) -> None:
        self._emit('leaveRoom')

    def set_ready(self, ready: bool = True) -> None:
        self._emit('setReadyState', {'ready': bool(ready)})

    def send_update(self, **fields) -> None:
        """Any subset of x, y, hp, guarding, color, name."""
        self._emit('update', fields)

    def attack(self, x: float, y: float) -> None:
        self._emit('attack', {'x': x, 'y': y})

    def fire_projectile(self, direction: str = 'right') -> None:
        self._emit('projectile', {'direction': direction})

    def probe_latency(self, timeout: float = 2.0) -> Optional[float]:
        """Round-trip time in ms, or None if no pong came back in time."""
        self._pong.clear()
        self._emit('latencyTest', {'clientTime': now_ms()})
        if not self._pong.wait(timeout):
            return None
        return self.view.last_rtt_ms
