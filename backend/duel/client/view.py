"""Client-side reconciliation of the server's state stream.

The server is authoritative. Opponent-originated updates are pushed through a
LagBuffer before they touch presentation state; corrections about the local
player and room metadata apply as soon as they arrive.
"""
from typing import Any, Dict, List, Optional

from .lag_buffer import LagBuffer


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class OpponentState:
    def __init__(self, id: str):
        self.id = id
        self.x = None
        self.y = None
        self.hp = 100
        self.guarding = False
        self.color = 0x000000
        self.name = ''
        self.projectiles_remaining = 5
        self.spawn_index = None
        self.attack_count = 0


class MatchView:
    def __init__(self, lag_buffer: LagBuffer):
        self.lag_buffer = lag_buffer
        self.my_id: Optional[str] = None
        self.room_id: Optional[str] = None
        self.hp = 100
        self.projectiles_remaining = 5
        self.spawn_index: Optional[int] = None
        self.opponent: Optional[OpponentState] = None
        self.phase = 'WARMUP'
        self.ready_player_ids: List[str] = []
        self.total_players = 0
        self.rooms: List[Dict[str, Any]] = []
        self.join_error: Optional[str] = None
        self.result: Optional[str] = None
        self.projectiles: List[Dict[str, Any]] = []
        self.countdown_cancelled = 0
        self.restarts = 0
        self.last_rtt_ms: Optional[float] = None

    # -- identity and metadata, applied immediately --

    def on_your_id(self, sid):
        self.my_id = sid

    def on_room_list(self, data):
        self.rooms = list((data or {}).get('rooms') or [])

    def on_room_joined(self, data):
        self.room_id = (data or {}).get('roomId')
        self.join_error = None

    def on_room_join_error(self, data):
        self.join_error = (data or {}).get('message')

    def on_room_left(self, data):
        self.room_id = None
        self.opponent = None
        self.lag_buffer.cancel_all()

    def on_ready_states(self, data):
        data = data or {}
        self.ready_player_ids = list(data.get('readyPlayerIds') or [])
        self.total_players = data.get('totalPlayers', self.total_players)

    def on_round_phase(self, data):
        phase = (data or {}).get('phase')
        if isinstance(phase, str):
            self.phase = phase

    def on_round_countdown_cancelled(self, data=None):
        self.countdown_cancelled += 1

    def on_restart_game(self, data=None):
        self.restarts += 1
        self.lag_buffer.cancel_all()
        self.result = None
        self.projectiles.clear()

    def on_spawn_info(self, data):
        data = data or {}
        sid = data.get('id')
        if sid is None:
            return
        if sid == self.my_id:
            self.spawn_index = data.get('spawnIndex')
        else:
            self._opponent(sid).spawn_index = data.get('spawnIndex')

    def on_player_left(self, data):
        sid = (data or {}).get('id')
        if self.opponent is not None and self.opponent.id == sid:
            self.opponent = None
            self.lag_buffer.cancel_all()

    def on_latency_pong(self, data, now_ms: float):
        client_time = (data or {}).get('clientTime')
        if _is_number(client_time):
            self.last_rtt_ms = max(0.0, now_ms - client_time)
        return self.last_rtt_ms

    # -- authoritative corrections for the local player --

    def on_attacked(self, data):
        hp = (data or {}).get('hp')
        if _is_number(hp):
            self.hp = hp

    def on_gameover(self, data):
        self.result = (data or {}).get('result')

    # -- possibly remote-originated, buffered when they are --

    def on_player_update(self, data):
        data = data or {}
        sid = data.get('id')
        if not sid:
            return
        if sid == self.my_id:
            if _is_number(data.get('hp')):
                self.hp = data['hp']
            if _is_number(data.get('projectilesRemaining')):
                self.projectiles_remaining = data['projectilesRemaining']
            return
        self.lag_buffer.defer(self._apply_opponent_update, dict(data))

    def on_opponent_attack(self, data):
        attacker_id = (data or {}).get('attackerId')
        if not attacker_id or attacker_id == self.my_id:
            return
        self.lag_buffer.defer(self._apply_opponent_attack, attacker_id)

    def on_projectile_fired(self, data):
        data = data or {}
        if not data.get('shooterId'):
            return
        if data['shooterId'] == self.my_id:
            self.projectiles.append(dict(data))
        else:
            self.lag_buffer.defer(self.projectiles.append, dict(data))

    def _opponent(self, sid: str) -> OpponentState:
        if self.opponent is None or self.opponent.id != sid:
            self.opponent = OpponentState(sid)
        return self.opponent

    def _apply_opponent_update(self, data):
        opponent = self._opponent(data['id'])
        if _is_number(data.get('x')):
            opponent.x = data['x']
        if _is_number(data.get('y')):
            opponent.y = data['y']
        if _is_number(data.get('hp')):
            opponent.hp = data['hp']
        opponent.guarding = bool(data.get('guarding'))
        if _is_number(data.get('color')):
            opponent.color = data['color']
        if isinstance(data.get('name'), str):
            opponent.name = data['name']
        if _is_number(data.get('projectilesRemaining')):
            opponent.projectiles_remaining = data['projectilesRemaining']

    def _apply_opponent_attack(self, attacker_id):
        self._opponent(attacker_id).attack_count += 1
