import pytest

from duel.client import LagBuffer, MatchView
from duel.services.match import ManualScheduler


@pytest.fixture()
def clock():
    return ManualScheduler()


@pytest.fixture()
def view(clock):
    v = MatchView(LagBuffer(clock, delay_ms=100))
    v.on_your_id('me')
    return v


def test_own_corrections_apply_immediately(view):
    view.on_player_update({'id': 'me', 'hp': 80, 'projectilesRemaining': 3, 'x': 999})
    assert view.hp == 80
    assert view.projectiles_remaining == 3
    view.on_attacked({'hp': 65})
    assert view.hp == 65
    assert view.lag_buffer.pending_count == 0


def test_opponent_update_waits_for_window(view, clock):
    view.on_player_update({'id': 'them', 'x': 300, 'y': 500, 'hp': 90, 'guarding': True, 'name': 'Rival'})
    assert view.opponent is None
    clock.advance(100)
    assert view.opponent.id == 'them'
    assert (view.opponent.x, view.opponent.hp, view.opponent.name) == (300, 90, 'Rival')
    assert view.opponent.guarding is True


def test_opponent_updates_keep_arrival_order(view, clock):
    view.on_player_update({'id': 'them', 'x': 1})
    clock.advance(10)
    view.on_player_update({'id': 'them', 'x': 2})
    clock.advance(95)
    assert view.opponent.x == 1
    clock.advance(10)
    assert view.opponent.x == 2


def test_opponent_attack_and_projectile_are_buffered(view, clock):
    view.on_opponent_attack({'attackerId': 'them'})
    view.on_projectile_fired({'shooterId': 'them', 'x': 600, 'y': 500, 'direction': 'left', 'color': 1})
    view.on_projectile_fired({'shooterId': 'me', 'x': 200, 'y': 500, 'direction': 'right', 'color': 2})
    assert [p['shooterId'] for p in view.projectiles] == ['me']
    clock.advance(100)
    assert view.opponent.attack_count == 1
    assert [p['shooterId'] for p in view.projectiles] == ['me', 'them']


def test_metadata_applies_immediately(view):
    view.on_round_phase({'phase': 'COUNTDOWN'})
    view.on_ready_states({'readyPlayerIds': ['me'], 'totalPlayers': 2})
    view.on_room_list({'rooms': [{'id': 'arena1', 'playerCount': 1, 'readyCount': 0, 'capacity': 2}]})
    view.on_room_joined({'roomId': 'arena1'})
    assert view.phase == 'COUNTDOWN'
    assert view.ready_player_ids == ['me']
    assert view.rooms[0]['id'] == 'arena1'
    assert view.room_id == 'arena1'


def test_restart_cancels_buffered_items(view, clock):
    view.on_gameover({'result': 'WIN'})
    view.on_player_update({'id': 'them', 'x': 123})
    view.on_restart_game()
    clock.advance(500)
    assert view.opponent is None
    assert view.result is None
    assert view.restarts == 1


def test_latency_pong_measures_rtt(view):
    assert view.on_latency_pong({'clientTime': 1000.0}, now_ms=1042.0) == 42.0
    assert view.on_latency_pong({'clientTime': 'x'}, now_ms=2000.0) == 42.0


def test_player_left_forgets_opponent(view, clock):
    view.on_spawn_info({'id': 'them', 'spawnIndex': 1})
    view.on_spawn_info({'id': 'me', 'spawnIndex': 0})
    assert view.opponent.spawn_index == 1
    assert view.spawn_index == 0
    view.on_player_left({'id': 'them'})
    assert view.opponent is None
