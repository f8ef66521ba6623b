"""Client payload parsing.

Every numeric or string field is optional. A missing or malformed field keeps
the value the server already holds; nothing here rejects a payload outright.
"""
from typing import Any, Dict, Optional, Tuple

from duel.models import Direction, PlayerState


def _number(value: Any) -> Optional[float]:
    # bool is an int subclass but never a coordinate
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        as_float = float(value)
    except OverflowError:
        return None
    if as_float != as_float or as_float in (float('inf'), float('-inf')):
        return None
    return value


def _integer(value: Any) -> Optional[int]:
    number = _number(value)
    return None if number is None else int(number)


def _mapping(data: Any) -> Dict[str, Any]:
    return data if isinstance(data, dict) else {}


def clamp(value, lo, hi):
    return max(lo, min(hi, value))


def sanitize_name(value: Any, max_length: int) -> Optional[str]:
    if not isinstance(value, str):
        return None
    return value.strip()[:max_length]


def sanitize_room_id(value: Any, max_length: int) -> Optional[str]:
    """Trimmed and truncated room id, or None when nothing usable is left."""
    if not isinstance(value, str):
        return None
    room_id = value.strip()[:max_length].strip()
    return room_id or None


def merge_update(state: PlayerState, data: Any, max_hp: int, name_max_length: int) -> PlayerState:
    """Apply an ``update`` message to ``state`` in place.

    Projectile count and spawn slot are server-owned and never taken from the
    client.
    """
    data = _mapping(data)

    x = _number(data.get('x'))
    if x is not None:
        state.x = x
    y = _number(data.get('y'))
    if y is not None:
        state.y = y

    hp = _integer(data.get('hp'))
    if hp is not None:
        state.hp = clamp(hp, 0, max_hp)

    guarding = data.get('guarding')
    if isinstance(guarding, bool):
        state.guarding = guarding

    color = _integer(data.get('color'))
    if color is not None:
        state.color = clamp(color, 0, 0xFFFFFF)

    name = sanitize_name(data.get('name'), name_max_length)
    if name is not None:
        state.display_name = name

    return state


def parse_attack(state: PlayerState, data: Any) -> Tuple[float, float]:
    """Claimed attacker position; each axis falls back to the held position."""
    data = _mapping(data)
    x = _number(data.get('x'))
    y = _number(data.get('y'))
    return (state.x if x is None else x, state.y if y is None else y)


def parse_projectile(data: Any) -> Direction:
    return Direction.parse(_mapping(data).get('direction'))


def parse_ready(data: Any) -> Optional[bool]:
    ready = _mapping(data).get('ready')
    return ready if isinstance(ready, bool) else None


def parse_client_time(data: Any) -> Optional[float]:
    return _number(_mapping(data).get('clientTime'))
