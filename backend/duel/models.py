from enum import Enum
from typing import Dict, List, Optional, Set


# Fixed starting positions; the number of slots is the room capacity
SPAWN_POSITIONS = [
    {'x': 200, 'y': 500},
    {'x': 600, 'y': 500},
]

DEFAULT_COLOR = 0x000000


class RoundPhase(str, Enum):
    WARMUP = 'WARMUP'
    COUNTDOWN = 'COUNTDOWN'
    ACTIVE = 'ACTIVE'


class Direction(str, Enum):
    LEFT = 'left'
    RIGHT = 'right'

    @classmethod
    def parse(cls, value) -> 'Direction':
        """Anything that is not an explicit 'left' fires to the right."""
        if isinstance(value, str) and value.strip().lower() == cls.LEFT.value:
            return cls.LEFT
        return cls.RIGHT

    @property
    def sign(self) -> int:
        return -1 if self is Direction.LEFT else 1


class PlayerState:
    """Replicated state of one connected participant."""

    def __init__(self, id: str, spawn_index: int, hp: int = 100, projectiles_remaining: int = 5):
        spawn = SPAWN_POSITIONS[spawn_index]
        self.id = id
        self.x = spawn['x']
        self.y = spawn['y']
        self.hp = hp
        self.guarding = False
        self.color = DEFAULT_COLOR
        self.display_name = ''
        self.projectiles_remaining = projectiles_remaining
        self.spawn_index = spawn_index

    @property
    def knocked_out(self) -> bool:
        return self.hp <= 0

    def reset_for_round(self, max_hp: int, max_projectiles: int) -> None:
        spawn = SPAWN_POSITIONS[self.spawn_index]
        self.x = spawn['x']
        self.y = spawn['y']
        self.hp = max_hp
        self.guarding = False
        self.projectiles_remaining = max_projectiles

    def to_dict(self):
        return {
            'id': self.id,
            'x': self.x,
            'y': self.y,
            'hp': self.hp,
            'guarding': self.guarding,
            'color': self.color,
            'name': self.display_name,
            'projectilesRemaining': self.projectiles_remaining,
            'spawnIndex': self.spawn_index,
        }


class Projectile:
    """A shot in flight. Lives only as long as its scheduled impact."""

    def __init__(self, shooter_id: str, origin_x: float, origin_y: float, direction: Direction, color: int):
        self.shooter_id = shooter_id
        self.origin_x = origin_x
        self.origin_y = origin_y
        self.direction = direction
        self.color = color

    def to_dict(self):
        return {
            'shooterId': self.shooter_id,
            'x': self.origin_x,
            'y': self.origin_y,
            'direction': self.direction.value,
            'color': self.color,
        }


class Room:
    """An isolated two-player match. Owned by the RoomRegistry."""

    def __init__(self, id: str, capacity: int = len(SPAWN_POSITIONS)):
        self.id = id
        self.capacity = capacity
        self.players: Dict[str, PlayerState] = {}
        self.ready_players: Set[str] = set()
        self.phase = RoundPhase.WARMUP
        self.pending_countdown = None
        self.pending_projectiles: List = []

    @property
    def is_full(self) -> bool:
        return len(self.players) >= self.capacity

    @property
    def is_empty(self) -> bool:
        return not self.players

    def free_spawn_index(self) -> Optional[int]:
        occupied = {p.spawn_index for p in self.players.values()}
        for index in range(self.capacity):
            if index not in occupied:
                return index
        return None

    def others(self, sid: str) -> List[PlayerState]:
        return [p for pid, p in self.players.items() if pid != sid]

    def ready_snapshot(self):
        # Keep join order so every client sees the same list
        return {
            'readyPlayerIds': [pid for pid in self.players if pid in self.ready_players],
            'totalPlayers': len(self.players),
        }

    def to_summary(self):
        return {
            'id': self.id,
            'playerCount': len(self.players),
            'readyCount': len(self.ready_players),
            'capacity': self.capacity,
        }
