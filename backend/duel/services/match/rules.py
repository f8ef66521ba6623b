from typing import Any, Mapping, NamedTuple


class MatchRules(NamedTuple):
    """Tuning constants shared by every match service."""

    countdown_duration_ms: int = 4000
    max_hp: int = 100
    melee_range: float = 60.0
    melee_damage: int = 10
    max_projectiles: int = 5
    projectile_damage: int = 15
    projectile_speed: float = 520.0
    projectile_lifetime_ms: int = 2200
    projectile_range: float = 800.0
    projectile_vertical_tolerance: float = 60.0
    room_id_max_length: int = 32
    name_max_length: int = 16

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> 'MatchRules':
        defaults = cls()
        values = {}
        for field in cls._fields:
            raw = config.get(field.upper(), getattr(defaults, field))
            values[field] = type(getattr(defaults, field))(raw)
        return cls(**values)

    def travel_time_ms(self, distance: float) -> float:
        return min(float(self.projectile_lifetime_ms), distance / self.projectile_speed * 1000.0)
