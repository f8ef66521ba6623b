"""Match domain services: rooms, round phases, combat and replication.

Socket handlers call into these; nothing here knows about Flask request
context, only about the Broadcaster it was given.
"""
from .rooms import RoomRegistry
from .rules import MatchRules
from .scheduler import BackgroundScheduler, ManualScheduler, ScheduledTask, make_scheduler

__all__ = [
    'RoomRegistry',
    'MatchRules',
    'BackgroundScheduler',
    'ManualScheduler',
    'ScheduledTask',
    'make_scheduler',
]
