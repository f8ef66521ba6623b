"""Client-side reconciliation layer for the match state stream."""
from .lag_buffer import LagBuffer
from .session import MatchClient
from .view import MatchView, OpponentState

__all__ = ['LagBuffer', 'MatchClient', 'MatchView', 'OpponentState']
