import logging
from typing import Callable, Set

from duel.services.match.scheduler import ScheduledTask


logger = logging.getLogger(__name__)

DEFAULT_DELAY_MS = 100


class LagBuffer:
    """Delays remote-originated updates by a fixed window.

    Every item waits the same ``delay_ms``, so items apply in arrival order.
    A zero window applies immediately.
    """

    def __init__(self, scheduler, delay_ms: float = DEFAULT_DELAY_MS):
        if delay_ms < 0:
            raise ValueError('delay_ms must be >= 0')
        self.scheduler = scheduler
        self.delay_ms = delay_ms
        self._pending: Set[ScheduledTask] = set()

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def defer(self, callback: Callable, *args, **kwargs):
        if self.delay_ms == 0:
            callback(*args, **kwargs)
            return None

        task = None

        def _apply():
            self._pending.discard(task)
            callback(*args, **kwargs)

        task = self.scheduler.schedule(self.delay_ms, _apply, name='lag-buffer')
        # The scheduler may already have run a zero-length wait
        if task.pending:
            self._pending.add(task)
        return task

    def cancel_all(self) -> int:
        """Cancel everything still waiting. Safe to call at any time."""
        cancelled = 0
        for task in list(self._pending):
            if task.cancel():
                cancelled += 1
        self._pending.clear()
        if cancelled:
            logger.debug(f"[lag-buffer] cancelled={cancelled}")
        return cancelled
