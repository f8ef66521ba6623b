import heapq
import itertools
import logging
from typing import Callable, List, Tuple


logger = logging.getLogger(__name__)


class ScheduledTask:
    """Handle for a delayed callback.

    Cancelling is final: a cancelled task never invokes its callback, even if
    its timer is already sleeping.
    """

    def __init__(self, name: str, delay_ms: float, callback: Callable[[], None]):
        self.name = name
        self.delay_ms = delay_ms
        self.callback = callback
        self.cancelled = False
        self.fired = False

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)

    def cancel(self) -> bool:
        """Returns True when this call prevented the callback from running."""
        if not self.pending:
            return False
        self.cancelled = True
        return True

    def run(self) -> bool:
        if not self.pending:
            logger.debug(f"[timer-skip] task={self.name} cancelled={self.cancelled}")
            return False
        self.fired = True
        self.callback()
        return True

    def __repr__(self):
        state = 'cancelled' if self.cancelled else 'fired' if self.fired else 'pending'
        return f"<ScheduledTask {self.name} {self.delay_ms:.0f}ms {state}>"


class BackgroundScheduler:
    """Runs each task in its own Socket.IO background task.

    Works with anything exposing ``start_background_task`` and ``sleep``:
    the server's ``SocketIO`` instance or a ``socketio.Client``.
    """

    def __init__(self, sio):
        self.sio = sio

    def schedule(self, delay_ms: float, callback: Callable[[], None], name: str = 'task') -> ScheduledTask:
        task = ScheduledTask(name, delay_ms, callback)
        self.sio.start_background_task(self._worker, task)
        return task

    def _worker(self, task: ScheduledTask) -> None:
        if task.delay_ms > 0:
            self.sio.sleep(task.delay_ms / 1000.0)
        try:
            task.run()
        except Exception:
            # A background task has nobody to propagate to
            logger.exception(f"[timer-error] task={task.name}")


class ManualScheduler:
    """Virtual clock; tasks only run when ``advance`` moves time past them."""

    def __init__(self):
        self.now_ms = 0.0
        self._queue: List[Tuple[float, int, ScheduledTask]] = []
        self._seq = itertools.count()

    def schedule(self, delay_ms: float, callback: Callable[[], None], name: str = 'task') -> ScheduledTask:
        task = ScheduledTask(name, delay_ms, callback)
        heapq.heappush(self._queue, (self.now_ms + max(0.0, delay_ms), next(self._seq), task))
        return task

    def advance(self, ms: float) -> int:
        """Move the clock forward, running due tasks in due order. Returns how many ran."""
        target = self.now_ms + ms
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, task = heapq.heappop(self._queue)
            self.now_ms = max(self.now_ms, due)
            if task.run():
                ran += 1
        self.now_ms = target
        return ran

    def pending(self) -> List[ScheduledTask]:
        return [task for _, _, task in sorted(self._queue) if task.pending]


def make_scheduler(mode: str, sio):
    if mode == 'manual':
        return ManualScheduler()
    if mode == 'background':
        return BackgroundScheduler(sio)
    raise ValueError(f"unknown scheduler mode: {mode!r}")
