import pytest

from duel.client import LagBuffer
from duel.services.match import ManualScheduler


def test_zero_window_applies_immediately():
    applied = []
    buffer = LagBuffer(ManualScheduler(), delay_ms=0)
    buffer.defer(applied.append, 1)
    assert applied == [1]
    assert buffer.pending_count == 0


def test_items_apply_after_window_in_arrival_order():
    clock = ManualScheduler()
    buffer = LagBuffer(clock, delay_ms=100)
    applied = []
    buffer.defer(applied.append, 'first')
    clock.advance(30)
    buffer.defer(applied.append, 'second')
    clock.advance(69)
    assert applied == []
    clock.advance(1)
    assert applied == ['first']
    clock.advance(30)
    assert applied == ['first', 'second']
    assert buffer.pending_count == 0


def test_cancel_all_drops_pending_and_tolerates_fired():
    clock = ManualScheduler()
    buffer = LagBuffer(clock, delay_ms=100)
    applied = []
    buffer.defer(applied.append, 'early')
    clock.advance(100)
    buffer.defer(applied.append, 'late')
    assert buffer.cancel_all() == 1
    assert buffer.cancel_all() == 0
    clock.advance(500)
    assert applied == ['early']


def test_negative_window_rejected():
    with pytest.raises(ValueError):
        LagBuffer(ManualScheduler(), delay_ms=-1)


def test_manual_scheduler_cancelled_task_never_runs():
    clock = ManualScheduler()
    ran = []
    task = clock.schedule(50, lambda: ran.append(True))
    assert task.cancel() is True
    assert task.cancel() is False
    assert clock.advance(100) == 0
    assert ran == []
