"""Scheduler semantics: the manual clock used by timing tests and the wall-clock timers."""
import random
import threading

from doudizhu.config import MatchConfig
from doudizhu.events import EventLog, LandlordAssigned, MatchFinished
from doudizhu.game import MatchSession
from doudizhu.scheduler import ManualScheduler, ThreadingScheduler
from doudizhu.state import Phase


def test_tasks_fire_when_due_in_order():
    sched = ManualScheduler()
    fired = []
    sched.schedule(100, lambda: fired.append("a"))
    sched.schedule(50, lambda: fired.append("b"))
    sched.schedule(100, lambda: fired.append("c"))
    assert sched.advance(49) == 0
    assert sched.advance(51) == 3
    assert fired == ["b", "a", "c"]
    assert sched.now_ms == 100


def test_cancelled_task_never_fires():
    sched = ManualScheduler()
    fired = []
    task = sched.schedule(10, lambda: fired.append(1))
    task.cancel()
    assert not task.active
    assert sched.advance(100) == 0
    assert fired == []
    assert sched.pending() == []


def test_nested_scheduling_within_window():
    sched = ManualScheduler()
    fired = []

    def first():
        fired.append(sched.now_ms)
        sched.schedule(10, lambda: fired.append(sched.now_ms))

    sched.schedule(10, first)
    sched.advance(30)
    assert fired == [10, 20]


def test_run_next_jumps_to_deadline():
    sched = ManualScheduler()
    fired = []
    sched.schedule(5000, lambda: fired.append(1))
    assert sched.next_due_ms() == 5000
    assert sched.run_next() is True
    assert fired == [1]
    assert sched.run_next() is False


# ---- Wall clock ----


def test_threading_task_fires_once():
    fired = threading.Event()
    calls = []

    def callback():
        calls.append(1)
        fired.set()

    task = ThreadingScheduler().schedule(10, callback)
    assert fired.wait(timeout=5)
    assert calls == [1]
    assert not task.active


def test_threading_task_cancel_stops_callback():
    fired = threading.Event()
    task = ThreadingScheduler().schedule(50, fired.set)
    assert task.active
    task.cancel()
    assert not task.active
    assert not fired.wait(timeout=0.3)
    task.cancel()


def test_idle_match_finishes_on_wall_clock_timers():
    log = EventLog()
    done = threading.Event()

    def listener(event):
        log(event)
        if isinstance(event, MatchFinished):
            done.set()

    # no scheduler given: the session runs on real timers
    session = MatchSession(
        ["a", "b", "c"],
        config=MatchConfig(bid_timeout_ms=20, turn_timeout_ms=20, max_redeals=0),
        listener=listener,
        rng=random.Random(8),
    )
    assert isinstance(session.scheduler, ThreadingScheduler)
    for pid in ("a", "b", "c"):
        session.ready(pid)

    try:
        assert done.wait(timeout=30)
    finally:
        session.close()

    assert session.phase == Phase.FINISHED
    assert log.last(LandlordAssigned).forced
    assert session.winner_id == session.landlord_id
    assert sum(session.settlement.deltas.values()) == 0
    assert session.is_closed
    assert len(log.of_type(MatchFinished)) == 1
