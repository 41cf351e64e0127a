"""Tests for the trailing-edge Debouncer."""
from formwatchers import Debouncer


def test_fires_once_after_delay(scheduler):
    calls = []
    debouncer = Debouncer(lambda *args: calls.append(args), 0.1, scheduler)

    debouncer.schedule("name", "J")
    scheduler.advance(0.099)
    assert calls == []
    assert debouncer.pending

    scheduler.advance(0.002)
    assert calls == [("name", "J")]
    assert not debouncer.pending


def test_last_arguments_win(scheduler):
    calls = []
    debouncer = Debouncer(lambda *args: calls.append(args), 0.1, scheduler)

    debouncer.schedule("name", "J")
    scheduler.advance(0.05)
    debouncer.schedule("name", "Jo")
    scheduler.advance(0.05)
    debouncer.schedule("email", "j@x.io")
    scheduler.advance(0.1)

    assert calls == [("email", "j@x.io")]
    assert scheduler.pending_timers == 0


def test_separate_windows_fire_separately(scheduler):
    calls = []
    debouncer = Debouncer(lambda *args: calls.append(args), 0.1, scheduler)

    debouncer.schedule(1)
    scheduler.advance(0.2)
    debouncer.schedule(2)
    scheduler.advance(0.2)

    assert calls == [(1,), (2,)]


def test_cancel_discards_pending_call(scheduler):
    calls = []
    debouncer = Debouncer(lambda *args: calls.append(args), 0.1, scheduler)

    debouncer.schedule("x")
    debouncer.cancel()
    scheduler.run_all()

    assert calls == []
    assert not debouncer.pending


def test_cancel_without_pending_call_is_noop(scheduler):
    debouncer = Debouncer(lambda: None, 0.1, scheduler)
    debouncer.cancel()
    assert not debouncer.pending
