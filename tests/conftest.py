"""Pytest configuration and shared fixtures."""
import heapq
import itertools
import logging

import pytest

from formwatchers import ReactiveDict


class _Handle:
    """Cancellable callback handle, mirroring asyncio.Handle/TimerHandle."""

    def __init__(self, when, callback, args):
        self.when = when
        self.callback = callback
        self.args = args
        self._cancelled = False

    def cancel(self):
        self._cancelled = True

    def cancelled(self):
        return self._cancelled


class ManualScheduler:
    """Virtual-clock stand-in for an asyncio event loop.

    call_soon() callbacks run on run_soon() and at the start of every
    advance(), before any timer, the way asyncio runs its ready queue ahead of
    timers that are due later.
    """

    def __init__(self):
        self.now = 0.0
        self._ready = []
        self._timers = []
        self._seq = itertools.count()

    def time(self):
        return self.now

    def call_soon(self, callback, *args):
        handle = _Handle(self.now, callback, args)
        self._ready.append(handle)
        return handle

    def call_later(self, delay, callback, *args):
        handle = _Handle(self.now + delay, callback, args)
        heapq.heappush(self._timers, (handle.when, next(self._seq), handle))
        return handle

    def run_soon(self):
        """Run everything queued with call_soon() (the 'next tick')."""
        while self._ready:
            ready, self._ready = self._ready, []
            for handle in ready:
                if not handle.cancelled():
                    handle.callback(*handle.args)

    def advance(self, seconds):
        """Move the clock forward, firing due timers in order."""
        target = self.now + seconds
        self.run_soon()
        while self._timers and self._timers[0][0] <= target:
            when, _, handle = heapq.heappop(self._timers)
            self.now = when
            if not handle.cancelled():
                handle.callback(*handle.args)
            self.run_soon()
        self.now = target

    def run_all(self):
        """Fire every pending timer regardless of delay."""
        self.run_soon()
        while self._timers:
            self.advance(self._timers[0][0] - self.now)

    @property
    def pending_timers(self):
        return sum(1 for _, _, handle in self._timers if not handle.cancelled())


class UpdateRecorder:
    """Records on_update(key, value, origin) calls."""

    def __init__(self):
        self.calls = []

    def __call__(self, key, value, origin):
        self.calls.append((key, value, origin))

    def clear(self):
        self.calls.clear()


@pytest.fixture
def scheduler():
    """Provide a virtual-clock scheduler."""
    return ManualScheduler()


@pytest.fixture
def form():
    """Provide the standard three-field form."""
    return ReactiveDict(name="", email="", age=0)


@pytest.fixture
def updates():
    """Provide a recording update callback."""
    return UpdateRecorder()


@pytest.fixture
def diagnostics_records(caplog):
    """Capture diagnostic records; returns a function listing (event, record) pairs."""
    caplog.set_level(logging.DEBUG, logger="formwatchers")

    def events(name=None):
        found = [r for r in caplog.records if hasattr(r, "form_event")]
        if name is not None:
            found = [r for r in found if r.form_event == name]
        return found

    return events
