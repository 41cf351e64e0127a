"""Trailing-edge debouncing on a single-threaded scheduler."""

import logging
from typing import Any, Callable, Optional, Tuple

logger = logging.getLogger(__name__)


class Debouncer:
    """Coalesce repeated schedule() calls into one trailing invocation.

    Only one call is ever pending. Each schedule() cancels the pending call
    and replaces it, so the wrapped function runs with the arguments of the
    last schedule() once `delay` seconds pass without another one.

    The scheduler is anything exposing the asyncio event loop's
    ``call_later(delay, fn, *args)`` returning a cancellable handle.
    """

    def __init__(self, func: Callable[..., Any], delay: float, scheduler: Any):
        self.func = func
        self.delay = delay
        self._scheduler = scheduler
        self._handle = None
        self._pending_args: Optional[Tuple[Any, ...]] = None

    @property
    def pending(self) -> bool:
        """True while a call is scheduled and has not fired yet."""
        return self._handle is not None

    def schedule(self, *args: Any) -> None:
        """Schedule func(*args), superseding any call already pending."""
        if self._handle is not None:
            self._handle.cancel()
        self._pending_args = args
        self._handle = self._scheduler.call_later(self.delay, self._fire)

    def cancel(self) -> None:
        """Drop the pending call without invoking it."""
        if self._handle is not None:
            self._handle.cancel()
            logger.debug(f"Cancelled pending debounced call: {self._pending_args!r}")
        self._handle = None
        self._pending_args = None

    def _fire(self) -> None:
        args = self._pending_args
        self._handle = None
        self._pending_args = None
        self.func(*args)
