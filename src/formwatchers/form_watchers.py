"""
FormWatchers: the orchestrator.

Owns the options, the external-update flag, the shared debouncer and the
registry of every active watch handle. create_form_watchers() is the public
entry point; it validates its input before installing anything.

Lifecycle:
    create_form_watchers()  -> field watchers for current keys + key-set watcher
    new key in container    -> key-set watcher adds a field watcher for it
    destroy()               -> pending update cancelled, all handles stopped (terminal)
"""
import asyncio
from contextlib import contextmanager
import logging
from typing import Any, Callable, Generator, List, Optional, Set

from formwatchers.config import WatcherOptions
from formwatchers.debounce import Debouncer
from formwatchers.diagnostics import WatcherDiagnostics
from formwatchers.errors import InputValidationError, SchedulerUnavailableError
from formwatchers.field_watcher import WatcherContext, create_field_watcher
from formwatchers.key_watcher import create_key_set_watcher
from formwatchers.origin import OriginClassifier, UpdateOrigin
from formwatchers.reactive import ReactiveDict, WatchHandle

logger = logging.getLogger(__name__)

UpdateCallback = Callable[[str, Any, UpdateOrigin], None]


class FormWatchers:
    """Debounced, origin-aware change forwarding for one ReactiveDict.

    Use create_form_watchers() rather than constructing this directly; the
    factory validates arguments and resolves the scheduler.
    """

    def __init__(
        self,
        container: ReactiveDict,
        on_update: UpdateCallback,
        options: WatcherOptions,
        scheduler: Any,
        diagnostics: WatcherDiagnostics,
    ):
        self.container = container
        self.options = options
        self._on_update = on_update
        self._scheduler = scheduler
        self._diagnostics = diagnostics

        self._external_update = False
        self._destroyed = False
        self._handles: List[WatchHandle] = []
        self._tracked_keys: Set[str] = set()

        self._debouncer = Debouncer(self._forward_update, options.debounce_delay, scheduler)
        self._context = WatcherContext(
            options=options,
            classifier=OriginClassifier(lambda: self._external_update, options.classify_external),
            debouncer=self._debouncer,
            diagnostics=diagnostics,
            is_destroyed=lambda: self._destroyed,
        )

        try:
            key_set_handle = create_key_set_watcher(
                container,
                self._context,
                is_tracked=self._tracked_keys.__contains__,
                track_key=self._track_key,
            )
        except BaseException:
            # Attach-time failure (e.g. classify_external raising on fire_on_attach):
            # the caller never gets this object, so nothing may stay subscribed
            self.destroy()
            raise
        self._register(key_set_handle)
        logger.debug(f"Form watchers ready: {len(self._tracked_keys)} key(s), options={options.to_dict()}")

    # ========== STATE ==========

    @property
    def is_destroyed(self) -> bool:
        return self._destroyed

    @property
    def is_external_update(self) -> bool:
        """True inside a mark-as-external scope and until its deferred reset runs."""
        return self._external_update

    @property
    def watched_keys(self) -> Set[str]:
        """Keys that currently have a field watcher (excluded keys are not included)."""
        return {key for key in self._tracked_keys if not self.options.is_excluded(key)}

    # ========== WATCHER REGISTRY ==========

    def _register(self, handle: Optional[WatchHandle]) -> None:
        if handle is None:
            return
        if self._destroyed:
            # Created after destroy() from inside a callback: stop it right away
            handle.stop()
            return
        self._handles.append(handle)

    def _track_key(self, key: str) -> None:
        self._tracked_keys.add(key)
        self._register(create_field_watcher(self.container, key, self._context))

    # ========== FORWARDING ==========

    def _forward_update(self, key: str, value: Any, origin: UpdateOrigin) -> None:
        # destroy() may have raced the timer
        if self._destroyed:
            return
        self._diagnostics.debounced_update(key, value, origin)
        try:
            self._on_update(key, value, origin)
        except Exception as e:
            logger.warning(f"Error in update callback for {key!r}: {e}")

    # ========== EXTERNAL UPDATES ==========

    def mark_update_as_external(self, mutator: Callable[[], Any]) -> None:
        """Run mutator with the external-update flag set.

        Changes made by mutator are classified EXTERNAL (and dropped when
        skip_external_updates is on). The flag is cleared on the scheduler's
        next turn, after the current synchronous work. If mutator raises, the
        flag is cleared immediately and the error propagates.
        """
        self._external_update = True
        try:
            mutator()
        except BaseException:
            self._external_update = False
            raise
        self._scheduler.call_soon(self._reset_external_update)

    @contextmanager
    def external_update(self) -> Generator[None, None, None]:
        """Context-manager form of mark_update_as_external().

        Example:
            with watchers.external_update():
                form.update(saved_profile)
        """
        self._external_update = True
        try:
            yield
        except BaseException:
            self._external_update = False
            raise
        self._scheduler.call_soon(self._reset_external_update)

    def _reset_external_update(self) -> None:
        self._external_update = False

    # ========== TEARDOWN ==========

    def destroy(self) -> None:
        """Stop all watchers and cancel any pending update. Idempotent."""
        if self._destroyed:
            return
        self._destroyed = True
        self._diagnostics.destroyed()
        self._debouncer.cancel()

        handles, self._handles = self._handles, []
        for handle in handles:
            handle.stop()
        logger.debug(f"Destroyed form watchers: stopped {len(handles)} watcher(s)")


def _resolve_scheduler(scheduler: Any) -> Any:
    if scheduler is not None:
        return scheduler
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        raise SchedulerUnavailableError(
            "create_form_watchers() needs a running asyncio event loop or an explicit scheduler"
        ) from None


def create_form_watchers(
    container: ReactiveDict,
    on_update: UpdateCallback,
    *,
    scheduler: Any = None,
    diagnostics_logger: Optional[logging.Logger] = None,
    **options: Any,
) -> FormWatchers:
    """Watch every key of container and forward debounced changes to on_update.

    Args:
        container: The ReactiveDict to observe. Keys added later are picked up.
        on_update: Called as on_update(key, value, origin) with the most
            recent change once debounce_delay seconds pass without another.
        scheduler: Object with call_later()/call_soon() (an asyncio loop).
            Defaults to the running event loop.
        diagnostics_logger: Logger for diagnostic events (default formwatchers.diagnostics).
        **options: WatcherOptions fields: debounce_delay, fire_on_attach,
            skip_external_updates, classify_external, diagnostics, excluded_keys.

    Returns:
        FormWatchers exposing mark_update_as_external(), external_update()
        and destroy().

    Raises:
        InputValidationError: Malformed container, callback or options.
        SchedulerUnavailableError: No scheduler given and no running event loop.
    """
    if container is None or not isinstance(container, ReactiveDict):
        raise InputValidationError("container must be a ReactiveDict")
    if not callable(on_update):
        raise InputValidationError("on_update must be a function")
    watcher_options = WatcherOptions.from_kwargs(**options)
    scheduler = _resolve_scheduler(scheduler)

    diagnostics = WatcherDiagnostics(watcher_options.diagnostics, diagnostics_logger)
    return FormWatchers(container, on_update, watcher_options, scheduler, diagnostics)
