"""
Per-key field watcher.

Binds one container key to change detection, origin classification,
exclusion filtering and the shared debounced forwarding call.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from formwatchers.config import WatcherOptions
from formwatchers.debounce import Debouncer
from formwatchers.diagnostics import WatcherDiagnostics
from formwatchers.origin import OriginClassifier, UpdateOrigin
from formwatchers.reactive import MISSING, ReactiveDict, WatchHandle, same_value, to_plain, watch

logger = logging.getLogger(__name__)

EXCLUDED_REASON = 'field is excluded'


@dataclass
class WatcherContext:
    """Everything a field watcher needs, shared by reference across all of them.

    is_destroyed is read on every change, so a destroy() that happens while a
    change is in flight stops it before classification.
    """
    options: WatcherOptions
    classifier: OriginClassifier
    debouncer: Debouncer
    diagnostics: WatcherDiagnostics
    is_destroyed: Callable[[], bool]


def create_field_watcher(
    container: ReactiveDict,
    key: str,
    context: WatcherContext,
) -> Optional[WatchHandle]:
    """Watch container[key]; returns None without watching if key is excluded."""
    options = context.options
    if options.is_excluded(key):
        context.diagnostics.update_skipped(key, reason=EXCLUDED_REASON)
        return None

    def on_change(new_value: Any, old_value: Any) -> None:
        if context.is_destroyed():
            return
        # Key removed from the container: the watcher stays, it just goes quiet
        if new_value is MISSING:
            return
        if same_value(to_plain(new_value), old_value):
            return

        origin = context.classifier.classify(key, new_value, old_value)
        context.diagnostics.value_changed(key, old_value, new_value, origin)

        if origin is UpdateOrigin.EXTERNAL and options.skip_external_updates:
            context.diagnostics.update_skipped(key)
            return
        context.debouncer.schedule(key, new_value, origin)

    handle = watch(
        lambda: container.get(key, MISSING),
        on_change,
        source=container,
        immediate=options.fire_on_attach,
        deep=True,
    )
    logger.debug(f"Attached field watcher: {key}")
    return handle
