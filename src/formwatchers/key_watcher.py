"""
Key-set watcher: discovers keys added to the container after attach.

There is no native "new key" notification, so the watcher observes the list
of keys and diffs it against the last observed list. Removed keys are
ignored; their field watchers stay registered and simply go quiet.
"""
import logging
from typing import Any, Callable, List

from formwatchers.field_watcher import WatcherContext
from formwatchers.reactive import MISSING, ReactiveDict, WatchHandle, watch

logger = logging.getLogger(__name__)


def create_key_set_watcher(
    container: ReactiveDict,
    context: WatcherContext,
    is_tracked: Callable[[str], bool],
    track_key: Callable[[str], Any],
) -> WatchHandle:
    """Track every current key, then watch the key set for additions.

    Args:
        container: The watched container.
        context: Shared watcher context (options, diagnostics, destroyed check).
        is_tracked: True if a key already has a field watcher (or was excluded).
        track_key: Creates and registers the field watcher for one key.

    Returns:
        Handle of the key-set watcher itself.
    """
    for key in list(container.keys()):
        if not is_tracked(key):
            track_key(key)

    def on_keys_changed(new_keys: List[str], old_keys: Any) -> None:
        if context.is_destroyed():
            return
        previous = set() if old_keys is MISSING else set(old_keys)
        added = [key for key in new_keys if key not in previous and not is_tracked(key)]
        if not added:
            return

        context.diagnostics.keys_added(added)
        for key in added:
            # A field watcher may have destroyed everything from inside this loop
            if context.is_destroyed():
                return
            track_key(key)

    # immediate=True catches keys added between the initial pass and subscription
    handle = watch(
        lambda: list(container.keys()),
        on_keys_changed,
        source=container,
        immediate=True,
        deep=True,
    )
    logger.debug(f"Attached key-set watcher over {len(container)} key(s)")
    return handle
