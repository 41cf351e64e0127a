"""
Optional diagnostic event stream.

When enabled, each watcher event becomes a DEBUG log record on the
``formwatchers.diagnostics`` logger (or a caller-supplied one). Records carry
structured attributes so handlers and tests can filter on them:

    form_event   value_changed | update_skipped | debounced_update |
                 keys_added | destroyed
    form_key, form_old, form_new, form_value, form_origin, form_keys, form_reason

Diagnostics never influence what gets forwarded.
"""
import logging
from typing import Any, Iterable, Optional

DIAGNOSTICS_LOGGER_NAME = 'formwatchers.diagnostics'


class WatcherDiagnostics:
    """Emit diagnostic events if enabled; otherwise every method is a no-op."""

    def __init__(self, enabled: bool = False, logger: Optional[logging.Logger] = None):
        self.enabled = enabled
        self.logger = logger or logging.getLogger(DIAGNOSTICS_LOGGER_NAME)

    def _emit(self, event: str, message: str, **payload: Any) -> None:
        if not self.enabled:
            return
        extra = {'form_event': event}
        extra.update({f'form_{name}': value for name, value in payload.items()})
        self.logger.debug(message, extra=extra)

    def value_changed(self, key: str, old: Any, new: Any, origin: str) -> None:
        self._emit(
            'value_changed',
            f"Value changed for {key}: {old!r} -> {new!r} (origin={origin})",
            key=key, old=old, new=new, origin=str(origin),
        )

    def update_skipped(self, key: str, reason: str = 'external update') -> None:
        self._emit('update_skipped', f"Skipping update for {key}: {reason}", key=key, reason=reason)

    def debounced_update(self, key: str, value: Any, origin: str) -> None:
        self._emit(
            'debounced_update',
            f"Debounced update for {key}: {value!r} from {origin}",
            key=key, value=value, origin=str(origin),
        )

    def keys_added(self, keys: Iterable[str]) -> None:
        keys = list(keys)
        self._emit('keys_added', f"New properties detected: {keys}", keys=keys)

    def destroyed(self) -> None:
        self._emit('destroyed', "Destroying form watchers")
