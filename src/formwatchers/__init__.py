"""
Debounced, origin-aware watchers for reactive form state.

formwatchers observes a mutable, key-indexed container whose key set can grow
at runtime and forwards changes to a consumer, coalescing bursts of edits into
a single notification and telling user edits apart from programmatic loads.

Key Features:
- One watcher per key, plus automatic discovery of keys added later
- Single shared trailing debounce slot per FormWatchers instance
- "user" vs "external" origin, with a scoped mark-as-external helper
- Excluded keys, optional structured diagnostics, total teardown

Quick Start:
    >>> import asyncio
    >>> from formwatchers import ReactiveDict, create_form_watchers
    >>>
    >>> async def main():
    ...     form = ReactiveDict(name="", email="")
    ...     watchers = create_form_watchers(form, print, debounce_delay=0.1)
    ...     form["name"] = "John"
    ...     await asyncio.sleep(0.2)      # prints: name John user
    ...     watchers.mark_update_as_external(lambda: form.update(email="j@x.io"))
    ...     await asyncio.sleep(0.2)      # nothing: external updates are skipped
    ...     watchers.destroy()
    >>>
    >>> asyncio.run(main())

Modules:
    - reactive: ReactiveDict/ReactiveList containers and the watch() primitive
    - debounce: Trailing-edge Debouncer on an asyncio-style scheduler
    - origin: UpdateOrigin and the OriginClassifier policy
    - config: WatcherOptions
    - diagnostics: Structured diagnostic log events
    - field_watcher: Per-key watcher
    - key_watcher: Key-set watcher (new key discovery)
    - form_watchers: FormWatchers orchestrator and create_form_watchers()
"""

# Reactive state
from formwatchers.reactive import (
    MISSING,
    ReactiveDict,
    ReactiveList,
    WatchHandle,
    reactive,
    to_plain,
    watch,
)

# Building blocks
from formwatchers.debounce import Debouncer
from formwatchers.origin import OriginClassifier, UpdateOrigin
from formwatchers.config import WatcherOptions, DEFAULT_DEBOUNCE_DELAY
from formwatchers.diagnostics import WatcherDiagnostics, DIAGNOSTICS_LOGGER_NAME
from formwatchers.errors import FormWatcherError, InputValidationError, SchedulerUnavailableError

# Orchestrator
from formwatchers.form_watchers import FormWatchers, create_form_watchers

__all__ = [
    # Reactive state
    'MISSING',
    'ReactiveDict',
    'ReactiveList',
    'WatchHandle',
    'reactive',
    'to_plain',
    'watch',
    # Building blocks
    'Debouncer',
    'OriginClassifier',
    'UpdateOrigin',
    'WatcherOptions',
    'DEFAULT_DEBOUNCE_DELAY',
    'WatcherDiagnostics',
    'DIAGNOSTICS_LOGGER_NAME',
    # Errors
    'FormWatcherError',
    'InputValidationError',
    'SchedulerUnavailableError',
    # Orchestrator
    'FormWatchers',
    'create_form_watchers',
]

__version__ = '0.3.0'
__description__ = 'Debounced, origin-aware watchers for reactive form state'
