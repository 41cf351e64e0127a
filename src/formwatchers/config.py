"""
Watcher configuration.

WatcherOptions is immutable after construction and shared by reference with
every watcher created for one FormWatchers instance.
"""
from dataclasses import dataclass, field, fields
from numbers import Real
from typing import Any, Callable, Dict, FrozenSet, Optional

from formwatchers.errors import InputValidationError

DEFAULT_DEBOUNCE_DELAY = 0.5


def _validate_excluded_keys(excluded_keys: Any) -> FrozenSet[str]:
    """Normalize excluded_keys to a frozenset, rejecting strings and non-str items."""
    if isinstance(excluded_keys, (str, bytes)) or not isinstance(
        excluded_keys, (list, tuple, set, frozenset)
    ):
        raise InputValidationError("excluded_keys option must be a sequence of strings")
    for key in excluded_keys:
        if not isinstance(key, str):
            raise InputValidationError(
                f"excluded_keys option must contain only strings, got {type(key).__name__}"
            )
    return frozenset(excluded_keys)


@dataclass(frozen=True)
class WatcherOptions:
    """Options accepted by create_form_watchers().

    Attributes:
        debounce_delay: Seconds of quiet before the pending update is forwarded.
        fire_on_attach: Forward each field's current value once when its
            watcher attaches (debounced like any other change).
        skip_external_updates: Drop changes classified as external.
        classify_external: Optional (key, new, old) -> bool heuristic that
            marks a change external. Consulted only when the external-update
            flag is not set.
        diagnostics: Emit structured diagnostic log records.
        excluded_keys: Keys that are never watched.
    """
    debounce_delay: float = DEFAULT_DEBOUNCE_DELAY
    fire_on_attach: bool = False
    skip_external_updates: bool = True
    classify_external: Optional[Callable[[str, Any, Any], bool]] = None
    diagnostics: bool = False
    excluded_keys: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        # Frozen dataclass: normalize through object.__setattr__
        object.__setattr__(self, 'excluded_keys', _validate_excluded_keys(self.excluded_keys))

        delay = self.debounce_delay
        if isinstance(delay, bool) or not isinstance(delay, Real) or delay < 0:
            raise InputValidationError(
                f"debounce_delay option must be a non-negative number of seconds, got {delay!r}"
            )

        if self.classify_external is not None and not callable(self.classify_external):
            raise InputValidationError("classify_external option must be a function")

    @classmethod
    def from_kwargs(cls, **kwargs: Any) -> 'WatcherOptions':
        """Build options from keyword arguments, rejecting unknown names."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(kwargs) - known)
        if unknown:
            raise InputValidationError(f"Unknown option(s): {', '.join(unknown)}")
        return cls(**kwargs)

    def is_excluded(self, key: str) -> bool:
        return key in self.excluded_keys

    def to_dict(self) -> Dict[str, Any]:
        """Export as a plain dict (excluded_keys sorted for stable output)."""
        return {
            'debounce_delay': self.debounce_delay,
            'fire_on_attach': self.fire_on_attach,
            'skip_external_updates': self.skip_external_updates,
            'classify_external': self.classify_external,
            'diagnostics': self.diagnostics,
            'excluded_keys': sorted(self.excluded_keys),
        }
