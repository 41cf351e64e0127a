"""
Origin classification for observed changes.

A change is either USER (made by the application's own editing logic) or
EXTERNAL (applied programmatically inside a mark-as-external scope, or
recognized as such by a caller-supplied heuristic).
"""
from enum import Enum
from typing import Any, Callable, Optional


class UpdateOrigin(str, Enum):
    """Where a change came from. Compares equal to its string value."""
    USER = 'user'
    EXTERNAL = 'external'

    def __str__(self) -> str:
        return self.value


class OriginClassifier:
    """Decide USER vs EXTERNAL for one change.

    Priority:
        1. External-update flag set -> EXTERNAL (explicit scoped intent wins)
        2. Custom classifier configured -> its boolean verdict
        3. Otherwise -> USER
    """

    def __init__(
        self,
        is_external_flag_set: Callable[[], bool],
        classify_external: Optional[Callable[[str, Any, Any], bool]] = None,
    ):
        self._is_external_flag_set = is_external_flag_set
        self._classify_external = classify_external

    def classify(self, key: str, new_value: Any, old_value: Any) -> UpdateOrigin:
        if self._is_external_flag_set():
            return UpdateOrigin.EXTERNAL
        if self._classify_external is not None:
            if self._classify_external(key, new_value, old_value):
                return UpdateOrigin.EXTERNAL
            return UpdateOrigin.USER
        return UpdateOrigin.USER
