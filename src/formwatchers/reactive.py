"""
Reactive containers and the watch() primitive.

Python has no notifying mapping type, so this module provides the minimal
one the watchers are built on:

- ReactiveDict / ReactiveList: containers that notify their listeners
  synchronously after every mutation. Plain dict/list values stored in them
  are wrapped, and nested mutations propagate to every parent container.
- watch(): re-evaluates a getter whenever its source notifies and calls back
  with (new, old) only when the result actually changed.

Example:
    >>> form = ReactiveDict(name="", tags=[])
    >>> handle = watch(lambda: form["tags"],
    ...                lambda new, old: print(to_plain(new), old),
    ...                source=form, deep=True)
    >>> form["tags"].append("vip")
    ['vip'] []
    >>> handle.stop()
"""
from collections.abc import MutableMapping, MutableSequence
import logging
import math
from typing import Any, Callable, Dict, Iterator, List

logger = logging.getLogger(__name__)


class _Missing:
    """Sentinel for "no value": an absent key or a watcher's first run."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return 'MISSING'

    def __bool__(self) -> bool:
        return False

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __reduce__(self):
        return 'MISSING'


MISSING = _Missing()


class _Reactive:
    """Listener bookkeeping shared by the reactive containers."""

    def __init__(self):
        self._listeners: List[Callable[[], None]] = []

    def subscribe(self, listener: Callable[[], None]) -> None:
        """Call listener (no arguments) after every mutation of this container."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: Callable[[], None]) -> None:
        """Remove one subscription of listener, if present."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        # Copy: listeners may subscribe or stop while we iterate
        for listener in list(self._listeners):
            try:
                listener()
            except Exception as e:
                logger.warning(f"Reactive listener failed: {e}")

    def _link(self, value: Any) -> None:
        # A child stored twice is subscribed twice, so releasing one slot keeps the other live
        if isinstance(value, _Reactive):
            value.subscribe(self._notify)

    def _release(self, value: Any) -> None:
        if isinstance(value, _Reactive):
            value.unsubscribe(self._notify)


class ReactiveDict(_Reactive, MutableMapping):
    """String-keyed mapping that notifies listeners after each mutation."""

    def __init__(self, *args, **kwargs):
        _Reactive.__init__(self)
        self._data: Dict[str, Any] = {}
        for key, value in dict(*args, **kwargs).items():
            value = reactive(value)
            self._data[key] = value
            self._link(value)

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        old = self._data.get(key, MISSING)
        value = reactive(value)
        self._data[key] = value
        self._link(value)
        self._release(old)
        self._notify()

    def __delitem__(self, key: str) -> None:
        old = self._data.pop(key)
        self._release(old)
        self._notify()

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"ReactiveDict({self._data!r})"

    def update(self, *args, **kwargs) -> None:
        """Apply all assignments, then notify once."""
        incoming = dict(*args, **kwargs)
        if not incoming:
            return
        for key, value in incoming.items():
            old = self._data.get(key, MISSING)
            value = reactive(value)
            self._data[key] = value
            self._link(value)
            self._release(old)
        self._notify()

    def clear(self) -> None:
        """Remove every key, then notify once."""
        if not self._data:
            return
        for value in self._data.values():
            self._release(value)
        self._data.clear()
        self._notify()


class ReactiveList(_Reactive, MutableSequence):
    """List that notifies listeners after each mutation."""

    def __init__(self, iterable=()):
        _Reactive.__init__(self)
        self._items: List[Any] = [reactive(v) for v in iterable]
        for item in self._items:
            self._link(item)

    def __getitem__(self, index):
        return self._items[index]

    def __setitem__(self, index, value) -> None:
        if isinstance(index, slice):
            old = self._items[index]
            new = [reactive(v) for v in value]
            self._items[index] = new
            for item in new:
                self._link(item)
            for item in old:
                self._release(item)
        else:
            old = self._items[index]
            value = reactive(value)
            self._items[index] = value
            self._link(value)
            self._release(old)
        self._notify()

    def __delitem__(self, index) -> None:
        old = self._items[index]
        del self._items[index]
        for item in (old if isinstance(index, slice) else [old]):
            self._release(item)
        self._notify()

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other) -> bool:
        if isinstance(other, (list, ReactiveList)):
            return list(self._items) == list(other)
        return NotImplemented

    __hash__ = None

    def __repr__(self) -> str:
        return f"ReactiveList({self._items!r})"

    def insert(self, index: int, value: Any) -> None:
        value = reactive(value)
        self._items.insert(index, value)
        self._link(value)
        self._notify()


def reactive(value: Any) -> Any:
    """Wrap plain dicts and lists (recursively); return anything else unchanged."""
    if isinstance(value, _Reactive):
        return value
    if isinstance(value, dict):
        return ReactiveDict(value)
    if isinstance(value, list):
        return ReactiveList(value)
    return value


def same_value(a: Any, b: Any) -> bool:
    """Equality for change detection: structural, with NaN equal to NaN."""
    if a is b:
        return True
    if isinstance(a, float) and isinstance(b, float) and math.isnan(a) and math.isnan(b):
        return True
    if isinstance(a, dict) and isinstance(b, dict):
        return a.keys() == b.keys() and all(same_value(a[k], b[k]) for k in a)
    if isinstance(a, list) and isinstance(b, list):
        return len(a) == len(b) and all(same_value(x, y) for x, y in zip(a, b))
    return a == b


def to_plain(value: Any) -> Any:
    """Detached plain copy of a reactive value, used for structural comparison."""
    if isinstance(value, ReactiveDict):
        return {key: to_plain(item) for key, item in value.items()}
    if isinstance(value, ReactiveList):
        return [to_plain(item) for item in value]
    return value


class WatchHandle:
    """Active subscription returned by watch(). stop() is idempotent."""

    __slots__ = ('_source', '_listener', '_active')

    def __init__(self, source: _Reactive):
        self._source = source
        self._listener = None
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def stop(self) -> None:
        """Unsubscribe from the source. No callbacks fire afterwards."""
        if not self._active:
            return
        self._active = False
        if self._listener is not None:
            self._source.unsubscribe(self._listener)
            self._listener = None


def watch(
    getter: Callable[[], Any],
    callback: Callable[[Any, Any], None],
    *,
    source: _Reactive,
    immediate: bool = False,
    deep: bool = False,
) -> WatchHandle:
    """Call callback(new, old) whenever getter() changes after a mutation of source.

    Args:
        getter: Zero-argument selector evaluated against the source.
        callback: Receives the live new value and the previous value. With
            deep=True the previous value is a plain snapshot.
        source: The reactive container whose mutations trigger re-evaluation.
        immediate: Call back once right away with old=MISSING.
        deep: Compare structural snapshots instead of identity/equality of
            the live value, so nested edits count as changes.

    Returns:
        WatchHandle whose stop() detaches the watcher.
    """
    snapshot = to_plain if deep else (lambda value: value)
    handle = WatchHandle(source)
    last = snapshot(getter())

    def run() -> None:
        nonlocal last
        if not handle.active:
            return
        value = getter()
        current = snapshot(value)
        if same_value(current, last):
            return
        old, last = last, current
        callback(value, old)

    handle._listener = run
    source.subscribe(run)
    if immediate:
        try:
            callback(getter(), MISSING)
        except BaseException:
            handle.stop()
            raise
    return handle
