"""
Observable Value Graph
======================

Synchronous change propagation for the solution model.

An ObservableValue is a single mutable cell with an ordered list of
subscribers. A DerivedValue is a read-only cell whose value is a pure
function of one or more source cells. Derived values link to their sources,
so the cells form a directed acyclic graph that settles depth-first before
the mutating call returns.

PROPAGATION RULES
=================

1. set(v) notifies only when v differs from the current value:
   - numbers, strings, bools, None and enum members compare by value
   - everything else compares by identity (unless use_deep_equality=True)

2. Subscribers are called in registration order with (new_value, old_value).

3. link(fn) calls fn(current_value, None) immediately, then on every change.
   lazy_link(fn) skips the immediate call.

4. A DerivedValue recomputes once per source notification and always reads
   the live values of ALL of its sources, not only the one that changed.

5. A cell may not be set while it is notifying its own subscribers.
   Such a write is a cycle in the graph and raises ReentrantUpdateError.

Example:
    >>> a = ObservableValue(1)
    >>> b = ObservableValue(2)
    >>> total = DerivedValue([a, b], lambda x, y: x + y)
    >>> total.get()
    3
    >>> a.set(10)
    >>> total.get()
    12

License: MIT
"""

import logging
from enum import Enum
from typing import Any, Callable, Generic, List, Optional, Sequence, TypeVar

import numpy as np

logger = logging.getLogger(__name__)

T = TypeVar("T")

Listener = Callable[[Any, Any], None]

# Types compared by value rather than identity
_VALUE_TYPES = (int, float, complex, str, bytes, bool, type(None), Enum, np.number, np.bool_)


class NoReading:
    """
    Sentinel for "no pH value".

    There is exactly one instance, NO_READING. It is never equal to any
    number and is not NaN, so consumers must test for it explicitly with
    ``value is NO_READING``.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NO_READING"

    def __reduce__(self):
        return (NoReading, ())


NO_READING = NoReading()


def has_reading(value: Any) -> bool:
    """True if value is an actual measurement rather than NO_READING."""
    return value is not NO_READING


class ReentrantUpdateError(RuntimeError):
    """A cell was set from inside its own change notification."""

    pass


def values_equal(a: Any, b: Any, use_deep_equality: bool = False) -> bool:
    """
    Equality rule used to decide whether a set() is a change.

    Args:
        a: Current value
        b: Proposed value
        use_deep_equality: Compare reference types with == instead of identity

    Returns:
        True if the values are considered the same
    """
    if a is b:
        return True
    if use_deep_equality:
        return bool(a == b)
    if isinstance(a, _VALUE_TYPES) and isinstance(b, _VALUE_TYPES):
        return bool(a == b)
    return False


class ObservableValue(Generic[T]):
    """
    Mutable cell with change notification.

    Each ObservableValue has a single logical owner that writes it and any
    number of readers and subscribers.
    """

    def __init__(
        self,
        value: T,
        name: Optional[str] = None,
        validator: Optional[Callable[[T], None]] = None,
        use_deep_equality: bool = False,
    ):
        """
        Initialize cell.

        Args:
            value: Initial value (also the value restored by reset())
            name: Label used in logs and repr
            validator: Called with each proposed value before it is stored;
                raises to reject the value
            use_deep_equality: Compare reference types with ==
        """
        if validator is not None:
            validator(value)

        self.name = name
        self._value = value
        self._initial_value = value
        self._validator = validator
        self._use_deep_equality = use_deep_equality
        self._listeners: List[Listener] = []
        self._notifying = False

    def get(self) -> T:
        """Current value."""
        return self._value

    @property
    def value(self) -> T:
        return self._value

    @property
    def initial_value(self) -> T:
        return self._initial_value

    def set(self, value: T) -> None:
        """
        Store value and notify subscribers if it changed.

        Raises:
            ReentrantUpdateError: If called while this cell is notifying
        """
        self._set_value(value)

    def reset(self) -> None:
        """Restore the value the cell was constructed with."""
        self._set_value(self._initial_value)

    def _set_value(self, value: T) -> None:
        if self._notifying:
            raise ReentrantUpdateError(
                f"{self!r} was set while notifying its subscribers"
            )
        if self._validator is not None:
            self._validator(value)
        if values_equal(self._value, value, self._use_deep_equality):
            return

        old_value = self._value
        self._value = value
        self._notify(value, old_value)

    def _notify(self, new_value: T, old_value: T) -> None:
        self._notifying = True
        try:
            # Copy so that unlink() from inside a listener is safe
            for listener in list(self._listeners):
                listener(new_value, old_value)
        finally:
            self._notifying = False

    def link(self, listener: Listener) -> None:
        """
        Subscribe listener and call it immediately with the current value.

        Args:
            listener: Callable taking (new_value, old_value); old_value is
                None on the immediate call
        """
        self._listeners.append(listener)
        listener(self._value, None)

    def lazy_link(self, listener: Listener) -> None:
        """Subscribe listener without the immediate call."""
        self._listeners.append(listener)

    def unlink(self, listener: Listener) -> None:
        """Remove listener. Removing an unknown listener is a no-op."""
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def has_listener(self, listener: Listener) -> bool:
        return listener in self._listeners

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def dispose(self) -> None:
        """Drop all subscribers. Called by the owner when it is torn down."""
        self._listeners.clear()

    def __repr__(self) -> str:
        label = self.name or self.__class__.__name__
        return f"{self.__class__.__name__}({label}={self._value!r})"


class DerivedValue(ObservableValue[T]):
    """
    Read-only cell computed from other cells.

    The value is fixed-point consistent with the sources as soon as any
    source mutation returns. Writing a DerivedValue is an error.
    """

    def __init__(
        self,
        sources: Sequence[ObservableValue],
        compute: Callable[..., T],
        name: Optional[str] = None,
        use_deep_equality: bool = False,
    ):
        """
        Initialize derived cell and link it to every source.

        Args:
            sources: Cells whose values are passed to compute, in order
            compute: Pure function of the source values
            name: Label used in logs and repr
            use_deep_equality: Compare reference types with ==
        """
        if len(sources) == 0:
            raise ValueError("DerivedValue needs at least one source")

        self._sources = tuple(sources)
        self._compute = compute
        self._initialized = False

        super().__init__(
            None, name=name, validator=None, use_deep_equality=use_deep_equality
        )

        # link() fires immediately, so the value is correct before first read
        self._source_listener = self._on_source_changed
        for source in self._sources:
            source.link(self._source_listener)

    @property
    def sources(self):
        return self._sources

    def set(self, value: T) -> None:
        raise TypeError(f"{self!r} is derived and cannot be set")

    def reset(self) -> None:
        raise TypeError(f"{self!r} is derived and cannot be reset")

    def _on_source_changed(self, new_value, old_value) -> None:
        self._recompute()

    def _recompute(self) -> None:
        value = self._compute(*[source.get() for source in self._sources])
        if not self._initialized:
            self._value = value
            self._initial_value = value
            self._initialized = True
            return
        self._set_value(value)

    def dispose(self) -> None:
        """Unlink from all sources and drop subscribers."""
        for source in self._sources:
            source.unlink(self._source_listener)
        super().dispose()


def validate_observable() -> None:
    """
    Validation of propagation semantics.

    Tests:
    1. link() calls immediately, lazy_link() does not
    2. Notification order equals subscription order
    3. Derived values settle before set() returns
    4. Equal primitive values do not notify
    5. Derived values reject writes
    6. Re-entrant writes are rejected
    """
    calls = []
    cell = ObservableValue(1, name="cell")
    cell.link(lambda new, old: calls.append(("linked", new, old)))
    cell.lazy_link(lambda new, old: calls.append(("lazy", new, old)))
    assert calls == [("linked", 1, None)], "link() should call immediately"

    cell.set(2)
    assert calls[1:] == [("linked", 2, 1), ("lazy", 2, 1)], "Order should follow subscription"

    cell.set(2)
    assert len(calls) == 3, "Unchanged value should not notify"

    doubled = DerivedValue([cell], lambda v: 2 * v, name="doubled")
    cell.set(5)
    assert doubled.get() == 10, "Derived value should settle synchronously"

    try:
        doubled.set(0)
    except TypeError:
        pass
    else:
        raise AssertionError("Derived value should reject set()")

    loop = ObservableValue(0, name="loop")
    loop.lazy_link(lambda new, old: loop.set(new + 1))
    try:
        loop.set(1)
    except ReentrantUpdateError:
        pass
    else:
        raise AssertionError("Re-entrant set should be rejected")

    assert NO_READING is NoReading(), "Sentinel should be a singleton"

    print("✓ All observable validations passed")


if __name__ == "__main__":
    validate_observable()
