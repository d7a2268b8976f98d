"""
Observable values published by the minefield engine.

Each observable holds a current value and a list of callbacks. Assigning
a new value invokes every callback synchronously, in registration order,
before the assignment returns.
"""
from typing import Callable, Generic, List, TypeVar


T = TypeVar("T")

Observer = Callable[[T], None]


# ============================================================================
# Observable Value
# ============================================================================

class Observable(Generic[T]):
    """A mutable value that notifies observers on every assignment."""

    def __init__(self, value: T) -> None:
        self._value = value
        self._observers: List[Observer] = []

    @property
    def value(self) -> T:
        """Current value."""
        return self._value

    @value.setter
    def value(self, new_value: T) -> None:
        self._value = new_value
        for callback in list(self._observers):
            callback(new_value)

    def observe(self, callback: Observer) -> Callable[[], None]:
        """
        Register a callback for future assignments.

        The callback is not invoked with the current value.

        Args:
            callback: Called with each newly assigned value.

        Returns:
            A function that unregisters the callback. Calling it more than
            once is harmless.
        """
        self._observers.append(callback)

        def dispose() -> None:
            if callback in self._observers:
                self._observers.remove(callback)

        return dispose

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    def read_only(self) -> "ObservableView[T]":
        """Return a view that can be observed but not assigned."""
        return ObservableView(self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"


class ObservableView(Generic[T]):
    """Read-only face of an :class:`Observable` owned by someone else."""

    def __init__(self, source: Observable[T]) -> None:
        self._source = source

    @property
    def value(self) -> T:
        """Current value."""
        return self._source.value

    def observe(self, callback: Observer) -> Callable[[], None]:
        """Register a callback; see :meth:`Observable.observe`."""
        return self._source.observe(callback)

    @property
    def observer_count(self) -> int:
        return self._source.observer_count

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._source.value!r})"
