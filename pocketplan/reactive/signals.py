"""
Reactive State Primitives

Signals hold mutable state; computed values are pure functions of
named input signals. A change to any input marks every dependent
computed value dirty and notifies subscribers synchronously, before
`set()` returns, so a reader can never see a derived value that is
older than the last committed mutation.

Usage:
    items = Signal([])
    total = Computed(lambda: sum(i.amount for i in items()), items)
    unsubscribe = total.subscribe(lambda: print("total changed"))
    items.set([...])   # prints, and total() is recomputed on next read
"""

from typing import Callable, Generic, TypeVar, Union

T = TypeVar("T")

Listener = Callable[[], None]


class _Observable:
    """Listener bookkeeping shared by signals and computed values."""

    def __init__(self):
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a change listener.

        Returns a function that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            self.unsubscribe(listener)

        return unsubscribe

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        # Copy: listeners may unsubscribe while being notified
        for listener in list(self._listeners):
            listener()


class Signal(_Observable, Generic[T]):
    """A mutable value that notifies its listeners when it changes."""

    def __init__(self, value: T):
        super().__init__()
        self._value = value

    def __call__(self) -> T:
        return self._value

    def get(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        """Replace the value. Setting an equal value notifies nobody."""
        if value == self._value:
            return
        self._value = value
        self._notify()

    def update(self, fn: Callable[[T], T]) -> None:
        """Replace the value with `fn(current value)`."""
        self.set(fn(self._value))

    def readonly(self) -> "ReadonlySignal[T]":
        return ReadonlySignal(self)

    def __repr__(self) -> str:
        return f"Signal({self._value!r})"


class Computed(_Observable, Generic[T]):
    """
    A derived value with no storage of its own.

    The function is re-run on the first read after any input changed.
    Inputs must be listed explicitly; reading a signal inside `fn` that is
    not listed will not trigger recomputation.
    """

    def __init__(self, fn: Callable[[], T], *inputs: "Source"):
        super().__init__()
        if not inputs:
            raise ValueError("Computed value needs at least one input")
        self._fn = fn
        self._dirty = True
        self._value: T
        for source in inputs:
            source.subscribe(self._invalidate)

    def _invalidate(self) -> None:
        self._dirty = True
        self._notify()

    def __call__(self) -> T:
        return self.get()

    def get(self) -> T:
        if self._dirty:
            self._value = self._fn()
            self._dirty = False
        return self._value

    def readonly(self) -> "ReadonlySignal[T]":
        return ReadonlySignal(self)


class ReadonlySignal(Generic[T]):
    """Read and subscribe access to a signal or computed value, without `set`."""

    def __init__(self, source: Union[Signal[T], Computed[T]]):
        self._source = source

    def __call__(self) -> T:
        return self._source.get()

    def get(self) -> T:
        return self._source.get()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        return self._source.subscribe(listener)

    def unsubscribe(self, listener: Listener) -> None:
        self._source.unsubscribe(listener)


Source = Union[Signal, Computed, ReadonlySignal]
