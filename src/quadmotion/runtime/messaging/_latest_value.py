import threading
from typing import Generic, Optional, TypeVar

T = TypeVar('T')


class LatestValue(Generic[T]):
    """
    Single-slot channel between a producer and a consumer thread.

    A put replaces whatever was there, so the reader always sees the most
    recent value and never a backlog. Reading does not consume the value.
    """

    def __init__(self, initial: Optional[T] = None) -> None:
        self._lock = threading.Lock()
        self._value = initial

    def put(self, value: T) -> None:
        with self._lock:
            self._value = value

    def get(self) -> Optional[T]:
        with self._lock:
            return self._value
