"""Thread-safe queues that can be closed."""

from __future__ import annotations

import abc
import threading
from collections import deque
from typing import Generic, Iterator, TypeVar

T = TypeVar("T")


class QueueClosed(Exception):
    """The queue is closed and holds nothing more."""


class Queue(abc.ABC, Generic[T]):
    """A queue with blocking pull and a close operation."""

    @abc.abstractmethod
    def push(self, value: T) -> bool:
        """Add ``value``; return whether it was accepted."""

    @abc.abstractmethod
    def pull(self) -> T:
        """Remove and return the oldest value, waiting for one; raise QueueClosed when done."""

    @abc.abstractmethod
    def close(self) -> None:
        """Close the queue; waiting pulls are woken."""

    def __iter__(self) -> Iterator[T]:
        while True:
            try:
                yield self.pull()
            except QueueClosed:
                return


class LinkedQueue(Queue[T]):
    """An unbounded queue; pushes are refused once it is closed."""

    def __init__(self) -> None:
        self._items: deque[T] = deque()
        self._closed = False
        self._cond = threading.Condition()

    def push(self, value: T) -> bool:
        with self._cond:
            if self._closed:
                return False
            self._items.append(value)
            self._cond.notify()
            return True

    def pull(self) -> T:
        with self._cond:
            while not self._items:
                if self._closed:
                    raise QueueClosed("queue is closed")
                self._cond.wait()
            return self._items.popleft()

    def close(self) -> None:
        with self._cond:
            self._closed = True
            self._cond.notify_all()


class ChannelQueue(Queue[T]):
    """A queue with fixed capacity whose push never blocks.

    A push is refused when the queue is full.  With capacity zero a push is
    accepted only while a pull is waiting for it.  Values pushed before
    close can still be pulled after it.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 0:
            raise ValueError(f"negative capacity {capacity}")
        self._capacity = capacity
        self._items: deque[T] = deque()
        self._waiting = 0
        self._closed = False
        self._cond = threading.Condition()

    def push(self, value: T) -> bool:
        with self._cond:
            if self._closed:
                raise QueueClosed("push on closed queue")
            if len(self._items) >= self._capacity + self._waiting:
                return False
            self._items.append(value)
            self._cond.notify()
            return True

    def pull(self) -> T:
        with self._cond:
            self._waiting += 1
            try:
                while not self._items:
                    if self._closed:
                        raise QueueClosed("queue is closed")
                    self._cond.wait()
                return self._items.popleft()
            finally:
                self._waiting -= 1

    def close(self) -> None:
        with self._cond:
            if self._closed:
                raise QueueClosed("close of closed queue")
            self._closed = True
            self._cond.notify_all()