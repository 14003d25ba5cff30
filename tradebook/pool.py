"""Index-addressed object pool with a free list."""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

T = TypeVar("T")


class LevelPool(Generic[T]):
    """Pool of objects addressed by stable integer indices.

    Freed indices are reused last-in first-out. A reused slot keeps the
    object it held before; callers are expected to reset its fields.
    """

    def __init__(self, factory: Callable[[], T]) -> None:
        self._factory = factory
        self._allocated: list[T] = []
        self._free: list[int] = []

    def allocate(self) -> int:
        """Return the index of a slot that is now in use."""
        if self._free:
            return self._free.pop()
        self._allocated.append(self._factory())
        return len(self._allocated) - 1

    def free(self, index: int) -> None:
        """Give the slot at ``index`` back to the pool."""
        self._check(index)
        self._free.append(index)

    def __getitem__(self, index: int) -> T:
        self._check(index)
        return self._allocated[index]

    def __len__(self) -> int:
        """Number of slots currently in use."""
        return len(self._allocated) - len(self._free)

    def _check(self, index: int) -> None:
        if not 0 <= index < len(self._allocated):
            raise IndexError(f"pool index {index} out of range")