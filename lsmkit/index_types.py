"""Shared types for the ordered index: entries, storage references, errors and the tree interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

K = TypeVar("K")
V = TypeVar("V")


class TreeIndexError(Exception):
    """Base class for errors raised by index operations."""


class KeyNotFoundError(TreeIndexError, LookupError):
    """The requested key is not present in the index."""

    def __init__(self, key: Any = None) -> None:
        self.key = key
        message = "key not found" if key is None else f"key not found: {key!r}"
        super().__init__(message)

    def __repr__(self) -> str:
        return f"KeyNotFoundError({self.key!r})"


class InvalidOperationError(TreeIndexError):
    """An operation was attempted that the index cannot perform."""

    def __repr__(self) -> str:
        return f"InvalidOperationError({str(self)!r})"


@dataclass(frozen=True)
class StorageReference:
    """Where a value lives on disk: file, byte offset and tombstone flag."""

    file_path: str
    offset: int
    is_tombstone: bool = False


@dataclass
class IndexKeyValue(Generic[K, V]):
    """A key with an optional in-memory value and an optional storage reference."""

    key: K
    value: Optional[V] = None
    storage_ref: Optional[StorageReference] = None


class TreeOps(ABC, Generic[K, V]):
    """Operations every ordered index supports."""

    @abstractmethod
    def find(self, key: K) -> Optional[IndexKeyValue[K, V]]:
        """Return the entry for ``key``, or None if it is absent."""

    @abstractmethod
    def insert(
        self, key: K, value: V, storage_ref: Optional[StorageReference] = None
    ) -> None:
        """Insert or replace the entry for ``key``."""

    @abstractmethod
    def delete(self, key: K) -> None:
        """Remove ``key``; raise KeyNotFoundError if it is absent."""

    @abstractmethod
    def range(
        self,
        start: Optional[K] = None,
        end: Optional[K] = None,
        start_inclusive: bool = True,
        end_inclusive: bool = False,
    ) -> list[IndexKeyValue[K, V]]:
        """Return the entries between ``start`` and ``end`` in key order.

        A bound of None is unbounded.
        """

    @abstractmethod
    def __len__(self) -> int:
        """Number of keys in the index."""

    def is_empty(self) -> bool:
        """True if the index holds no keys."""
        return len(self) == 0

    @abstractmethod
    def clear(self) -> None:
        """Remove every entry."""