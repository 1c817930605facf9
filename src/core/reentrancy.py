"""Scoped re-entrancy lock shared by every mutating facade operation."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

from .errors import Reentrancy


class ReentrancyGuard:
    """
    A single exclusive flag per facade instance.

    `locked()` sets the flag for the duration of the `with` block and clears
    it on every exit path, so a failed operation never leaves the facade
    locked.
    """

    def __init__(self) -> None:
        self._held_by: Optional[str] = None

    @property
    def entered(self) -> bool:
        return self._held_by is not None

    @contextmanager
    def locked(self, operation: str) -> Iterator[None]:
        if self._held_by is not None:
            raise Reentrancy(f"{operation} re-entered during {self._held_by}")
        self._held_by = operation
        try:
            yield
        finally:
            self._held_by = None
