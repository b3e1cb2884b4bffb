"""
Saga records: what was done, and what undoing it produced.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

type Undo[T] = Callable[[T], Awaitable[None]]
"""Reverts a completed stage, given the value the stage produced."""


@dataclass(frozen=True, slots=True)
class Compensation:
    """A pending undo, already bound to the value of its stage."""

    stage: str
    undo: Callable[[], Awaitable[None]]


@dataclass(frozen=True, slots=True)
class Rollback:
    """Outcome of unwinding a saga; stage names in the order they were undone."""

    undone: tuple[str, ...] = ()
    failed: tuple[str, ...] = ()

    @property
    def complete(self) -> bool:
        return not self.failed


__all__ = ("Undo", "Compensation", "Rollback")
