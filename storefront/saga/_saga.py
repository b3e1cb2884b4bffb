"""
Saga: an undo log for operations that span several transactions.

Each stage commits on its own. A stage that succeeds with an `undo` leaves a
compensation behind; `rollback()` replays them newest first. An undo that
raises is logged and reported in the Rollback, the others still run.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from functools import partial

from kungfu import Result, Ok, Error

from storefront.saga._types import Compensation, Rollback, Undo

logger = logging.getLogger(__name__)


class Saga:
    def __init__(self, name: str) -> None:
        self.name = name
        self._completed: list[str] = []
        self._compensations: list[Compensation] = []

    @property
    def completed(self) -> tuple[str, ...]:
        return tuple(self._completed)

    async def stage[T, E](
        self,
        name: str,
        action: Awaitable[Result[T, E]],
        undo: Undo[T] | None = None,
    ) -> Result[T, E]:
        """Await one stage; on Ok, remember how to revert it."""
        result = await action
        match result:
            case Ok(value):
                self._completed.append(name)
                if undo is not None:
                    self._compensations.append(Compensation(name, partial(undo, value)))
            case Error(error):
                logger.info("saga %s: stage %s failed: %s", self.name, name, error)
        return result

    async def rollback(self) -> Rollback:
        """Undo completed stages in reverse. Running it twice undoes nothing twice."""
        undone: list[str] = []
        failed: list[str] = []
        while self._compensations:
            compensation = self._compensations.pop()
            try:
                await compensation.undo()
            except Exception:
                logger.exception("saga %s: undo of %s failed", self.name, compensation.stage)
                failed.append(compensation.stage)
            else:
                undone.append(compensation.stage)
        return Rollback(undone=tuple(undone), failed=tuple(failed))


__all__ = ("Saga",)
