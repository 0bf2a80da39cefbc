"""
Ordered, non-transactional step sequences.

A logical operation that touches several records (a listing, its owner, its
tags) is written as an explicit list of named steps, each one a single
independent store call. Steps run strictly in order and the first failure
aborts the sequence with the original exception, leaving earlier steps
applied.

Each step may declare a compensating action. Compensations only run when the
sequence is built with ``compensate_on_failure=True``; they are applied in
reverse order to the steps that had completed.
"""
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

StepAction = Callable[[], Awaitable[Any]]


@dataclass(frozen=True)
class Step:
    name: str
    action: StepAction
    compensate: StepAction | None = None


class StepSequence:
    def __init__(
        self, operation: str, *, compensate_on_failure: bool = False, **context: Any
    ) -> None:
        self.operation = operation
        self._compensate_on_failure = compensate_on_failure
        self._steps: list[Step] = []
        self._log = logger.bind(operation=operation, **context)

    @property
    def step_names(self) -> list[str]:
        return [step.name for step in self._steps]

    def add(
        self, name: str, action: StepAction, compensate: StepAction | None = None
    ) -> "StepSequence":
        self._steps.append(Step(name=name, action=action, compensate=compensate))
        return self

    async def run(self) -> None:
        completed: list[Step] = []
        for step in self._steps:
            try:
                await step.action()
            except Exception as exc:
                self._log.error(
                    "orchestration_step_failed",
                    step=step.name,
                    completed_steps=[s.name for s in completed],
                    error=str(exc),
                )
                if self._compensate_on_failure:
                    await self._compensate(completed)
                raise
            completed.append(step)

        self._log.debug("orchestration_completed", steps=len(completed))

    async def _compensate(self, completed: list[Step]) -> None:
        for step in reversed(completed):
            if step.compensate is None:
                self._log.warning("orchestration_step_not_compensable", step=step.name)
                continue
            try:
                await step.compensate()
            except Exception:
                # Keep undoing the rest; the original failure is re-raised by run()
                self._log.exception("orchestration_compensation_failed", step=step.name)
            else:
                self._log.info("orchestration_step_compensated", step=step.name)
