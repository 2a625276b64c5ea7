"""
Workflow Orchestration Module

Architectural Intent:
- DAG-based execution of named lifecycle steps ("deploy:fetch", "deploy:publish", ...)
- Independent steps at the same dependency level run concurrently
- Composite operations (deploy, rollback) are linear chains built with `sequence`

Failure Policy:
- A failing critical step aborts the run; steps depending on it never start
- Nothing is retried and nothing already done is reverted
"""

from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, Awaitable, Any

logger = logging.getLogger(__name__)


@dataclass
class WorkflowStep:
    name: str
    execute: Callable[[dict[str, Any], dict[str, Any]], Awaitable[Any]]
    depends_on: list[str] = field(default_factory=list)
    is_critical: bool = True


class OrchestrationError(Exception):
    def __init__(self, message: str, step: str = "") -> None:
        super().__init__(message)
        self.step = step


class DAGOrchestrator:
    def __init__(self, steps: list[WorkflowStep]) -> None:
        self.steps: dict[str, WorkflowStep] = {s.name: s for s in steps}
        self._validated = False

    @classmethod
    def sequence(
        cls, steps: list[tuple[str, Callable[[], Awaitable[Any]]]]
    ) -> "DAGOrchestrator":
        """Builds a linear chain: each step depends on the one before it."""
        chain: list[WorkflowStep] = []
        previous: list[str] = []
        for name, run in steps:

            async def execute(context, results, run=run):
                return await run()

            chain.append(WorkflowStep(name, execute, depends_on=list(previous)))
            previous = [name]
        return cls(chain)

    def _validate_no_cycles(self) -> None:
        visited: set[str] = set()
        rec_stack: set[str] = set()

        def has_cycle(name: str) -> bool:
            visited.add(name)
            rec_stack.add(name)

            step = self.steps.get(name)
            if step:
                for dep in step.depends_on:
                    if dep not in visited:
                        if has_cycle(dep):
                            return True
                    elif dep in rec_stack:
                        return True

            rec_stack.remove(name)
            return False

        for step_name in self.steps:
            if step_name not in visited:
                if has_cycle(step_name):
                    raise OrchestrationError(
                        f"Circular dependency detected involving step: {step_name}",
                        step=step_name,
                    )

    async def execute(self, context: dict[str, Any]) -> dict[str, Any]:
        if not self._validated:
            self._validate_no_cycles()
            self._validated = True

        completed: dict[str, Any] = {}
        pending = set(self.steps.keys())

        while pending:
            ready = sorted(
                name
                for name in pending
                if all(dep in completed for dep in self.steps[name].depends_on)
            )
            if not ready:
                raise OrchestrationError(
                    f"Circular dependency or unsatisfied dependencies. Pending: {pending}"
                )

            for name in ready:
                logger.debug("Starting step %s", name, extra={"step": name})
            results = await asyncio.gather(
                *(self.steps[name].execute(context, completed) for name in ready),
                return_exceptions=True,
            )

            for name, result in zip(ready, results):
                if isinstance(result, Exception):
                    if self.steps[name].is_critical:
                        logger.error("Step %s failed: %s", name, result, extra={"step": name})
                        raise OrchestrationError(
                            f"Critical step {name} failed: {result}", step=name
                        ) from result
                    logger.warning(
                        "Non-critical step %s failed: %s", name, result, extra={"step": name}
                    )
                completed[name] = result
                pending.discard(name)

        return completed
