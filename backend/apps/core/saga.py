"""
Saga orchestration for multi-step writes that cannot share a transaction.

Provisioning touches the identity provider and the database in sequence. The
provider cannot join a database transaction, so each write is committed on its
own and undone by hand when a later step fails.

Usage:
    saga = Saga(
        "owner_signup",
        [
            SagaStep("identity", create_identity, compensation=delete_identity),
            SagaStep("organization", create_org, compensation=delete_org,
                     error_message="Failed to create organization"),
            SagaStep("settings", create_settings, best_effort=True),
        ],
    )
    result = saga.run()
    result.results["organization"]

Each action receives the dict of results produced by earlier steps and returns
its own result, stored under the step name. When a required step fails, the
compensations of all completed steps run in reverse order and the failure is
re-raised as a ProvisioningError. Best-effort steps log their failure and the
saga carries on.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from apps.core.exceptions import DownstreamFailure, ProvisioningError
from apps.core.logging import get_logger

logger = get_logger(__name__)

StepResults = dict[str, Any]


@dataclass
class SagaStep:
    """One forward action with an optional undo."""

    name: str
    action: Callable[[StepResults], Any]
    compensation: Callable[[StepResults], None] | None = None
    best_effort: bool = False
    error_message: str = ""


@dataclass
class SagaResult:
    """Outcome of a completed saga."""

    results: StepResults
    skipped: list[str] = field(default_factory=list)


class Saga:
    """Runs steps sequentially, compensating completed steps on failure."""

    def __init__(self, name: str, steps: list[SagaStep]) -> None:
        self.name = name
        self.steps = steps

    def run(self) -> SagaResult:
        results: StepResults = {}
        completed: list[SagaStep] = []
        skipped: list[str] = []

        for step in self.steps:
            try:
                results[step.name] = step.action(results)
            except Exception as exc:
                if step.best_effort:
                    logger.warning(
                        "saga_best_effort_step_failed",
                        saga=self.name,
                        step=step.name,
                        error=str(exc),
                    )
                    skipped.append(step.name)
                    continue

                logger.warning(
                    "saga_step_failed",
                    saga=self.name,
                    step=step.name,
                    error=str(exc),
                )
                self._compensate(completed, results)

                if step.error_message:
                    detail = exc.message if isinstance(exc, ProvisioningError) else str(exc)
                    raise DownstreamFailure(f"{step.error_message}: {detail}") from exc
                if isinstance(exc, ProvisioningError):
                    raise
                raise DownstreamFailure(str(exc) or "An unexpected error occurred") from exc

            completed.append(step)

        return SagaResult(results=results, skipped=skipped)

    def _compensate(self, completed: list[SagaStep], results: StepResults) -> None:
        """Undo completed steps newest-first. Failed undos are logged, never retried."""
        for step in reversed(completed):
            if step.compensation is None:
                continue
            try:
                step.compensation(results)
            except Exception as exc:
                logger.error(
                    "saga_compensation_failed",
                    saga=self.name,
                    step=step.name,
                    error=str(exc),
                )
            else:
                logger.info("saga_step_compensated", saga=self.name, step=step.name)
