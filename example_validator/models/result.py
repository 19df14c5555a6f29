"""Models for example execution results."""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

Status = Literal["success", "failure", "timeout"]


@dataclass(frozen=True, kw_only=True)
class ExecutionResult:
    """Result of a single example execution.

    A timeout is a failure; ``message`` is set for every non-success status.
    """

    file: Path
    status: Status
    duration: float
    message: str | None = None

    @property
    def success(self) -> bool:
        """Whether the example ran to a clean exit."""
        return self.status == "success"


@dataclass(frozen=True, kw_only=True)
class RunSummary:
    """Aggregate statistics for one complete run."""

    total: int
    passed: int
    failed: int
    timeouts: int
    success_rate: float
    failures: Sequence[ExecutionResult]

    @classmethod
    def from_results(cls, results: Iterable[ExecutionResult]) -> "RunSummary":
        """Fold an ordered result sequence into a summary.

        The success rate is a percentage rounded to one decimal place and is
        0.0 for an empty run.
        """
        ordered = tuple(results)
        failures = tuple(result for result in ordered if not result.success)
        total = len(ordered)
        passed = total - len(failures)

        return cls(
            total=total,
            passed=passed,
            failed=len(failures),
            timeouts=sum(1 for result in failures if result.status == "timeout"),
            success_rate=round(100 * passed / total, 1) if total else 0.0,
            failures=failures,
        )

    @property
    def exit_code(self) -> int:
        """Process exit status for CI: nonzero when anything failed."""
        return 1 if self.failed else 0
