"""Drive the executor across all discovered example files."""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from example_validator.executor import ExampleExecutor
from example_validator.models.result import ExecutionResult
from example_validator.registry import ClassificationRegistry
from example_validator.reporter import Reporter

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class ExampleRunner:
    """Runs example files and collects their results in discovery order.

    With the default concurrency of 1 each file finishes before the next one
    starts, keeping the examples from hitting provider rate limits together.
    """

    executor: ExampleExecutor
    registry: ClassificationRegistry
    reporter: Reporter
    timeout: float
    slow_timeout: float
    concurrency: int = 1

    async def run_all(self, files: Sequence[Path]) -> Sequence[ExecutionResult]:
        """Run every file and return one result per file, in input order."""
        if not files:
            log.info("No example files to run")
            return []

        if self.concurrency <= 1:
            return [
                await self._run_one(index, len(files), path)
                for index, path in enumerate(files, start=1)
            ]

        return await self._run_pool(files)

    async def _run_pool(self, files: Sequence[Path]) -> Sequence[ExecutionResult]:
        """Run files with a fixed number of workers pulling from one queue."""
        results: dict[int, ExecutionResult] = {}
        pending = iter(enumerate(files, start=1))

        async def worker() -> None:
            for index, path in pending:
                results[index] = await self._run_one(index, len(files), path)

        workers = min(self.concurrency, len(files))
        log.info("Running %d file(s) with %d worker(s)", len(files), workers)
        await asyncio.gather(*(worker() for _ in range(workers)))

        return [results[index] for index in range(1, len(files) + 1)]

    async def _run_one(self, index: int, total: int, path: Path) -> ExecutionResult:
        policy = self.registry.policy_for(
            path, timeout=self.timeout, slow_timeout=self.slow_timeout
        )
        self.reporter.file_started(index, total, path)
        result = await self.executor.run(path, policy)
        self.reporter.file_finished(index, total, result)
        return result
