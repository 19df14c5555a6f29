"""CLI entry points for validating course examples."""

import argparse
import asyncio
import logging
import sys
import time
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from example_validator.config import HarnessConfig
from example_validator.discovery import (
    chapter_roots,
    collect_example_files,
    find_chapters,
)
from example_validator.executor import ExampleExecutor
from example_validator.models.result import RunSummary
from example_validator.registry import DEFAULT_REGISTRY, ClassificationRegistry
from example_validator.reporter import Reporter
from example_validator.runner import ExampleRunner

log = logging.getLogger("example_validator")

PARALLEL_SETTINGS: dict[str, Any] = {
    "concurrency": 10,
    "timeout": 90.0,
    "slow_timeout": 90.0,
}


def discover_examples(config: HarnessConfig) -> tuple[Sequence[str], Sequence[Path]]:
    """Find chapters under the project root and the example files in them."""
    chapters = find_chapters(config.project_root, config.chapter_pattern)
    roots = chapter_roots(config.project_root, chapters, config.example_dirs)
    files = collect_example_files(
        roots, extension=config.extension, excluded_names=config.excluded_names
    )
    return chapters, files


async def run(
    config: HarnessConfig,
    registry: ClassificationRegistry = DEFAULT_REGISTRY,
    reporter: Reporter | None = None,
) -> int:
    """Validate all examples and return the process exit code."""
    parallel = config.concurrency > 1
    if reporter is None:
        reporter = Reporter(
            project_root=config.project_root,
            error_excerpt_lines=config.error_excerpt_lines,
            parallel=parallel,
        )

    reporter.header()

    log.info("Discovering examples under %s", config.project_root)
    chapters, files = discover_examples(config)
    interactive = sum(1 for path in files if registry.is_interactive(path))
    reporter.discovered(chapters, files, interactive)

    runner = ExampleRunner(
        executor=ExampleExecutor(
            interpreter=config.interpreter,
            env=config.env,
            cwd=config.project_root,
            fail_on_stderr_errors=config.fail_on_stderr_errors,
        ),
        registry=registry,
        reporter=reporter,
        timeout=config.timeout,
        slow_timeout=config.slow_timeout,
        concurrency=config.concurrency,
    )

    reporter.running(len(files), config.concurrency)
    started = time.monotonic()
    results = await runner.run_all(files)
    elapsed = time.monotonic() - started

    summary = RunSummary.from_results(results)
    log.info(
        "Run completed: total=%d passed=%d failed=%d timeouts=%d",
        summary.total,
        summary.passed,
        summary.failed,
        summary.timeouts,
    )
    reporter.summary(summary, elapsed=elapsed if parallel else None)

    return summary.exit_code


def _main(description: str, **overrides: Any) -> None:
    argparse.ArgumentParser(description=description).parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        exit_code = asyncio.run(run(HarnessConfig(**overrides)))
    except Exception:
        log.exception("Validation script error")
        exit_code = 1
    sys.exit(exit_code)


def main() -> None:
    """Run every example one at a time."""
    _main("Run all course examples sequentially and report failures")


def main_parallel() -> None:
    """Run examples with a bounded worker pool."""
    _main(
        "Run all course examples with controlled parallelism", **PARALLEL_SETTINGS
    )


if __name__ == "__main__":  # pragma: no cover
    main()
