"""Human-readable progress and summary output."""

import sys
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from example_validator.models.result import ExecutionResult, RunSummary

BANNER = "=" * 80

STATUS_SYMBOLS = {
    "success": "✅",
    "failure": "❌",
    "timeout": "⏱️",
}


def excerpt(message: str, lines: int) -> Sequence[str]:
    """Return the first lines of a diagnostic message."""
    return message.splitlines()[:lines]


def format_duration(seconds: float) -> str:
    """Format a duration in whole milliseconds."""
    return f"{seconds * 1000:.0f}ms"


@dataclass(kw_only=True)
class Reporter:
    """Writes run progress and the final summary to a text stream.

    In parallel mode each file gets separate start and finish lines, since
    results no longer arrive in the order files were started.
    """

    project_root: Path
    error_excerpt_lines: int = 3
    parallel: bool = False
    stream: TextIO = field(default_factory=lambda: sys.stdout)

    def relative(self, path: Path) -> str:
        """Display path relative to the project root when possible."""
        try:
            return str(path.relative_to(self.project_root))
        except ValueError:
            return str(path)

    def header(self) -> None:
        mode = " (Parallel Mode)" if self.parallel else ""
        self._print(f"🧪 Validating All Code Examples{mode}\n")
        self._print(f"{BANNER}\n")

    def discovered(
        self, chapters: Sequence[str], files: Sequence[Path], interactive: int
    ) -> None:
        """Report what discovery found before anything runs."""
        self._print(f"📂 Found {len(chapters)} chapters: {', '.join(chapters)}\n")
        self._print(f"📁 Found {len(files)} code files\n")
        if interactive:
            self._print(
                f"🤖 {interactive} interactive files will be tested with automated input\n"
            )

    def running(self, total: int, concurrency: int) -> None:
        if self.parallel:
            self._print(
                f"🚀 Running {total} examples with concurrency: {concurrency}\n"
            )
        else:
            self._print(f"🏃 Running {total} examples...\n")
        self._print(f"{BANNER}\n")

    def file_started(self, index: int, total: int, path: Path) -> None:
        """Announce a file; sequential mode leaves the line open for its outcome."""
        if self.parallel:
            self._print(f"▶️  [{index}/{total}] Starting: {self.relative(path)}")
        else:
            self._print(f"[{index}/{total}] {self.relative(path)}... ", end="")
            self.stream.flush()

    def file_finished(self, index: int, total: int, result: ExecutionResult) -> None:
        symbol = STATUS_SYMBOLS.get(result.status, "?")
        first_line = excerpt(result.message or "", 1)

        if self.parallel:
            verb = "Passed" if result.success else "Failed"
            line = f"   {symbol} [{index}/{total}] {verb}: {self.relative(result.file)}"
            if result.success:
                line += f" ({format_duration(result.duration)})"
            self._print(line)
            if first_line:
                self._print(f"      Error: {first_line[0]}")
            self._print()
            return

        if result.success:
            self._print(f"{symbol} ({format_duration(result.duration)})")
        else:
            self._print(symbol)
            if first_line:
                self._print(f"   Error: {first_line[0]}")

    def summary(self, summary: RunSummary, elapsed: float | None = None) -> None:
        """Print totals, the failures section and the final verdict."""
        self._print(f"\n{BANNER}\n")
        self._print("📊 Test Results:\n")
        self._print(f"   Total:     {summary.total}")
        self._print(f"   Passed:    {summary.passed} ✅")
        self._print(f"   Failed:    {summary.failed} ❌")
        if summary.timeouts:
            self._print(f"   Timed out: {summary.timeouts} ⏱️")
        self._print(f"   Success:   {summary.success_rate:.1f}%")
        if elapsed is not None:
            self._print(f"   Duration:  {elapsed:.1f}s ({elapsed / 60:.1f} minutes)")

        if summary.failures:
            self._print(f"\n{BANNER}\n")
            self._print("❌ Failed Examples:\n")
            for result in summary.failures:
                self._print(f"   {self.relative(result.file)}")
                lines = excerpt(result.message or "", self.error_excerpt_lines)
                if lines:
                    self._print("   → " + "\n   ".join(lines))
                self._print()

        self._print(f"{BANNER}\n")
        if summary.exit_code:
            self._print("❌ Validation failed. Please fix the errors above.\n")
        else:
            self._print("✅ All examples validated successfully!\n")

    def _print(self, text: str = "", end: str = "\n") -> None:
        print(text, end=end, file=self.stream)
