"""Run a single example file in a child process."""

import asyncio
import contextlib
import logging
import os
import signal
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from example_validator.models.policy import ExecutionPolicy
from example_validator.models.result import ExecutionResult

log = logging.getLogger(__name__)

STDERR_ERROR_MARKERS = ("Error:", "Error\n", "at ")
DRAIN_TIMEOUT = 5.0


def has_error_markers(stderr: str) -> bool:
    """Check stderr for error or stack trace output."""
    return any(marker in stderr for marker in STDERR_ERROR_MARKERS) or (
        "exception" in stderr.lower()
    )


@dataclass(frozen=True, kw_only=True)
class ExampleExecutor:
    """Executes one example to completion or timeout.

    Each child runs in its own session so a timeout can kill the example
    together with any processes it started.
    """

    interpreter: Sequence[str] = ("npx", "tsx")
    env: Mapping[str, str] = field(default_factory=dict)
    cwd: Path | None = None
    fail_on_stderr_errors: bool = False

    async def run(self, path: Path, policy: ExecutionPolicy) -> ExecutionResult:
        """Execute an example and return its result.

        Args:
            path: Example file passed as the interpreter's only argument
            policy: Timeout and optional scripted input

        Returns:
            Result with status ``success``, ``failure`` or ``timeout``

        """
        loop = asyncio.get_running_loop()
        started = loop.time()

        try:
            process = await asyncio.create_subprocess_exec(
                *self.interpreter,
                str(path),
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env={**os.environ, **self.env},
                cwd=self.cwd,
                start_new_session=sys.platform != "win32",
            )
        except OSError as e:
            log.error("Failed to start %s: %s", path, e)
            return ExecutionResult(
                file=path,
                status="failure",
                duration=loop.time() - started,
                message=str(e),
            )

        log.debug("Started %s (pid=%d, timeout=%.1fs)", path, process.pid, policy.timeout)
        stdout = stderr = b""
        timed_out = False
        finished = False

        try:
            async with asyncio.timeout(policy.timeout):
                stdout, stderr = await _collect_output(process, policy.stdin)
            finished = True
        except TimeoutError:
            timed_out = True
        finally:
            # The leader may have exited while a descendant still holds its pipes.
            if not finished:
                await _kill(process)
            elif process.stdin is not None:
                process.stdin.close()

        duration = loop.time() - started

        if timed_out:
            log.warning("Timed out after %.1fs: %s", policy.timeout, path)
            return ExecutionResult(
                file=path,
                status="timeout",
                duration=duration,
                message=f"Timeout after {policy.timeout * 1000:.0f}ms",
            )

        log.debug(
            "Finished %s with exit code %s (%d bytes of output)",
            path,
            process.returncode,
            len(stdout),
        )
        error_output = stderr.decode(errors="replace")

        if process.returncode != 0:
            return ExecutionResult(
                file=path,
                status="failure",
                duration=duration,
                message=error_output.strip() or f"Exit code: {process.returncode}",
            )

        if self.fail_on_stderr_errors and has_error_markers(error_output):
            return ExecutionResult(
                file=path,
                status="failure",
                duration=duration,
                message=error_output.strip(),
            )

        return ExecutionResult(file=path, status="success", duration=duration)


async def _collect_output(
    process: asyncio.subprocess.Process, stdin: str | None
) -> tuple[bytes, bytes]:
    """Wait for the child to exit and both output pipes to reach EOF.

    Scripted input is written and then stdin is closed. Without scripted
    input stdin stays open, so an example waiting for a user blocks until it
    times out instead of reading EOF.
    """
    if stdin is not None:
        return await process.communicate(stdin.encode())

    assert process.stdout is not None and process.stderr is not None
    stdout, stderr, _ = await asyncio.gather(
        process.stdout.read(), process.stderr.read(), process.wait()
    )
    return stdout, stderr


async def _kill(process: asyncio.subprocess.Process) -> None:
    """Kill the child's process group, reap the child and close its pipes.

    The group is signalled even when the child itself has already exited.
    """
    with contextlib.suppress(ProcessLookupError):
        if sys.platform == "win32":
            process.kill()
        else:
            os.killpg(process.pid, signal.SIGKILL)
    if process.stdin is not None:
        process.stdin.close()
    await process.wait()
    await _drain(process)


async def _drain(process: asyncio.subprocess.Process) -> None:
    """Read leftover output so both pipes see EOF and their transports close."""
    streams = [s for s in (process.stdout, process.stderr) if s is not None]
    try:
        async with asyncio.timeout(DRAIN_TIMEOUT):
            await asyncio.gather(*(stream.read() for stream in streams))
    except TimeoutError:
        log.warning("Output of pid %d still open after kill", process.pid)
