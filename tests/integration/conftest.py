"""Fixtures for integration tests running real child processes."""

import os
import sys
import textwrap
from pathlib import Path
from typing import Protocol

import pytest

from example_validator.executor import ExampleExecutor


class WriteScriptFn(Protocol):
    """Protocol for the example-writing function."""

    def __call__(self, relative_path: str, source: str) -> Path:
        """Write a Python example under the project and return its path."""


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Empty course root."""
    root = tmp_path / "course"
    root.mkdir()
    return root


@pytest.fixture
def write_script(project_root: Path) -> WriteScriptFn:
    """Return a function writing example scripts.

    Examples keep the course's ``.ts`` names but contain Python, so the
    tests can run them with the current interpreter.
    """

    def _write(relative_path: str, source: str) -> Path:
        path = project_root / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(source))
        return path

    return _write


@pytest.fixture
def executor() -> ExampleExecutor:
    """Executor running examples with the current Python interpreter."""
    return ExampleExecutor(interpreter=(sys.executable,), env={"CI": "true"})


def process_alive(pid: int) -> bool:
    """Check whether a process exists and is not a zombie."""
    if Path("/proc/self").exists():
        try:
            text = Path(f"/proc/{pid}/status").read_text()
        except (FileNotFoundError, ProcessLookupError):
            return False
        return "\nState:\tZ" not in text
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    return True
