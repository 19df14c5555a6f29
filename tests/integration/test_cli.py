"""End-to-end runs of the validation harness over a temporary course tree."""

import io
import sys
from pathlib import Path

import pytest

from example_validator.cli import run
from example_validator.config import HarnessConfig
from example_validator.discovery import ProjectRootNotFoundError
from example_validator.models.policy import Classification
from example_validator.registry import ClassificationRegistry
from example_validator.reporter import Reporter

from .conftest import WriteScriptFn

RECORD_SPAN = """
    import sys
    import time
    from pathlib import Path

    started = time.time()
    time.sleep({delay})
    with open("spans.log", "a") as log:
        log.write(f"{{Path(sys.argv[0]).name}} {{started}} {{time.time()}}\\n")
"""


def _config(project_root: Path, **overrides: object) -> HarnessConfig:
    return HarnessConfig(
        project_root=project_root,
        interpreter=(sys.executable,),
        **overrides,  # type: ignore[arg-type]
    )


def _reporter(project_root: Path, stream: io.StringIO, **kwargs: bool) -> Reporter:
    return Reporter(project_root=project_root, stream=stream, **kwargs)


async def test_example_scenario(
    project_root: Path, write_script: WriteScriptFn
) -> None:
    """A chapter with a missing solution folder runs its two code examples."""
    write_script("chapterA/code/ok.ts", "raise SystemExit(0)\n")
    write_script("chapterA/code/slow.ts", "import time\ntime.sleep(0.1)\n")
    registry = ClassificationRegistry(
        entries={"slow.ts": Classification(slow=True)}
    )
    stream = io.StringIO()

    exit_code = await run(
        _config(
            project_root,
            chapter_pattern=r"^chapter",
            example_dirs=("code", "solution"),
        ),
        registry=registry,
        reporter=_reporter(project_root, stream),
    )

    output = stream.getvalue()
    assert exit_code == 0
    assert "[1/2] chapterA/code/ok.ts... ✅" in output
    assert "[2/2] chapterA/code/slow.ts... ✅" in output
    assert "   Total:     2" in output
    assert "   Passed:    2 ✅" in output
    assert "   Failed:    0 ❌" in output


async def test_failure_sets_exit_code(
    project_root: Path, write_script: WriteScriptFn
) -> None:
    """One failing example fails the run and is re-listed."""
    write_script("01-intro/code/01-ok.ts", "print('ok')\n")
    write_script(
        "01-intro/code/02-broken.ts",
        """
        import sys

        print("Error: model not found", file=sys.stderr)
        print("    at invoke (model.ts:10:5)", file=sys.stderr)
        sys.exit(1)
        """,
    )
    write_script("01-intro/solution/03-ok.ts", "print('ok')\n")
    stream = io.StringIO()

    exit_code = await run(
        _config(project_root),
        registry=ClassificationRegistry(),
        reporter=_reporter(project_root, stream),
    )

    output = stream.getvalue()
    assert exit_code == 1
    assert "[2/3] 01-intro/code/02-broken.ts... ❌\n   Error: Error: model not found" in output
    assert "❌ Failed Examples:" in output
    assert "   01-intro/code/02-broken.ts\n   → Error: model not found\n" in output
    assert "   Success:   66.7%" in output


async def test_single_timeout_fails_run(
    project_root: Path, write_script: WriteScriptFn
) -> None:
    """A timeout among successes fails the run."""
    write_script("01-intro/code/01-ok.ts", "print('ok')\n")
    write_script("01-intro/code/02-hang.ts", "import time\ntime.sleep(30)\n")
    stream = io.StringIO()

    exit_code = await run(
        _config(project_root, timeout=1.0, slow_timeout=1.0),
        registry=ClassificationRegistry(),
        reporter=_reporter(project_root, stream),
    )

    assert exit_code == 1
    assert "   Timed out: 1 ⏱️" in stream.getvalue()


async def test_interactive_examples_receive_input(
    project_root: Path, write_script: WriteScriptFn
) -> None:
    """Registered interactive examples get their scripted input."""
    write_script(
        "01-intro/solution/qa-program.ts",
        """
        question = input("Ask: ")
        assert question == "What is 2+2?"
        """,
    )
    registry = ClassificationRegistry(
        entries={"qa-program.ts": Classification(slow=True, stdin="What is 2+2?\n")}
    )
    stream = io.StringIO()

    exit_code = await run(
        _config(project_root, timeout=5.0, slow_timeout=10.0),
        registry=registry,
        reporter=_reporter(project_root, stream),
    )

    assert exit_code == 0
    assert "🤖 1 interactive files will be tested with automated input" in stream.getvalue()


async def test_runs_never_overlap(
    project_root: Path, write_script: WriteScriptFn
) -> None:
    """Each example starts only after the previous one ended."""
    write_script("01-intro/code/a.ts", RECORD_SPAN.format(delay=0.3))
    write_script("01-intro/code/b.ts", RECORD_SPAN.format(delay=0.1))
    write_script("02-chat/code/c.ts", RECORD_SPAN.format(delay=0.2))

    exit_code = await run(
        _config(project_root),
        registry=ClassificationRegistry(),
        reporter=_reporter(project_root, io.StringIO()),
    )

    spans = [
        line.split() for line in (project_root / "spans.log").read_text().splitlines()
    ]
    assert exit_code == 0
    assert [name for name, _, _ in spans] == ["a.ts", "b.ts", "c.ts"]
    for (_, _, previous_end), (_, next_start, _) in zip(spans, spans[1:]):
        assert float(next_start) >= float(previous_end)


async def test_parallel_mode_keeps_discovery_order(
    project_root: Path, write_script: WriteScriptFn
) -> None:
    """Parallel runs still summarise failures in discovery order."""
    write_script("01-intro/code/a.ts", "import time\ntime.sleep(0.3)\nraise SystemExit(1)\n")
    write_script("01-intro/code/b.ts", "raise SystemExit(1)\n")
    write_script("01-intro/code/c.ts", "print('ok')\n")
    stream = io.StringIO()

    exit_code = await run(
        _config(project_root, concurrency=3),
        registry=ClassificationRegistry(),
        reporter=_reporter(project_root, stream, parallel=True),
    )

    output = stream.getvalue()
    failures = output.split("❌ Failed Examples:")[1]
    assert exit_code == 1
    assert failures.index("01-intro/code/a.ts") < failures.index("01-intro/code/b.ts")
    assert "Duration:" in output


async def test_excludes_harness_script(
    project_root: Path, write_script: WriteScriptFn
) -> None:
    """The validation script in a scanned folder is never run."""
    write_script("01-intro/code/validate-examples.ts", "raise SystemExit(1)\n")
    write_script("01-intro/code/ok.ts", "print('ok')\n")
    stream = io.StringIO()

    exit_code = await run(
        _config(project_root),
        registry=ClassificationRegistry(),
        reporter=_reporter(project_root, stream),
    )

    assert exit_code == 0
    assert "📁 Found 1 code files" in stream.getvalue()


async def test_missing_project_root_raises(tmp_path: Path) -> None:
    """A missing course root is a harness error."""
    with pytest.raises(ProjectRootNotFoundError):
        await run(
            _config(tmp_path / "missing"),
            reporter=_reporter(tmp_path, io.StringIO()),
        )
