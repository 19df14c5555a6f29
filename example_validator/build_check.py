"""Type-check the whole course with the TypeScript compiler."""

import argparse
import asyncio
import logging
import os
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import TextIO

from example_validator.reporter import BANNER

log = logging.getLogger(__name__)

SKIPPED_NAMES = frozenset({"node_modules", "dist", "future", "scripts"})
COMPILER_COMMAND = ("npx", "tsc", "--noEmit", "--pretty")


def find_source_files(
    directory: Path,
    *,
    extension: str = ".ts",
    skipped: frozenset[str] = SKIPPED_NAMES,
) -> Sequence[Path]:
    """Collect course source files, skipping build output and hidden entries."""
    files: list[Path] = []

    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda entry: entry.name)
    except OSError as e:
        log.warning("Could not read directory %s: %s", directory, e)
        return files

    for entry in entries:
        if entry.name in skipped or entry.name.startswith("."):
            continue
        path = directory / entry.name
        if entry.is_dir(follow_symlinks=False):
            files.extend(find_source_files(path, extension=extension, skipped=skipped))
        elif entry.is_file(follow_symlinks=False) and entry.name.endswith(extension):
            files.append(path)

    return files


async def run_compiler(
    project_root: Path, command: Sequence[str] = COMPILER_COMMAND
) -> int:
    """Run the compiler with inherited stdio and return its exit code."""
    process = await asyncio.create_subprocess_exec(*command, cwd=project_root)
    return await process.wait()


async def run(
    project_root: Path,
    command: Sequence[str] = COMPILER_COMMAND,
    stream: TextIO | None = None,
) -> int:
    """Check every source file under project_root and return the exit code."""
    out = stream or sys.stdout
    files = find_source_files(project_root)

    print("🔨 Building All Code Examples\n", file=out)
    print(f"{BANNER}\n", file=out)
    print(f"📁 Found {len(files)} TypeScript files\n", file=out)
    print("🔍 Running TypeScript compiler...\n", file=out)
    print(f"{BANNER}\n", file=out, flush=True)

    try:
        exit_code = await run_compiler(project_root, command)
    except OSError as e:
        log.error("Error running TypeScript compiler: %s", e)
        print(f"\n❌ Error running TypeScript compiler: {e}", file=out)
        return 1

    print(f"\n{BANNER}", file=out)
    if exit_code == 0:
        print("\n✅ Build successful! All files compile without errors.\n", file=out)
        print("📊 Summary:", file=out)
        print(f"   Files checked: {len(files)}", file=out)
        print("   Errors: 0", file=out)
        return 0

    print("\n❌ Build failed. Please fix the errors above.\n", file=out)
    print("📊 Summary:", file=out)
    print(f"   Files checked: {len(files)}", file=out)
    print("   Status: FAILED", file=out)
    return 1


def main() -> None:
    """CLI entry point."""
    argparse.ArgumentParser(
        description="Compile all course TypeScript files without emitting output"
    ).parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        exit_code = asyncio.run(run(Path.cwd()))
    except Exception:
        log.exception("Build check error")
        exit_code = 1
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
