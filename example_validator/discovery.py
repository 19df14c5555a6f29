"""Discover runnable example files in the course tree."""

import logging
import os
import re
from collections.abc import Iterable, Sequence
from pathlib import Path

log = logging.getLogger(__name__)


class ProjectRootNotFoundError(Exception):
    """Raised when the course root directory does not exist."""


def find_chapters(project_root: Path, pattern: str = r"^\d{2}-") -> Sequence[str]:
    """Return chapter directory names under the project root, sorted.

    Args:
        project_root: Course root directory
        pattern: Regex a directory name must match to count as a chapter

    Raises:
        ProjectRootNotFoundError: If project_root is not a directory

    """
    if not project_root.is_dir():
        raise ProjectRootNotFoundError(f"Project root not found: {project_root}")

    chapter_re = re.compile(pattern)
    return sorted(
        entry.name
        for entry in project_root.iterdir()
        if entry.is_dir() and chapter_re.match(entry.name)
    )


def chapter_roots(
    project_root: Path, chapters: Iterable[str], subfolders: Iterable[str]
) -> Sequence[Path]:
    """Expand chapters into the example folders to scan, chapter by chapter."""
    folders = tuple(subfolders)
    return [project_root / chapter / folder for chapter in chapters for folder in folders]


def find_example_files(
    directory: Path,
    *,
    extension: str = ".ts",
    excluded_names: Sequence[str] = ("validate-examples",),
) -> Sequence[Path]:
    """Recursively collect example files below a directory.

    Entries are visited in name order so repeated runs over the same tree
    yield the same list. A directory that is missing or cannot be read logs
    a warning and contributes nothing.
    """
    files: list[Path] = []

    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda entry: entry.name)
    except FileNotFoundError:
        log.warning("Example directory not found: %s", directory)
        return files
    except OSError as e:
        log.warning("Could not read directory %s: %s", directory, e)
        return files

    for entry in entries:
        path = directory / entry.name
        if entry.is_dir(follow_symlinks=False):
            files.extend(
                find_example_files(
                    path, extension=extension, excluded_names=excluded_names
                )
            )
        elif entry.is_file(follow_symlinks=False) and entry.name.endswith(extension):
            if any(excluded in entry.name for excluded in excluded_names):
                log.debug("Skipping excluded file: %s", path)
                continue
            files.append(path)

    return files


def collect_example_files(
    roots: Iterable[Path],
    *,
    extension: str = ".ts",
    excluded_names: Sequence[str] = ("validate-examples",),
) -> Sequence[Path]:
    """Concatenate the example files of every root, keeping root order."""
    files: list[Path] = []
    for root in roots:
        files.extend(
            find_example_files(root, extension=extension, excluded_names=excluded_names)
        )
    return files
