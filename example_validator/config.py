"""Configuration for the example validation harness."""

from pathlib import Path
from typing import Self

from pydantic import Field, PositiveFloat, PositiveInt, field_validator, model_validator

from example_validator.models.base import Model


class HarnessConfig(Model):
    """Compiled-in settings for one validation run."""

    project_root: Path = Field(
        default_factory=Path.cwd, description="Course root holding chapter folders"
    )
    chapter_pattern: str = Field(
        default=r"^\d{2}-", description="Regex matching chapter directory names"
    )
    example_dirs: tuple[str, ...] = Field(
        default=("code", "solution", "samples"),
        description="Per-chapter subfolders scanned, in this order",
    )
    extension: str = Field(default=".ts", description="Example file extension")
    excluded_names: tuple[str, ...] = Field(
        default=("validate-examples",),
        description="File name fragments never treated as examples",
    )
    interpreter: tuple[str, ...] = Field(
        default=("npx", "tsx"), description="Command prefix used to run an example"
    )
    timeout: PositiveFloat = Field(default=30.0, description="Seconds per example")
    slow_timeout: PositiveFloat = Field(
        default=60.0, description="Seconds per example registered as slow"
    )
    env: dict[str, str] = Field(
        default_factory=lambda: {"CI": "true"},
        description="Variables added to each child's environment",
    )
    error_excerpt_lines: PositiveInt = Field(
        default=3, description="Diagnostic lines shown per failure in the summary"
    )
    fail_on_stderr_errors: bool = Field(
        default=False,
        description="Treat error markers on stderr as failure despite exit code 0",
    )
    concurrency: PositiveInt = Field(
        default=1, description="Examples executed at the same time"
    )

    @field_validator("extension")
    @classmethod
    def _check_extension(cls, value: str) -> str:
        if not value.startswith(".") or len(value) < 2:
            raise ValueError(f"extension must look like '.ts', got {value!r}")
        return value

    @field_validator("interpreter")
    @classmethod
    def _check_interpreter(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if not value or not value[0]:
            raise ValueError("interpreter command must not be empty")
        return value

    @model_validator(mode="after")
    def _check_timeouts(self) -> Self:
        if self.slow_timeout < self.timeout:
            raise ValueError("slow_timeout must not be shorter than timeout")
        return self
