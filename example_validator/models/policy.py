"""Models describing how a single example file must be executed."""

from dataclasses import dataclass
from typing import Self

from pydantic import Field, model_validator

from example_validator.models.base import Model


class Classification(Model):
    """Execution tags registered for an example file name."""

    slow: bool = Field(
        default=False, description="Run with the extended timeout"
    )
    stdin: str | None = Field(
        default=None,
        description="Scripted input that drives an interactive example to completion",
    )

    @property
    def interactive(self) -> bool:
        """Whether the example reads from standard input."""
        return self.stdin is not None

    @model_validator(mode="after")
    def _check_tags(self) -> Self:
        if not self.slow and self.stdin is None:
            raise ValueError("classification must be slow, interactive, or both")
        if self.stdin is not None:
            if not self.stdin:
                raise ValueError("scripted input must not be empty")
            if not self.stdin.endswith("\n"):
                raise ValueError("scripted input must end with a newline")
        return self


@dataclass(frozen=True, kw_only=True)
class ExecutionPolicy:
    """Resolved timeout and input for one execution."""

    timeout: float
    stdin: str | None = None
