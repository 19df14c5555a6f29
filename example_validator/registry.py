"""Registry of example files that need a longer timeout or scripted input.

Classification is keyed by bare file name and matched as a suffix of the
example's file name. The same name in two chapters therefore shares one
entry; example names are expected to be unique across the course.
"""

from pathlib import Path

from pydantic import Field, field_validator

from example_validator.models.base import Model
from example_validator.models.policy import Classification, ExecutionPolicy


class ClassificationRegistry(Model):
    """Validated mapping from example file name to its classification."""

    entries: dict[str, Classification] = Field(default_factory=dict)

    @field_validator("entries")
    @classmethod
    def _check_names(
        cls, value: dict[str, Classification]
    ) -> dict[str, Classification]:
        for name in value:
            if not name.strip():
                raise ValueError("registry entry name must not be empty")
            if "/" in name or "\\" in name:
                raise ValueError(f"registry entry must be a file name, got {name!r}")
        return value

    def lookup(self, path: Path) -> Classification | None:
        """Return the first entry whose name ends the path's file name."""
        for name, classification in self.entries.items():
            if path.name.endswith(name):
                return classification
        return None

    def is_interactive(self, path: Path) -> bool:
        """Whether the example must be fed scripted input."""
        classification = self.lookup(path)
        return classification is not None and classification.interactive

    def is_slow(self, path: Path) -> bool:
        """Whether the example gets the extended timeout."""
        classification = self.lookup(path)
        return classification is not None and classification.slow

    def scripted_input(self, path: Path) -> str | None:
        """Input written to the example's stdin, if it is interactive."""
        classification = self.lookup(path)
        return classification.stdin if classification is not None else None

    def policy_for(
        self, path: Path, *, timeout: float, slow_timeout: float
    ) -> ExecutionPolicy:
        """Resolve the execution policy for an example file."""
        classification = self.lookup(path)
        if classification is None:
            return ExecutionPolicy(timeout=timeout)
        return ExecutionPolicy(
            timeout=slow_timeout if classification.slow else timeout,
            stdin=classification.stdin,
        )


DEFAULT_REGISTRY = ClassificationRegistry(
    entries={
        # Interactive examples, all of which also call the model
        "chatbot.ts": Classification(slow=True, stdin="Hello\n"),
        "streaming-chat.ts": Classification(slow=True, stdin="Hello\n"),
        "qa-program.ts": Classification(slow=True, stdin="What is 2+2?\n"),
        "03-human-in-loop.ts": Classification(slow=True, stdin="yes\nno\nno\n"),
        "conversational-rag.ts": Classification(
            slow=True, stdin="What is RAG?\nexit\n"
        ),
        # Several sequential API calls each
        "03-model-comparison.ts": Classification(slow=True),
        "model-performance.ts": Classification(slow=True),
        "personality-test.ts": Classification(slow=True),
        "03-parameters.ts": Classification(slow=True),
        "temperature-lab.ts": Classification(slow=True),
        "04-error-handling.ts": Classification(slow=True),
        "robust-chat.ts": Classification(slow=True),
        "01-multi-turn.ts": Classification(slow=True),
        "02-streaming.ts": Classification(slow=True),
        "03-summary-memory.ts": Classification(slow=True),
    }
)
