"""Core data models shared across monohooks components."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Mapping, Optional, Sequence, Tuple


class HookKind(str, Enum):
    """Git lifecycle points handled by the dispatcher."""

    PRE_COMMIT = "pre-commit"
    POST_MERGE = "post-merge"
    PRE_PUSH = "pre-push"

    @classmethod
    def parse(cls, value: str) -> "HookKind":
        try:
            return cls(value)
        except ValueError:
            valid = ", ".join(kind.value for kind in cls)
            raise ValueError(f"Unknown hook kind '{value}'. Allowed values: {valid}") from None


LANGUAGE_TAGS: Tuple[str, ...] = (
    "node",
    "python",
    "dotnet",
    "sql",
    "yaml",
    "xml",
    "json",
    "markdown",
)


@dataclass(frozen=True)
class LanguageClassification:
    """Which language buckets are present in a change set."""

    present: Mapping[str, bool]
    files: Tuple[str, ...] = ()

    def has(self, language: str) -> bool:
        return bool(self.present.get(language, False))

    @property
    def languages(self) -> List[str]:
        return [tag for tag in LANGUAGE_TAGS if self.has(tag)]


@dataclass(frozen=True)
class ValidationMode:
    """Branch a pre-push runs on and the base it compares against.

    A ``base`` of None means every project is validated, not just the affected ones.
    """

    branch: str
    base: Optional[str] = None

    @property
    def affected(self) -> bool:
        return self.base is not None


@dataclass
class StepOutcome:
    """A delegated command run (or skipped) during a hook."""

    name: str
    command: Sequence[str]
    returncode: int = 0
    skipped: bool = False


@dataclass
class HookRunSummary:
    """Result of dispatching a single hook invocation."""

    kind: HookKind
    classification: LanguageClassification
    steps: List[StepOutcome] = field(default_factory=list)
    env: Mapping[str, str] = field(default_factory=dict)
    mode: Optional[ValidationMode] = None

    @property
    def exit_code(self) -> int:
        for step in self.steps:
            if step.returncode != 0:
                return step.returncode
        return 0
