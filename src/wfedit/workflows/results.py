"""Workflow operation result types."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class Violation:
    """One structural rule failure, addressed by path within the document."""

    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "message": self.message}


@dataclass(frozen=True)
class ValidationResult:
    """Pass/fail plus every violation found, in document order."""

    ok: bool
    violations: tuple[Violation, ...] = field(default_factory=tuple)

    @classmethod
    def from_violations(cls, violations: list[Violation]) -> "ValidationResult":
        return cls(ok=not violations, violations=tuple(violations))

    @property
    def messages(self) -> list[str]:
        return [str(v) for v in self.violations]

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "violations": [v.to_dict() for v in self.violations],
        }


@dataclass(frozen=True)
class WorkflowListing:
    """One row of a workflow directory listing."""

    path: Path
    size: int
    status: str  # valid, invalid
    steps: int | None = None
    error: str | None = None

    @property
    def valid(self) -> bool:
        return self.status == "valid"

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": str(self.path),
            "size": self.size,
            "status": self.status,
            "steps": self.steps,
            "error": self.error,
        }
