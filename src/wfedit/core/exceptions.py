"""Custom exceptions for wfedit.

Every error carries a stable ``kind`` so callers (the CLI, an agent
transport) can branch on it without parsing messages.
"""

from typing import Any


class WfEditError(Exception):
    """Base exception for all wfedit errors."""

    kind = "Error"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Structured error payload."""
        return {
            "error": self.kind,
            "message": self.message,
            "details": self.details,
        }


class ConfigError(WfEditError):
    """Configuration-related errors."""

    kind = "ConfigError"


class PathError(WfEditError):
    """Errors tied to a single file path."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = dict(details or {})
        if path is not None:
            details.setdefault("path", path)
        super().__init__(message, details)
        self.path = path


class NotFoundError(PathError):
    """Target path does not exist."""

    kind = "NotFound"


class AlreadyExistsError(PathError):
    """Create target is already occupied."""

    kind = "AlreadyExists"


class FileAccessError(PathError):
    """Filesystem failure: permissions, disk full, locks."""

    kind = "IOError"


class EncodingError(PathError):
    """File content is not decodable text."""

    kind = "EncodingError"


class NoMatchError(WfEditError):
    """Edit text was not found in the document."""

    kind = "NoMatch"


class AmbiguousMatchError(WfEditError):
    """Edit text occurs more than once and bulk replacement was not requested."""

    kind = "AmbiguousMatch"

    def __init__(
        self,
        message: str,
        count: int,
        details: dict[str, Any] | None = None,
    ):
        details = dict(details or {})
        details.setdefault("count", count)
        super().__init__(message, details)
        self.count = count


class InvalidPatternError(WfEditError):
    """Search pattern cannot be used."""

    kind = "InvalidPattern"

    def __init__(
        self,
        message: str,
        pattern: str,
        details: dict[str, Any] | None = None,
    ):
        details = dict(details or {})
        details.setdefault("pattern", pattern)
        super().__init__(message, details)
        self.pattern = pattern


class ValidationFailedError(WfEditError):
    """Workflow document violates the schema; nothing was written."""

    kind = "ValidationFailed"

    def __init__(
        self,
        message: str,
        violations: list[Any],
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.violations = list(violations)

    def __str__(self) -> str:
        lines = [self.message]
        lines.extend(f"  {v}" for v in self.violations)
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["violations"] = [
            v.to_dict() if hasattr(v, "to_dict") else str(v) for v in self.violations
        ]
        return payload


class InvalidRequestError(WfEditError):
    """Malformed operation arguments."""

    kind = "InvalidRequest"
