"""Workflow schema validation.

A workflow is a single ``execute_sequence`` call::

    tool_name: execute_sequence
    arguments:
      steps:
        - tool_name: navigate_browser
          arguments:
            url: https://example.com

Every step is itself a ``tool_name`` + ``arguments`` pair and may nest
further steps under ``arguments.steps``.
"""

from __future__ import annotations

from typing import Any, Iterator, Literal

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    StrictBool,
    StrictStr,
    ValidationError,
    ValidationInfo,
    field_validator,
)

from wfedit.config import DEFAULT_ENTRY_TOOL
from wfedit.core.exceptions import ValidationFailedError
from wfedit.documents.store import Document
from wfedit.workflows.results import ValidationResult, Violation

DOCUMENT_PATH = "<document>"
ROOT_PATH = "<root>"


class VariableDefinition(BaseModel):
    """Declared workflow input; ``options`` only applies to ``enum``."""

    model_config = ConfigDict(extra="allow")

    type: Literal["string", "number", "boolean", "enum", "array", "object"]
    label: str | None = None
    description: str | None = None
    default: Any = None
    options: list[Any] | None = None
    required: StrictBool | None = None


class StepArguments(BaseModel):
    """Arguments of a single step; only nested ``steps`` are checked."""

    model_config = ConfigDict(extra="allow")

    steps: list[WorkflowStep] | None = None


class WorkflowStep(BaseModel):
    """A single tool invocation."""

    model_config = ConfigDict(extra="allow")

    tool_name: StrictStr
    arguments: StepArguments


StepArguments.model_rebuild()


class SequenceArguments(BaseModel):
    """Arguments of the top-level ``execute_sequence`` call."""

    model_config = ConfigDict(extra="allow")

    steps: list[WorkflowStep]
    variables: dict[str, VariableDefinition] | None = None
    stop_on_error: StrictBool | None = None


class WorkflowDocument(BaseModel):
    """Validated, read-only view of a workflow file.

    Build it with :meth:`from_document`, which refuses content that does
    not satisfy the schema.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    tool_name: StrictStr
    arguments: SequenceArguments

    @field_validator("tool_name")
    @classmethod
    def validate_entry_tool(cls, v: str, info: ValidationInfo) -> str:
        expected = (info.context or {}).get("entry_tool", DEFAULT_ENTRY_TOOL)
        if v != expected:
            raise ValueError(f"expected '{expected}', got '{v}'")
        return v

    @classmethod
    def from_document(
        cls, document: Document, entry_tool: str = DEFAULT_ENTRY_TOOL
    ) -> WorkflowDocument:
        return WorkflowSchemaValidator(entry_tool).parse(document)

    @property
    def steps(self) -> list[WorkflowStep]:
        return self.arguments.steps

    def iter_steps(self) -> Iterator[tuple[str, WorkflowStep]]:
        """Depth-first walk over every step, nested ones included."""
        yield from _walk_steps(self.arguments.steps, "arguments.steps")

    @property
    def tools(self) -> list[str]:
        """Distinct tool names in first-use order."""
        seen: dict[str, None] = {}
        for _, step in self.iter_steps():
            seen.setdefault(step.tool_name, None)
        return list(seen)


def _walk_steps(steps: list[WorkflowStep], prefix: str) -> Iterator[tuple[str, WorkflowStep]]:
    for index, step in enumerate(steps):
        path = f"{prefix}[{index}]"
        yield path, step
        if step.arguments.steps:
            yield from _walk_steps(step.arguments.steps, f"{path}.arguments.steps")


def format_location(loc: tuple[int | str, ...]) -> str:
    """Render a pydantic error location as ``arguments.steps[2].tool_name``."""
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        elif path:
            path += f".{part}"
        else:
            path = str(part)
    return path or ROOT_PATH


def _violation_message(error: dict[str, Any]) -> str:
    error_type = error["type"]
    if error_type == "missing":
        return f"missing required field '{error['loc'][-1]}'"
    if error_type == "value_error":
        return str(error["ctx"]["error"])
    return error["msg"]


def violations_from_error(error: ValidationError) -> list[Violation]:
    return [
        Violation(path=format_location(tuple(e["loc"])), message=_violation_message(e))
        for e in error.errors(include_url=False)
    ]


class WorkflowSchemaValidator:
    """Checks parsed documents against the workflow schema.

    All violations are collected and returned together; only a YAML parse
    failure stops the remaining checks.
    """

    def __init__(self, entry_tool: str = DEFAULT_ENTRY_TOOL):
        self.entry_tool = entry_tool

    def _load(self, content: str) -> tuple[Any, list[Violation]]:
        try:
            return yaml.safe_load(content), []
        except yaml.YAMLError as e:
            return None, [Violation(path=DOCUMENT_PATH, message=f"Invalid YAML: {e}")]

    def _build(self, data: Any) -> tuple[WorkflowDocument | None, list[Violation]]:
        try:
            workflow = WorkflowDocument.model_validate(
                data, context={"entry_tool": self.entry_tool}
            )
        except ValidationError as e:
            return None, violations_from_error(e)
        return workflow, []

    def check(self, source: Document | str) -> tuple[ValidationResult, WorkflowDocument | None]:
        """Validate ``source`` once.

        Returns the result together with the parsed workflow, which is
        ``None`` whenever the result is not ok.
        """
        content = source.text if isinstance(source, Document) else source
        data, violations = self._load(content)
        workflow = None
        if not violations:
            workflow, violations = self._build(data)
        return ValidationResult.from_violations(violations), workflow

    def validate_data(self, data: Any) -> ValidationResult:
        """Validate an already-parsed structure."""
        _, violations = self._build(data)
        return ValidationResult.from_violations(violations)

    def validate_text(self, content: str) -> ValidationResult:
        return self.check(content)[0]

    def validate_document(self, document: Document) -> ValidationResult:
        return self.check(document)[0]

    def parse(self, source: Document | str) -> WorkflowDocument:
        """Build a :class:`WorkflowDocument`.

        Raises:
            ValidationFailedError: the content is not a valid workflow
        """
        result, workflow = self.check(source)
        if workflow is None:
            raise ValidationFailedError(
                f"Workflow validation failed with {len(result.violations)} violation(s)",
                violations=list(result.violations),
            )
        return workflow

    def looks_like_workflow(self, content: str) -> bool:
        """True when ``content`` parses to a mapping carrying a ``tool_name`` key."""
        data, violations = self._load(content)
        return not violations and isinstance(data, dict) and "tool_name" in data
