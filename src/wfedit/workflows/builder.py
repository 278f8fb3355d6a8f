"""Fluent builder for authoring workflow documents."""

from __future__ import annotations

from typing import Any, TypeVar

import yaml

from wfedit.config import DEFAULT_ENTRY_TOOL
from wfedit.core.exceptions import ValidationFailedError
from wfedit.workflows.schema import WorkflowSchemaValidator

_B = TypeVar("_B", bound="StepListBuilder")


class StepListBuilder:
    """Accumulates ``tool_name`` + ``arguments`` steps in order."""

    def __init__(self) -> None:
        self._steps: list[dict[str, Any]] = []

    def step(
        self: _B,
        tool_name: str,
        *,
        steps: StepListBuilder | None = None,
        **arguments: Any,
    ) -> _B:
        """Append a step; ``steps`` nests a sub-sequence under its arguments."""
        step_arguments = dict(arguments)
        if steps is not None:
            step_arguments["steps"] = steps.to_list()
        self._steps.append({"tool_name": tool_name, "arguments": step_arguments})
        return self

    def to_list(self) -> list[dict[str, Any]]:
        return [dict(s) for s in self._steps]

    @property
    def step_count(self) -> int:
        return len(self._steps)


class WorkflowBuilder(StepListBuilder):
    """Builds a complete ``execute_sequence`` document.

    Example:
        content = (
            WorkflowBuilder(name="open-notepad")
            .description("Open Notepad and type a greeting")
            .variable("greeting", "string", label="Greeting", default="hello")
            .step("open_application", app_name="notepad")
            .step("type_into_element", selector="role:Edit", text_to_type="{{greeting}}")
            .to_yaml()
        )
    """

    def __init__(self, name: str | None = None, entry_tool: str = DEFAULT_ENTRY_TOOL):
        super().__init__()
        self._entry_tool = entry_tool
        self._name = name
        self._description: str | None = None
        self._variables: dict[str, dict[str, Any]] = {}
        self._stop_on_error: bool | None = None

    def description(self, text: str) -> WorkflowBuilder:
        self._description = text
        return self

    def variable(
        self,
        name: str,
        type: str = "string",
        *,
        label: str | None = None,
        description: str | None = None,
        default: Any = None,
        options: list[Any] | None = None,
    ) -> WorkflowBuilder:
        definition: dict[str, Any] = {"type": type}
        for key, value in (
            ("label", label),
            ("description", description),
            ("default", default),
            ("options", options),
        ):
            if value is not None:
                definition[key] = value
        self._variables[name] = definition
        return self

    def stop_on_error(self, enabled: bool = True) -> WorkflowBuilder:
        self._stop_on_error = enabled
        return self

    def build(self) -> dict[str, Any]:
        """Return the document as plain data.

        Raises:
            ValidationFailedError: the assembled document is not a valid workflow
        """
        document: dict[str, Any] = {}
        if self._name:
            document["name"] = self._name
        if self._description:
            document["description"] = self._description
        document["tool_name"] = self._entry_tool

        arguments: dict[str, Any] = {}
        if self._variables:
            arguments["variables"] = {k: dict(v) for k, v in self._variables.items()}
        if self._stop_on_error is not None:
            arguments["stop_on_error"] = self._stop_on_error
        arguments["steps"] = self.to_list()
        document["arguments"] = arguments

        result = WorkflowSchemaValidator(self._entry_tool).validate_data(document)
        if not result.ok:
            raise ValidationFailedError(
                "Built workflow is not valid", violations=list(result.violations)
            )
        return document

    def to_yaml(self) -> str:
        return yaml.safe_dump(
            self.build(), default_flow_style=False, sort_keys=False, allow_unicode=True
        )
