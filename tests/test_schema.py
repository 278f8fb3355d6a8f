"""Tests for workflow schema validation."""

import pytest

from wfedit.core.exceptions import ValidationFailedError
from wfedit.documents.store import Document
from wfedit.workflows.schema import (
    WorkflowDocument,
    WorkflowSchemaValidator,
    format_location,
)


@pytest.fixture
def validator() -> WorkflowSchemaValidator:
    return WorkflowSchemaValidator()


def paths(result) -> list[str]:
    return [v.path for v in result.violations]


class TestFormatLocation:
    """Tests for violation path rendering."""

    def test_nested(self):
        assert format_location(("arguments", "steps", 2, "tool_name")) == "arguments.steps[2].tool_name"

    def test_top_level(self):
        assert format_location(("tool_name",)) == "tool_name"

    def test_empty(self):
        assert format_location(()) == "<root>"


class TestWorkflowSchemaValidator:
    """Tests for structural validation."""

    def test_valid_workflow(self, validator, valid_workflow):
        result = validator.validate_text(valid_workflow)
        assert result.ok
        assert result.violations == ()

    def test_empty_steps_valid(self, validator, empty_workflow):
        assert validator.validate_text(empty_workflow).ok

    def test_extra_top_level_fields_allowed(self, validator, empty_workflow):
        content = "name: demo\ndescription: x\n" + empty_workflow
        assert validator.validate_text(content).ok

    def test_invalid_yaml(self, validator):
        result = validator.validate_text("tool_name: [unclosed\n")
        assert not result.ok
        assert paths(result) == ["<document>"]
        assert result.violations[0].message.startswith("Invalid YAML")

    def test_empty_document(self, validator):
        result = validator.validate_text("")
        assert not result.ok
        assert paths(result) == ["<root>"]

    def test_non_mapping_root(self, validator):
        result = validator.validate_text("- a\n- b\n")
        assert not result.ok
        assert paths(result) == ["<root>"]

    def test_missing_arguments(self, validator):
        result = validator.validate_text("tool_name: execute_sequence\n")
        assert not result.ok
        assert paths(result) == ["arguments"]
        assert result.violations[0].message == "missing required field 'arguments'"

    def test_missing_tool_name(self, validator):
        result = validator.validate_text("arguments:\n  steps: []\n")
        assert paths(result) == ["tool_name"]

    def test_wrong_entry_tool(self, validator):
        result = validator.validate_text("tool_name: run_steps\narguments:\n  steps: []\n")
        assert paths(result) == ["tool_name"]
        assert result.violations[0].message == "expected 'execute_sequence', got 'run_steps'"

    def test_custom_entry_tool(self):
        validator = WorkflowSchemaValidator(entry_tool="run_steps")
        assert validator.validate_text("tool_name: run_steps\narguments:\n  steps: []\n").ok

    def test_steps_must_be_list(self, validator):
        result = validator.validate_text("tool_name: execute_sequence\narguments:\n  steps: nope\n")
        assert paths(result) == ["arguments.steps"]

    def test_missing_steps(self, validator):
        result = validator.validate_text("tool_name: execute_sequence\narguments: {}\n")
        assert paths(result) == ["arguments.steps"]

    def test_step_violation_path(self, validator):
        content = (
            "tool_name: execute_sequence\n"
            "arguments:\n"
            "  steps:\n"
            "    - tool_name: a\n"
            "      arguments: {}\n"
            "    - tool_name: b\n"
            "      arguments: {}\n"
            "    - arguments: {}\n"
        )
        result = validator.validate_text(content)
        assert paths(result) == ["arguments.steps[2].tool_name"]

    def test_all_violations_collected(self, validator):
        content = (
            "tool_name: wrong\n"
            "arguments:\n"
            "  steps:\n"
            "    - tool_name: 5\n"
            "      arguments: {}\n"
            "    - tool_name: ok\n"
        )
        result = validator.validate_text(content)
        assert paths(result) == [
            "tool_name",
            "arguments.steps[0].tool_name",
            "arguments.steps[1].arguments",
        ]

    def test_nested_steps_validated(self, validator):
        content = (
            "tool_name: execute_sequence\n"
            "arguments:\n"
            "  steps:\n"
            "    - tool_name: group\n"
            "      arguments:\n"
            "        steps:\n"
            "          - tool_name: inner\n"
        )
        result = validator.validate_text(content)
        assert paths(result) == ["arguments.steps[0].arguments.steps[0].arguments"]

    def test_variables(self, validator):
        content = (
            "tool_name: execute_sequence\n"
            "arguments:\n"
            "  variables:\n"
            "    name: {type: string, label: Name}\n"
            "    browser: {type: enum, options: [chrome, edge]}\n"
            "  steps: []\n"
        )
        assert validator.validate_text(content).ok

    def test_array_object_and_bare_enum_variables(self, validator):
        content = (
            "tool_name: execute_sequence\n"
            "arguments:\n"
            "  variables:\n"
            "    items: {type: array}\n"
            "    payload: {type: object, required: false}\n"
            "    mode: {type: enum, default: fast}\n"
            "  steps: []\n"
        )
        assert validator.validate_text(content).ok

    def test_unknown_variable_type(self, validator):
        content = (
            "tool_name: execute_sequence\n"
            "arguments:\n"
            "  variables:\n"
            "    count: {type: integer}\n"
            "  steps: []\n"
        )
        assert paths(validator.validate_text(content)) == ["arguments.variables.count.type"]

    def test_stop_on_error_must_be_bool(self, validator):
        content = "tool_name: execute_sequence\narguments:\n  stop_on_error: maybe\n  steps: []\n"
        assert paths(validator.validate_text(content)) == ["arguments.stop_on_error"]

    def test_check_returns_workflow_once_valid(self, validator, valid_workflow):
        result, workflow = validator.check(valid_workflow)
        assert result.ok
        assert [s.tool_name for s in workflow.steps] == ["navigate_browser", "open_application"]

        result, workflow = validator.check("tool_name: execute_sequence\n")
        assert paths(result) == ["arguments"]
        assert workflow is None

    def test_validate_data(self, validator):
        data = {"tool_name": "execute_sequence", "arguments": {"steps": []}}
        assert validator.validate_data(data).ok

    def test_looks_like_workflow(self, validator):
        assert validator.looks_like_workflow("tool_name: anything\n")
        assert not validator.looks_like_workflow("key: value\n")
        assert not validator.looks_like_workflow("[unclosed")
        assert not validator.looks_like_workflow("- tool_name: x\n")

    def test_result_to_dict(self, validator):
        result = validator.validate_text("tool_name: execute_sequence\n")
        assert result.to_dict() == {
            "ok": False,
            "violations": [
                {"path": "arguments", "message": "missing required field 'arguments'"}
            ],
        }
        assert result.messages == ["arguments: missing required field 'arguments'"]


class TestWorkflowDocument:
    """Tests for the parsed workflow view."""

    def test_from_document(self, tmp_path, valid_workflow):
        doc = Document.from_text(tmp_path / "flow.yml", valid_workflow)
        workflow = WorkflowDocument.from_document(doc)
        assert workflow.tool_name == "execute_sequence"
        assert [s.tool_name for s in workflow.steps] == ["navigate_browser", "open_application"]

    def test_from_document_invalid(self, tmp_path):
        doc = Document.from_text(tmp_path / "flow.yml", "tool_name: execute_sequence\n")
        with pytest.raises(ValidationFailedError) as exc_info:
            WorkflowDocument.from_document(doc)
        assert exc_info.value.kind == "ValidationFailed"
        assert len(exc_info.value.violations) == 1

    def test_step_arguments_kept(self, validator, valid_workflow):
        workflow = validator.parse(valid_workflow)
        assert workflow.steps[0].arguments.model_extra == {"url": "https://example.com"}

    def test_iter_steps_and_tools(self, validator):
        content = (
            "tool_name: execute_sequence\n"
            "arguments:\n"
            "  steps:\n"
            "    - tool_name: group\n"
            "      arguments:\n"
            "        steps:\n"
            "          - tool_name: click_element\n"
            "            arguments: {}\n"
            "    - tool_name: click_element\n"
            "      arguments: {}\n"
        )
        workflow = validator.parse(content)
        assert [path for path, _ in workflow.iter_steps()] == [
            "arguments.steps[0]",
            "arguments.steps[0].arguments.steps[0]",
            "arguments.steps[1]",
        ]
        assert workflow.tools == ["group", "click_element"]
