"""Operation surface for agent transports.

Each function returns a JSON-ready payload or raises a
:class:`~wfedit.core.exceptions.WfEditError` whose ``to_dict()`` is the
structured error to send back.
"""

from typing import Any

from wfedit.config import load_config
from wfedit.documents.editor import EditRequest
from wfedit.workflows.repository import WorkflowRepository


def get_repository() -> WorkflowRepository:
    """Repository built from the current configuration."""
    return WorkflowRepository(load_config().workflows)


def read_workflow(file_path: str) -> dict[str, Any]:
    lines = get_repository().read(file_path)
    return {
        "file_path": file_path,
        "lines": [{"line": n, "text": text} for n, text in lines],
    }


def list_workflows(directory: str, pattern: str | None = None) -> dict[str, Any]:
    listings = get_repository().list_workflows(directory, pattern)
    return {
        "directory": directory,
        "workflows": [listing.to_dict() for listing in listings],
    }


def search_workflows(directory: str, pattern: str, use_regex: bool = False) -> dict[str, Any]:
    results = get_repository().search(directory, pattern, use_regex=use_regex)
    matches = [match.to_dict() for match in results]
    return {
        "directory": directory,
        "pattern": pattern,
        "matches": matches,
        "warnings": [w.to_dict() for w in results.warnings],
    }


def edit_workflow(
    file_path: str, old_string: str, new_string: str, replace_all: bool = False
) -> dict[str, Any]:
    request = EditRequest.of(old_string, new_string, replace_all)
    result = get_repository().edit(file_path, request)
    return {
        "file_path": str(result.document.path),
        "replacements": result.replacements,
    }


def create_workflow(file_path: str, content: str) -> dict[str, Any]:
    validation = get_repository().create(file_path, content)
    return {"file_path": file_path, "validation": validation.to_dict()}


def validate_workflow(file_path: str) -> dict[str, Any]:
    validation = get_repository().validate(file_path)
    return {"file_path": file_path, **validation.to_dict()}


def append_workflow(file_path: str, content: str) -> dict[str, Any]:
    document = get_repository().append(file_path, content)
    return {"file_path": str(document.path), "lines": document.line_count}
