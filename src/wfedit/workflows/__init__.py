"""Workflow documents: schema, builder, repository and operations."""

from wfedit.workflows.builder import WorkflowBuilder
from wfedit.workflows.operations import (
    create_workflow,
    edit_workflow,
    list_workflows,
    read_workflow,
    search_workflows,
    validate_workflow,
)
from wfedit.workflows.repository import WorkflowRepository
from wfedit.workflows.results import ValidationResult, Violation, WorkflowListing
from wfedit.workflows.schema import WorkflowDocument, WorkflowSchemaValidator

__all__ = [
    "WorkflowBuilder",
    "WorkflowDocument",
    "WorkflowRepository",
    "WorkflowSchemaValidator",
    "ValidationResult",
    "Violation",
    "WorkflowListing",
    "read_workflow",
    "list_workflows",
    "search_workflows",
    "edit_workflow",
    "create_workflow",
    "validate_workflow",
]
