"""Workflow file operations: read, list, search, edit, append, create, validate."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from wfedit.config import WorkflowSettings
from wfedit.core.exceptions import (
    AlreadyExistsError,
    FileAccessError,
    InvalidRequestError,
    NotFoundError,
    ValidationFailedError,
    WfEditError,
)
from wfedit.core.logging import StructuredLogger
from wfedit.documents.editor import EditRequest, EditResult, ExactMatchEditor
from wfedit.documents.search import (
    PatternSearchEngine,
    SearchResults,
    iter_candidate_files,
    matches_filter,
    normalize_patterns,
)
from wfedit.documents.store import Document, TextDocumentStore
from wfedit.workflows.results import ValidationResult, WorkflowListing
from wfedit.workflows.schema import WorkflowDocument, WorkflowSchemaValidator


class WorkflowRepository:
    """Composes the document store, editor, search engine and validator.

    Every operation is a self-contained unit of work: documents are loaded
    fresh, nothing is cached between calls.
    """

    def __init__(
        self,
        settings: WorkflowSettings | None = None,
        store: TextDocumentStore | None = None,
    ):
        self.settings = settings or WorkflowSettings()
        self.store = store or TextDocumentStore()
        self.editor = ExactMatchEditor()
        self.search_engine = PatternSearchEngine(self.store)
        self.validator = WorkflowSchemaValidator(self.settings.entry_tool)
        self.logger = StructuredLogger(__name__)

    def read(
        self, path: str | Path, start_line: int = 1, limit: int | None = None
    ) -> list[tuple[int, str]]:
        """Return ``(line_number, text)`` pairs, 1-based."""
        document = self.store.load(path)
        self.logger.debug("Read workflow", path=document.path, lines=document.line_count)
        return document.numbered_lines(start_line, limit)

    def list_workflows(
        self, directory: str | Path, pattern: str | Sequence[str] | None = None
    ) -> list[WorkflowListing]:
        """Validate every matching file under ``directory``.

        A file that cannot be read or parsed is listed as ``invalid``; it does
        not abort the listing.
        """
        patterns = normalize_patterns(pattern or self.settings.file_patterns)
        listings = []
        for path in iter_candidate_files(directory, patterns):
            listings.append(self._describe(path))
        self.logger.info("Listed workflows", directory=directory, count=len(listings))
        return listings

    def _describe(self, path: Path) -> WorkflowListing:
        try:
            document = self.store.load(path)
        except WfEditError as e:
            try:
                size = path.stat().st_size
            except OSError:
                size = 0
            return WorkflowListing(path=path, size=size, status="invalid", error=e.message)

        try:
            workflow = self.validator.parse(document)
        except ValidationFailedError as e:
            return WorkflowListing(
                path=document.path,
                size=document.size,
                status="invalid",
                error=str(e.violations[0]) if e.violations else e.message,
            )
        return WorkflowListing(
            path=document.path,
            size=document.size,
            status="valid",
            steps=len(workflow.steps),
        )

    def search(
        self,
        directory: str | Path,
        pattern: str,
        use_regex: bool = False,
        file_filter: str | Sequence[str] | None = None,
        max_results: int | None = None,
    ) -> SearchResults:
        """Lazily search workflow files for ``pattern``."""
        return self.search_engine.search(
            directory,
            pattern,
            use_regex=use_regex,
            file_filter=file_filter or self.settings.file_patterns,
            max_results=max_results,
        )

    def is_workflow(self, document: Document) -> bool:
        """Workflow files are recognized by extension or by their shape."""
        return matches_filter(
            document.path, self.settings.file_patterns
        ) or self.validator.looks_like_workflow(document.text)

    def _ensure_valid(
        self, original: Document, updated: Document, log: StructuredLogger, action: str
    ) -> None:
        """Refuse ``updated`` when ``original`` is a workflow and the result is not."""
        if not self.is_workflow(original):
            return
        validation = self.validator.validate_document(updated)
        if not validation.ok:
            log.warning(f"{action} rejected", violations=len(validation.violations))
            raise ValidationFailedError(
                f"{action} rejected: the result is not a valid workflow",
                violations=list(validation.violations),
                details={"path": str(original.path)},
            )

    def edit(self, path: str | Path, request: EditRequest) -> EditResult:
        """Apply an exact-match edit and write it back.

        Workflow files are validated after the edit; an edit that would leave
        an invalid workflow is rejected and nothing is written.

        Raises:
            NoMatchError, AmbiguousMatchError: from the editor, file untouched
            ValidationFailedError: the edited workflow is invalid, file untouched
        """
        document = self.store.load(path)
        log = self.logger.bind(path=document.path)
        result = self.editor.apply(document, request)
        self._ensure_valid(document, result.document, log, "Edit")

        self.store.write(result.document)
        log.info("Edited workflow", replacements=result.replacements)
        return result

    def append(self, path: str | Path, content: str) -> Document:
        """Add ``content`` to the end of an existing file.

        A line break in the file's own convention goes in first when the last
        line is unterminated. Workflow files are validated like :meth:`edit`.

        Raises:
            InvalidRequestError: ``content`` is empty
            ValidationFailedError: the result is not a valid workflow, file untouched
        """
        if content == "":
            raise InvalidRequestError("Content to append must not be empty")
        document = self.store.load(path)
        log = self.logger.bind(path=document.path)
        updated = document.appended(content)
        self._ensure_valid(document, updated, log, "Append")

        self.store.write(updated)
        log.info("Appended to workflow", lines=updated.line_count - document.line_count)
        return updated

    def create(self, path: str | Path, content: str) -> ValidationResult:
        """Validate ``content`` and write it to a new file.

        Raises:
            AlreadyExistsError: ``path`` is occupied
            ValidationFailedError: ``content`` is not a valid workflow
        """
        document = Document.from_text(path, content)
        log = self.logger.bind(path=document.path)
        if self.store.exists(document.path):
            raise AlreadyExistsError(
                f"File already exists: {document.path}", path=str(document.path)
            )

        validation = self.validator.validate_text(content)
        if not validation.ok:
            log.warning("Create rejected", violations=len(validation.violations))
            raise ValidationFailedError(
                "Workflow content is not valid; nothing was written",
                violations=list(validation.violations),
                details={"path": str(document.path)},
            )

        parent = document.path.parent
        if not parent.exists():
            if not self.settings.create_parents:
                raise NotFoundError(f"Directory not found: {parent}", path=str(parent))
            try:
                parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise FileAccessError(f"Cannot create {parent}: {e}", path=str(parent))

        self.store.write(document)
        log.info("Created workflow", size=document.size)
        return validation

    def inspect(self, path: str | Path) -> tuple[ValidationResult, WorkflowDocument | None]:
        """Validate ``path`` and return the parsed workflow alongside the result."""
        document = self.store.load(path)
        result, workflow = self.validator.check(document)
        self.logger.debug(
            "Validated workflow", path=document.path, ok=result.ok, violations=len(result.violations)
        )
        return result, workflow

    def validate(self, path: str | Path) -> ValidationResult:
        return self.inspect(path)[0]
