"""Exact-match text editing with a uniqueness contract.

An edit names the text to replace verbatim. If that text occurs more than
once the edit is refused unless the caller explicitly asks for every
occurrence to be replaced; the first occurrence is never picked silently.
"""

from dataclasses import dataclass

from pydantic import BaseModel, ValidationError, field_validator

from wfedit.core.exceptions import AmbiguousMatchError, InvalidRequestError, NoMatchError
from wfedit.core.logging import get_logger
from wfedit.documents.store import Document

logger = get_logger(__name__)


class EditRequest(BaseModel):
    """A verbatim old/new text pair."""

    model_config = {"frozen": True}

    old_text: str
    new_text: str
    replace_all: bool = False

    @field_validator("old_text")
    @classmethod
    def validate_old_text(cls, v: str) -> str:
        if v == "":
            raise ValueError("old_text must not be empty")
        return v

    @classmethod
    def of(cls, old_text: str, new_text: str, replace_all: bool = False) -> "EditRequest":
        """Build a request, reporting bad input as :class:`InvalidRequestError`."""
        try:
            return cls(old_text=old_text, new_text=new_text, replace_all=replace_all)
        except ValidationError as e:
            messages = "; ".join(err["msg"] for err in e.errors(include_url=False))
            raise InvalidRequestError(f"Invalid edit request: {messages}")


@dataclass(frozen=True)
class EditResult:
    """Outcome of a successful edit."""

    document: Document
    replacements: int


def count_occurrences(text: str, needle: str) -> int:
    """Count every position where ``needle`` starts, overlaps included."""
    count = 0
    index = text.find(needle)
    while index != -1:
        count += 1
        index = text.find(needle, index + 1)
    return count


class ExactMatchEditor:
    """Applies :class:`EditRequest` objects to documents."""

    def apply(self, document: Document, request: EditRequest) -> EditResult:
        """Return a new document with the requested replacement applied.

        Matching runs over the whole joined text, so ``old_text`` may span
        line breaks. No whitespace or line-ending normalization is done.

        Raises:
            NoMatchError: ``old_text`` does not occur
            AmbiguousMatchError: ``old_text`` occurs more than once and
                ``replace_all`` is false; the document is left unchanged
        """
        text = document.text
        occurrences = count_occurrences(text, request.old_text)

        if occurrences == 0:
            raise NoMatchError(
                "old_text not found in document",
                details={"path": str(document.path)},
            )

        if occurrences > 1 and not request.replace_all:
            raise AmbiguousMatchError(
                f"old_text occurs {occurrences} times; provide more surrounding "
                "context to make it unique or set replace_all",
                count=occurrences,
                details={"path": str(document.path)},
            )

        if occurrences == 1:
            new_text = text.replace(request.old_text, request.new_text, 1)
            replacements = 1
        else:
            # str.replace works leftmost-first on non-overlapping matches
            replacements = text.count(request.old_text)
            new_text = text.replace(request.old_text, request.new_text)

        logger.debug("Replaced %d occurrence(s) in %s", replacements, document.path)
        return EditResult(document=document.with_text(new_text), replacements=replacements)
