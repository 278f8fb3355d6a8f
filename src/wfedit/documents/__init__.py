"""Text documents: loading, exact-match editing and pattern search."""

from wfedit.documents.editor import EditRequest, EditResult, ExactMatchEditor
from wfedit.documents.search import MatchSpan, PatternSearchEngine, SearchMatch, SearchResults
from wfedit.documents.store import Document, TextDocumentStore

__all__ = [
    "Document",
    "TextDocumentStore",
    "EditRequest",
    "EditResult",
    "ExactMatchEditor",
    "MatchSpan",
    "PatternSearchEngine",
    "SearchMatch",
    "SearchResults",
]
