"""Line-addressed pattern search over one file or a directory tree."""

from __future__ import annotations

import fnmatch
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator, Sequence

from wfedit.config import DEFAULT_FILE_PATTERNS
from wfedit.core.exceptions import (
    EncodingError,
    FileAccessError,
    InvalidPatternError,
    NotFoundError,
)
from wfedit.core.logging import StructuredLogger
from wfedit.documents.store import TextDocumentStore


@dataclass(frozen=True)
class MatchSpan:
    """One occurrence within a line: 1-based line, 0-based half-open offsets."""

    line: int
    start: int
    end: int


@dataclass(frozen=True)
class SearchMatch:
    """A match attributed to a file."""

    path: Path
    span: MatchSpan
    line_text: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": str(self.path),
            "line": self.span.line,
            "start": self.span.start,
            "end": self.span.end,
            "text": self.line_text,
        }


@dataclass(frozen=True)
class SearchWarning:
    """A file skipped during a search."""

    path: Path
    kind: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"path": str(self.path), "kind": self.kind, "message": self.message}


def normalize_patterns(file_filter: str | Sequence[str] | None) -> list[str]:
    if file_filter is None:
        return list(DEFAULT_FILE_PATTERNS)
    if isinstance(file_filter, str):
        return [file_filter]
    return list(file_filter)


def matches_filter(path: Path, patterns: Sequence[str]) -> bool:
    return any(fnmatch.fnmatch(path.name, p) for p in patterns)


def iter_candidate_files(root: str | Path, patterns: Sequence[str]) -> list[Path]:
    """Files under ``root`` whose name matches one of ``patterns``.

    Sorted lexicographically by path. A file ``root`` is returned as-is.
    """
    root_path = Path(root).expanduser().absolute()
    if not root_path.exists():
        raise NotFoundError(f"Path not found: {root_path}", path=str(root_path))
    if root_path.is_file():
        return [root_path]
    return sorted(
        p for p in root_path.rglob("*") if p.is_file() and matches_filter(p, patterns)
    )


class SearchResults:
    """Lazy, re-iterable stream of :class:`SearchMatch` objects.

    Files are read only while iterating. Files that cannot be loaded are
    skipped and recorded in :attr:`warnings`.
    """

    def __init__(
        self,
        engine: PatternSearchEngine,
        root: Path,
        patterns: list[str],
        finder: re.Pattern[str] | str,
        max_results: int | None = None,
    ):
        self._engine = engine
        self.root = root
        self.patterns = patterns
        self._finder = finder
        self.max_results = max_results
        self.warnings: list[SearchWarning] = []
        self.files_scanned = 0

    def __iter__(self) -> Iterator[SearchMatch]:
        self.warnings = []
        self.files_scanned = 0
        produced = 0
        for path in iter_candidate_files(self.root, self.patterns):
            try:
                document = self._engine.store.load(path)
            except (NotFoundError, FileAccessError, EncodingError) as e:
                self.warnings.append(SearchWarning(path=path, kind=e.kind, message=e.message))
                self._engine.logger.warning("Skipping file", path=path, reason=e.kind)
                continue

            self.files_scanned += 1
            for line_number, line in document.numbered_lines():
                for start, end in self._find_in_line(line):
                    yield SearchMatch(
                        path=document.path,
                        span=MatchSpan(line=line_number, start=start, end=end),
                        line_text=line,
                    )
                    produced += 1
                    if self.max_results is not None and produced >= self.max_results:
                        return

    def _find_in_line(self, line: str) -> Iterator[tuple[int, int]]:
        if isinstance(self._finder, str):
            needle = self._finder
            index = line.find(needle)
            while index != -1:
                yield index, index + len(needle)
                index = line.find(needle, index + len(needle))
        else:
            for match in self._finder.finditer(line):
                if match.end() > match.start():
                    yield match.start(), match.end()


class PatternSearchEngine:
    """Finds literal or regular-expression patterns without mutating files."""

    def __init__(self, store: TextDocumentStore | None = None):
        self.store = store or TextDocumentStore()
        self.logger = StructuredLogger(__name__)

    def search(
        self,
        root: str | Path,
        pattern: str,
        use_regex: bool = False,
        file_filter: str | Sequence[str] | None = None,
        max_results: int | None = None,
    ) -> SearchResults:
        """Search ``root`` for ``pattern``.

        The pattern is checked before any file is touched.

        Raises:
            InvalidPatternError: empty pattern, or a regex that does not compile
        """
        if pattern == "":
            raise InvalidPatternError("Search pattern must not be empty", pattern=pattern)

        finder: re.Pattern[str] | str
        if use_regex:
            try:
                finder = re.compile(pattern)
            except re.error as e:
                raise InvalidPatternError(f"Invalid regex pattern: {e}", pattern=pattern)
        else:
            finder = pattern

        root_path = Path(root).expanduser().absolute()
        if not root_path.exists():
            raise NotFoundError(f"Path not found: {root_path}", path=str(root_path))

        self.logger.debug("Searching", root=root_path, pattern=pattern, regex=use_regex)
        return SearchResults(
            self,
            root=root_path,
            patterns=normalize_patterns(file_filter),
            finder=finder,
            max_results=max_results,
        )
