"""Line-based text documents with faithful round-tripping."""

from __future__ import annotations

import os
import re
import tempfile
from dataclasses import dataclass, replace
from pathlib import Path

from wfedit.core.exceptions import EncodingError, FileAccessError, NotFoundError
from wfedit.core.logging import get_logger

logger = get_logger(__name__)

BOM = "\ufeff"

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def detect_newline(text: str) -> str:
    """Return the line ending of the first line break in ``text``.

    Files without any line break default to ``\\n``.
    """
    match = _LINE_BREAK.search(text)
    return match.group() if match else "\n"


def split_lines(text: str) -> tuple[tuple[str, ...], tuple[str, ...]]:
    """Split ``text`` into line bodies and the break ending each of them.

    Only ``\\n``, ``\\r\\n`` and ``\\r`` count as breaks, each line keeping
    its own. The final element always has an empty ending, so text ending
    in a break yields a trailing ``""`` line.
    """
    lines: list[str] = []
    endings: list[str] = []
    position = 0
    for match in _LINE_BREAK.finditer(text):
        lines.append(text[position : match.start()])
        endings.append(match.group())
        position = match.end()
    lines.append(text[position:])
    endings.append("")
    return tuple(lines), tuple(endings)


def _default_file_mode() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


@dataclass(frozen=True)
class Document:
    """A text file held as line bodies plus the break that ended each line.

    Joining every line with its own ending rebuilds the exact original
    text, mixed conventions included, so writing an unmodified document
    reproduces the original bytes.
    """

    path: Path
    lines: tuple[str, ...] = ("",)
    endings: tuple[str, ...] = ("",)
    bom: bool = False

    @classmethod
    def from_text(cls, path: str | Path, text: str) -> Document:
        bom = text.startswith(BOM)
        if bom:
            text = text[len(BOM) :]
        lines, endings = split_lines(text)
        return cls(
            path=Path(path).expanduser().absolute(),
            lines=lines,
            endings=endings,
            bom=bom,
        )

    @property
    def text(self) -> str:
        """Joined document content, without the byte-order mark."""
        return "".join(line + ending for line, ending in zip(self.lines, self.endings))

    @property
    def newline(self) -> str:
        """Line ending of the first line, ``\\n`` when there is no break."""
        return self.endings[0] or "\n"

    @property
    def ends_with_newline(self) -> bool:
        return len(self.lines) > 1 and self.lines[-1] == ""

    @property
    def size(self) -> int:
        return len(self.encode())

    @property
    def line_count(self) -> int:
        # a trailing line break leaves an empty final element
        if self.lines[-1] == "":
            return len(self.lines) - 1
        return len(self.lines)

    def with_text(self, text: str) -> Document:
        """Return a copy holding ``text``, keeping path and BOM."""
        lines, endings = split_lines(text)
        return replace(self, lines=lines, endings=endings)

    def appended(self, text: str) -> Document:
        """Return a copy with ``text`` added at the end.

        A line break in this document's convention is inserted first when
        the last line is not already terminated.
        """
        current = self.text
        if current and not self.ends_with_newline:
            current += self.newline
        return self.with_text(current + text)

    def numbered_lines(self, start_line: int = 1, limit: int | None = None) -> list[tuple[int, str]]:
        """Return ``(line_number, text)`` pairs, 1-based."""
        start_line = max(start_line, 1)
        end = self.line_count if limit is None else min(self.line_count, start_line - 1 + limit)
        return [(n, self.lines[n - 1]) for n in range(start_line, end + 1)]

    def encode(self) -> bytes:
        prefix = BOM if self.bom else ""
        return (prefix + self.text).encode("utf-8")


class TextDocumentStore:
    """Loads and persists :class:`Document` objects.

    No locking is done: two writers targeting the same path race and the
    last one wins.
    """

    def exists(self, path: str | Path) -> bool:
        return Path(path).expanduser().exists()

    def load(self, path: str | Path) -> Document:
        """Read ``path`` as UTF-8 text.

        Raises:
            NotFoundError: path does not exist or is a directory
            FileAccessError: the file cannot be read
            EncodingError: the content is not valid UTF-8
        """
        file_path = Path(path).expanduser().absolute()
        if not file_path.exists():
            raise NotFoundError(f"File not found: {file_path}", path=str(file_path))
        if file_path.is_dir():
            raise NotFoundError(f"Not a file: {file_path}", path=str(file_path))

        try:
            raw = file_path.read_bytes()
        except FileNotFoundError:
            raise NotFoundError(f"File not found: {file_path}", path=str(file_path))
        except OSError as e:
            raise FileAccessError(f"Cannot read {file_path}: {e}", path=str(file_path))

        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise EncodingError(
                f"File is not valid UTF-8 text: {file_path}",
                path=str(file_path),
                details={"position": e.start},
            )

        logger.debug("Loaded %s (%d bytes)", file_path, len(raw))
        return Document.from_text(file_path, text)

    def write(self, document: Document) -> None:
        """Persist ``document`` using its stored newline convention.

        The content is written to a temporary sibling which then replaces the
        target, so the target is either fully written or left untouched.

        Raises:
            FileAccessError: the file cannot be written
        """
        target = document.path
        data = document.encode()
        tmp_name: str | None = None
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{target.name}.", suffix=".tmp", dir=target.parent
            )
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            if target.exists():
                mode = target.stat().st_mode & 0o7777
            else:
                mode = _default_file_mode()
            os.chmod(tmp_name, mode)
            os.replace(tmp_name, target)
            tmp_name = None
        except OSError as e:
            raise FileAccessError(f"Cannot write {target}: {e}", path=str(target))
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)

        logger.debug("Wrote %s (%d bytes)", target, len(data))
