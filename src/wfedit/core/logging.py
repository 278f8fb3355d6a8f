"""Logging setup and the key=value context logger used across wfedit."""

import logging
import sys
from enum import Enum
from typing import Any, MutableMapping

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "wfedit"

# keyword arguments understood by Logger._log; everything else is context
_LOGGING_KWARGS = frozenset({"exc_info", "stack_info", "stacklevel", "extra"})


class LogLevel(str, Enum):
    """Log level enumeration."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @classmethod
    def from_flags(cls, verbose: int, quiet: bool, default: "LogLevel") -> "LogLevel":
        """Map ``-v`` count and ``-q`` onto a level; flags beat the configured default."""
        if verbose >= 3:
            return cls.DEBUG
        if verbose >= 1:
            return cls.INFO
        if quiet:
            return cls.ERROR
        return default

    @property
    def numeric(self) -> int:
        return logging.getLevelName(self.value.upper())


class _StderrHandler(logging.StreamHandler):
    """Stream handler bound to the current ``sys.stderr`` at emit time."""

    def __init__(self) -> None:
        super().__init__(sys.stderr)

    @property
    def stream(self):  # type: ignore[override]
        return sys.stderr

    @stream.setter
    def stream(self, value: Any) -> None:
        pass


def setup_logging(
    level: LogLevel = LogLevel.WARNING,
    rich_output: bool = True,
) -> logging.Logger:
    """Attach a single handler to the ``wfedit`` logger.

    Only the package logger is touched, so embedding applications keep
    their own root configuration. Calling this again replaces the handler.

    Args:
        level: The logging level
        rich_output: Render records with Rich instead of plain lines

    Returns:
        The ``wfedit`` logger
    """
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler: logging.Handler
    if rich_output:
        handler = RichHandler(
            console=Console(stderr=True),
            show_time=False,
            show_path=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        handler = _StderrHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))

    logger.addHandler(handler)
    logger.setLevel(level.numeric)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ``wfedit`` namespace.

    ``__name__`` of a wfedit module is used as-is; any other name is
    prefixed.
    """
    if name == ROOT_LOGGER or name.startswith(f"{ROOT_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


class StructuredLogger(logging.LoggerAdapter):
    """Logger adapter that renders keyword context as ``[key=value ...]``.

    Example:
        log = StructuredLogger(__name__).bind(path=document.path)
        log.info("Edited workflow", replacements=3)
        # Edited workflow [path=/tmp/flow.yml replacements=3]
    """

    def __init__(self, name: str, context: dict[str, Any] | None = None):
        super().__init__(get_logger(name), dict(context or {}))

    @property
    def context(self) -> dict[str, Any]:
        return dict(self.extra or {})

    def bind(self, **context: Any) -> "StructuredLogger":
        """Return a logger whose messages always carry ``context``."""
        return StructuredLogger(self.logger.name, {**self.context, **context})

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        context = self.context
        for key in [k for k in kwargs if k not in _LOGGING_KWARGS]:
            context[key] = kwargs.pop(key)
        if context:
            rendered = " ".join(f"{k}={v}" for k, v in context.items())
            msg = f"{msg} [{rendered}]"
        return msg, kwargs
