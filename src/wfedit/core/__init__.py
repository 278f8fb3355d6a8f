"""Core utilities and shared components for wfedit."""

# Note: Import context lazily to avoid circular imports
# Use: from wfedit.core.context import WfEditContext, pass_context
from wfedit.core.exceptions import WfEditError, ConfigError
from wfedit.core.output import OutputFormat, OutputFormatter

__all__ = [
    "WfEditError",
    "ConfigError",
    "OutputFormatter",
    "OutputFormat",
]
