"""wfedit - authoring toolset for YAML automation workflows."""

__version__ = "0.1.0"
