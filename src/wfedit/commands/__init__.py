"""CLI command modules for wfedit."""
