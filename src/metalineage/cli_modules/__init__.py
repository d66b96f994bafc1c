"""CLI command modules for metalineage."""
