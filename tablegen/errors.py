"""
Error taxonomy for generation runs and generated modules.
Every table-local error carries the table name so batch reports can attribute it.
"""
from typing import Optional


class TablegenError(Exception):
    """Base class for all tablegen errors."""

    def __init__(self, message: str, table: Optional[str] = None):
        super().__init__(message)
        self.table = table

    def __str__(self) -> str:
        msg = super().__str__()
        return f"{self.table}: {msg}" if self.table else msg


class ConfigurationError(TablegenError):
    """Setup problem detected before any table work begins."""


class NoSuchTable(TablegenError):
    """The catalog returned no columns for the table."""


class ProbeError(TablegenError):
    """The distinct-value sample for a small-integer column could not be read."""


class ValidationError(TablegenError):
    """A value was rejected at save time (enum/set membership or a missing required value)."""


class ScaffoldError(TablegenError):
    """Writing a generated file or running the source formatter failed."""


class DatabaseConnectionError(TablegenError):
    """A pooled database handle could not be acquired."""
