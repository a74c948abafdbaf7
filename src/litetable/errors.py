"""Exception hierarchy for litetable."""

from __future__ import annotations


class LitetableError(Exception):
    """Base exception for litetable errors."""
    pass


class FilterError(LitetableError, ValueError):
    """Raised when a filter document cannot be parsed."""
    pass


class SchemaError(LitetableError, ValueError):
    """Raised when column introspection output cannot be read."""
    pass


class ConfigError(LitetableError, ValueError):
    """Raised when a configuration file or dict is malformed."""
    pass


class OutputError(LitetableError, ValueError):
    """Raised when sqlite3 shell output cannot be decoded."""
    pass
