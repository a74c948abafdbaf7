"""
litetable - Typed table access over the sqlite3 command-line shell

A small access layer for SQLite database files where the only way in is the
`sqlite3` shell:
- Runtime discovery of tables and column types
- Document-style filters compiled to SQL text
- Lossless-enough value marshalling between Python and the shell's JSON output
"""

from .catalog import Catalog, discover, open_database
from .config import CatalogConfig, Config, ExecutorConfig
from .errors import ConfigError, FilterError, LitetableError, OutputError, SchemaError
from .executor import CliExecutor, ExecOptions, StatementExecutor
from .query import AnyOf, Equality, Filter, Operator, OperatorGroup, parse_filter
from .schema import Category, ColumnInfo, ColumnType, TableSchema
from .table import StatementKind, TableHandle

__version__ = "0.1.0"

__all__ = [
    # Catalog
    "Catalog",
    "discover",
    "open_database",
    # Config
    "Config",
    "ExecutorConfig",
    "CatalogConfig",
    # Errors
    "LitetableError",
    "FilterError",
    "SchemaError",
    "ConfigError",
    "OutputError",
    # Execution
    "StatementExecutor",
    "ExecOptions",
    "CliExecutor",
    # Filters
    "Filter",
    "Equality",
    "OperatorGroup",
    "AnyOf",
    "Operator",
    "parse_filter",
    # Schema
    "Category",
    "ColumnInfo",
    "ColumnType",
    "TableSchema",
    # Tables
    "TableHandle",
    "StatementKind",
]
