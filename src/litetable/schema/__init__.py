"""Table schemas - column metadata discovered from the database."""

from .column import Category, ColumnType, classify, parse_declaration
from .models import ColumnInfo
from .table import TableSchema

__all__ = [
    "Category",
    "ColumnInfo",
    "ColumnType",
    "TableSchema",
    "classify",
    "parse_declaration",
]
