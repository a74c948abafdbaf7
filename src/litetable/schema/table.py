"""Table schema - compiles projections, filters and mutations to SQL fragments."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any

from pydantic import ValidationError

from ..errors import OutputError, SchemaError
from ..query.filters import AnyOf, Equality, Filter, parse_filter
from .column import NULL, ColumnType
from .models import COLUMN_INFO_LIST, ColumnInfo


logger = logging.getLogger(__name__)

ROWID = "rowid"


def _wrap(text: str) -> str:
    return f"({text})"


class TableSchema:
    """
    Ordered column types of one table.

    Columns are kept in declaration order (ascending cid). The ``rowid``
    pseudo-column is never a member but is selected by default projections.
    """

    def __init__(self, columns: Mapping[str, ColumnType]):
        self._types: dict[str, ColumnType] = dict(columns)

    @classmethod
    def create(cls, column_info: str | list[Any]) -> TableSchema:
        """
        Create a TableSchema from `pragma table_info` output.

        Args:
            column_info: JSON text printed by ``sqlite3 -json`` or the
                already-decoded list of rows

        Raises:
            SchemaError: If the rows cannot be read
        """
        try:
            if isinstance(column_info, str):
                rows = COLUMN_INFO_LIST.validate_json(column_info)
            else:
                rows = COLUMN_INFO_LIST.validate_python(column_info)
        except ValidationError as e:
            raise SchemaError(f"Invalid column information: {e}") from e
        return cls.from_rows(rows)

    @classmethod
    def from_rows(cls, rows: list[ColumnInfo]) -> TableSchema:
        """Create a TableSchema from parsed column rows."""
        ordered = sorted(rows, key=lambda row: row.cid)
        return cls({row.name: ColumnType.from_info(row) for row in ordered})

    @property
    def types(self) -> Mapping[str, ColumnType]:
        """Read-only view of column name -> ColumnType."""
        return MappingProxyType(self._types)

    @property
    def columns(self) -> list[str]:
        """Column names in declaration order."""
        return list(self._types)

    def get(self, name: str) -> ColumnType | None:
        return self._types.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __iter__(self) -> Iterator[str]:
        return iter(self._types)

    def __len__(self) -> int:
        return len(self._types)

    def __repr__(self) -> str:
        return f"TableSchema({', '.join(self._types)})"

    def get_types(self) -> dict[str, dict[str, Any]]:
        """Column information for every column, keyed by name."""
        return {name: column.describe() for name, column in self._types.items()}

    # =========================================================================
    # Projection
    # =========================================================================

    def projection_sql(self, spec: Mapping[str, Any] | None = None) -> str:
        """
        Build the column list of a select statement.

        Args:
            spec: Column name -> truthy flag. None or {} selects rowid and
                every declared column.

        Returns:
            Comma-separated column list, e.g. ``rowid, A, B``. Empty when
            no flagged column exists.
        """
        if not spec:
            return ", ".join([ROWID, *self._types])

        selected = []
        for name, flag in spec.items():
            if not flag:
                continue
            if name not in self._types:
                logger.warning(f"Projection skips unknown column '{name}'")
                continue
            selected.append(name)
        return ", ".join(selected)

    # =========================================================================
    # Filters
    # =========================================================================

    def where_sql(self, document: Mapping[str, Any] | Filter | None = None) -> str:
        """
        Compile a filter into a where clause.

        Examples:
            {"A": 1, "B": {"$gt": 5}}       -> where (A = 1) and (B > 5)
            {"$or": [{"A": "x"}, {"B": 2}]} -> where (A = 'x') or (B = 2)

        Keys that are neither a known column nor ``$or`` are ignored, as are
        unrecognized operators.

        Returns:
            ``where ...`` text, or "" when nothing remains to filter on

        Raises:
            FilterError: If the filter document is malformed
        """
        if not document:
            return ""
        text, _ = self._compile(parse_filter(document))
        return f"where {text}" if text else ""

    def _compile(self, flt: Filter) -> tuple[str, bool]:
        """Compile one conjunction level.

        Returns the text and whether it holds more than one top-level term
        (and therefore needs parentheses when nested).
        """
        pieces: list[tuple[str, bool]] = []
        for clause in flt.clauses:
            if isinstance(clause, AnyOf):
                group = self._compile_any_of(clause)
                if group[0]:
                    pieces.append(group)
                continue

            column = self._types.get(clause.column)
            if column is None:
                continue
            if isinstance(clause, Equality):
                pieces.append((f"({clause.column} = {column.to_literal(clause.value)})", False))
            else:
                for operator, operand in clause.comparisons:
                    literal = column.to_literal(operand)
                    pieces.append((f"({clause.column} {operator.sql} {literal})", False))

        if len(pieces) == 1:
            return pieces[0]
        text = " and ".join(_wrap(text) if compound else text for text, compound in pieces)
        return text, len(pieces) > 1

    def _compile_any_of(self, group: AnyOf) -> tuple[str, bool]:
        branches = []
        for branch in group.branches:
            text, compound = self._compile(branch)
            if text:
                branches.append(_wrap(text) if compound else text)
        return " or ".join(branches), len(branches) > 1

    # =========================================================================
    # Mutations
    # =========================================================================

    def values_sql(self, record: Mapping[str, Any]) -> str | None:
        """
        Build the ``values(...)`` part of an insert statement.

        Every column is filled in declaration order: the supplied value if
        the key is present, otherwise the declared default.

        Returns:
            ``values(1, 'abc', null)``, or None when a not-null column
            resolves to no value
        """
        literals = []
        for name, column in self._types.items():
            if name in record:
                value = record[name]
                if value is None and column.not_null:
                    logger.error(f"Insert: column '{name}' is not null")
                    return None
                literals.append(column.to_literal(value))
            elif column.default is not None:
                # Declared defaults are already SQL text
                literals.append(column.default)
            elif column.not_null:
                logger.error(f"Insert: no value or default for not-null column '{name}'")
                return None
            else:
                literals.append(NULL)
        return f"values({', '.join(literals)})"

    def set_sql(self, record: Mapping[str, Any]) -> str | None:
        """
        Build the ``set ...`` part of an update statement.

        Returns:
            ``set A = 1, B = 'x'``, or None when no known column is given
        """
        assignments = []
        for name, value in record.items():
            column = self._types.get(name)
            if column is None:
                logger.warning(f"Update skips unknown column '{name}'")
                continue
            assignments.append(f"{name} = {column.to_literal(value)}")
        if not assignments:
            logger.error(f"Update: no known columns in {sorted(record)}")
            return None
        return f"set {', '.join(assignments)}"

    # =========================================================================
    # Results
    # =========================================================================

    def normalize_rows(self, output: str) -> list[dict[str, Any]]:
        """
        Decode ``sqlite3 -json`` query output into records.

        Values of known columns are converted with their ColumnType; other
        keys (such as rowid) pass through unchanged.

        Raises:
            OutputError: If the output is not a JSON array of objects
        """
        if not output.strip():
            return []
        try:
            rows = json.loads(output)
        except json.JSONDecodeError as e:
            raise OutputError(f"Invalid query output: {e}") from e
        if not isinstance(rows, list) or not all(isinstance(row, dict) for row in rows):
            raise OutputError("Query output is not a list of rows")

        for row in rows:
            for key, value in row.items():
                column = self._types.get(key)
                if column is not None:
                    row[key] = column.from_text(value)
        return rows
