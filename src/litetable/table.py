"""Table handles - per-table CRUD over a statement executor."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any

from .errors import LitetableError
from .executor.base import READ, READ_JSON, WRITE, ExecOptions, StatementExecutor
from .query.filters import Filter
from .schema.table import TableSchema


logger = logging.getLogger(__name__)

Where = Mapping[str, Any] | Filter | None


class StatementKind(str, Enum):
    """Statements a TableHandle can build."""
    COUNT = "count"
    SELECT = "select"
    INSERT = "insert"
    DELETE = "delete"
    UPDATE = "update"


class TableHandle:
    """
    Typed CRUD access to one table.

    Every operation builds one statement from the table's schema, runs it
    through the executor and reports failure as None/False rather than
    raising. Failures are logged together with the offending statement.
    """

    def __init__(
        self,
        target: str | Path,
        name: str,
        schema: TableSchema,
        executor: StatementExecutor,
    ):
        self.target = target
        self.name = name
        self.schema = schema
        self.executor = executor

    def __repr__(self) -> str:
        return f"TableHandle({self.name!r}, {self.schema!r})"

    def get_types(self) -> dict[str, dict[str, Any]]:
        """Column information for every column, keyed by name."""
        return self.schema.get_types()

    def build_sql(
        self,
        kind: StatementKind | str,
        where: Where = None,
        select: Mapping[str, Any] | None = None,
        values: Mapping[str, Any] | None = None,
    ) -> str | None:
        """
        Build a complete statement.

        Args:
            kind: count, select, insert, delete or update
            where: Filter document (count, select, delete, update)
            select: Projection (select)
            values: Record to insert or assignments to apply (insert, update)

        Returns:
            Statement text terminated by ``;``, or None if it cannot be built
        """
        kind = StatementKind(kind)
        parts: list[str]

        if kind is StatementKind.COUNT:
            parts = ["select count(*) from", self.name]
        elif kind is StatementKind.SELECT:
            columns = self.schema.projection_sql(select)
            if not columns:
                logger.error(f"{self.name}: projection selects no columns ({select})")
                return None
            parts = ["select", columns, "from", self.name]
        elif kind is StatementKind.INSERT:
            values_sql = self.schema.values_sql(values or {})
            if values_sql is None:
                return None
            return f"insert into {self.name} {values_sql};"
        elif kind is StatementKind.DELETE:
            parts = ["delete from", self.name]
        else:
            set_sql = self.schema.set_sql(values or {})
            if set_sql is None:
                return None
            parts = ["update", self.name, set_sql]

        try:
            where_sql = self.schema.where_sql(where)
        except LitetableError as e:
            logger.error(f"{self.name}: {e}")
            return None
        if where_sql:
            parts.append(where_sql)

        return " ".join(parts) + ";"

    def _run(self, sql: str, options: ExecOptions) -> str | None:
        output = self.executor.execute(self.target, sql, options)
        if output is None:
            logger.error(f"{self.name}: execution failed: {sql}")
        return output

    def count(self, where: Where = None) -> int | None:
        """Number of rows matching the filter, or None on failure."""
        sql = self.build_sql(StatementKind.COUNT, where)
        if sql is None:
            return None
        output = self._run(sql, READ)
        if output is None:
            return None
        try:
            return int(output.strip())
        except ValueError:
            logger.error(f"{self.name}: unexpected count output {output!r}")
            return None

    def find(
        self,
        where: Where = None,
        select: Mapping[str, Any] | None = None,
    ) -> list[dict[str, Any]] | None:
        """
        Rows matching the filter.

        Args:
            where: Filter document, e.g. ``{"age": {"$gte": 20}}``
            select: Projection, e.g. ``{"name": 1}``; all columns and rowid
                when omitted

        Returns:
            Decoded records (empty output means no rows), or None on failure
        """
        sql = self.build_sql(StatementKind.SELECT, where, select)
        if sql is None:
            return None
        output = self._run(sql, READ_JSON)
        if output is None:
            return None
        try:
            return self.schema.normalize_rows(output)
        except LitetableError as e:
            logger.error(f"{self.name}: {e} [{sql}]")
            return None

    def insert(self, record: Mapping[str, Any]) -> bool:
        """Insert one record. Missing columns take their declared default."""
        sql = self.build_sql(StatementKind.INSERT, values=record)
        if sql is None:
            return False
        return self._run(sql, WRITE) is not None

    def remove(self, where: Where = None) -> bool:
        """Delete rows matching the filter (all rows when omitted)."""
        sql = self.build_sql(StatementKind.DELETE, where)
        if sql is None:
            return False
        return self._run(sql, WRITE) is not None

    def update(self, where: Where, record: Mapping[str, Any]) -> bool:
        """Apply the record's assignments to rows matching the filter."""
        sql = self.build_sql(StatementKind.UPDATE, where, values=record)
        if sql is None:
            return False
        return self._run(sql, WRITE) is not None
