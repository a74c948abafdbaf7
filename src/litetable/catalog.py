"""Catalog - discovers the tables of a database and builds their handles."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from pathlib import Path

from .config import Config
from .errors import LitetableError
from .executor.base import READ, READ_JSON, StatementExecutor
from .executor.cli import CliExecutor
from .schema.table import TableSchema
from .table import TableHandle


logger = logging.getLogger(__name__)

LIST_TABLES = ".tables"


def table_info_sql(table: str) -> str:
    """Column introspection statement for one table."""
    return f"pragma table_info({table});"


def split_chunks(output: str) -> list[str]:
    """
    Split concatenated JSON arrays into one string per array.

    The shell prints one ``[...]`` group per statement. Brackets inside JSON
    string literals are ignored.

    Example:
        '[{"a": 1}]\\n[{"b": "]"}]' -> ['[{"a": 1}]', '[{"b": "]"}]']
    """
    chunks = []
    depth = 0
    start = 0
    in_string = False
    escaped = False

    for i, ch in enumerate(output):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == "[":
            if depth == 0:
                start = i
            depth += 1
        elif ch == "]" and depth > 0:
            depth -= 1
            if depth == 0:
                chunks.append(output[start:i + 1])

    return chunks


class Catalog(Mapping[str, TableHandle]):
    """
    Read-only mapping of table name -> TableHandle for one database file.

    Built by ``Catalog.discover``; the handles share the catalog's executor.
    """

    def __init__(
        self,
        target: str | Path,
        executor: StatementExecutor,
        tables: Mapping[str, TableHandle] | None = None,
    ):
        self.target = target
        self.executor = executor
        self._tables: dict[str, TableHandle] = dict(tables or {})

    def __getitem__(self, name: str) -> TableHandle:
        return self._tables[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._tables)

    def __len__(self) -> int:
        return len(self._tables)

    def __repr__(self) -> str:
        return f"Catalog({str(self.target)!r}, tables={list(self._tables)})"

    @classmethod
    def discover(
        cls,
        target: str | Path,
        executor: StatementExecutor | None = None,
        config: Config | None = None,
    ) -> Catalog | None:
        """
        Discover every table of a database file.

        Args:
            target: Path of the database file
            executor: Executor to use (a CliExecutor built from config if None)
            config: Library configuration

        Returns:
            Catalog of table handles, or None if discovery failed
        """
        config = config or Config()
        executor = executor or CliExecutor(config.executor)

        listing = executor.execute(target, LIST_TABLES, READ)
        if listing is None:
            logger.error(f"Could not list tables of {target}")
            return None

        names = listing.split()
        if not names:
            logger.info(f"No tables in {target}")
            return cls(target, executor)

        if config.catalog.batched_introspection:
            schemas = cls._introspect_batched(target, executor, names)
        else:
            schemas = cls._introspect_each(target, executor, names)
        if schemas is None:
            return None

        tables = {
            name: TableHandle(target, name, schema, executor)
            for name, schema in zip(names, schemas)
        }
        logger.info(f"Discovered {len(tables)} tables in {target}")
        return cls(target, executor, tables)

    @staticmethod
    def _introspect_batched(
        target: str | Path,
        executor: StatementExecutor,
        names: list[str],
    ) -> list[TableSchema] | None:
        # Chunks are matched to names by position
        script = "".join(table_info_sql(name) for name in names)
        output = executor.execute(target, script, READ_JSON)
        if output is None:
            logger.error(f"Could not read column information of {target}")
            return None

        chunks = split_chunks(output)
        if len(chunks) != len(names):
            logger.error(
                f"Column information for {len(chunks)} tables, expected {len(names)} in {target}"
            )
            return None

        schemas = []
        for name, chunk in zip(names, chunks):
            try:
                schemas.append(TableSchema.create(chunk))
            except LitetableError as e:
                logger.error(f"Table {name}: {e}")
                return None
        return schemas

    @staticmethod
    def _introspect_each(
        target: str | Path,
        executor: StatementExecutor,
        names: list[str],
    ) -> list[TableSchema] | None:
        schemas = []
        for name in names:
            output = executor.execute(target, table_info_sql(name), READ_JSON)
            if output is None:
                logger.error(f"Could not read column information of {name} in {target}")
                return None
            try:
                schemas.append(TableSchema.create(output.strip() or "[]"))
            except LitetableError as e:
                logger.error(f"Table {name}: {e}")
                return None
        return schemas


def discover(
    target: str | Path,
    executor: StatementExecutor | None = None,
    config: Config | None = None,
) -> Catalog | None:
    """Convenience function to discover the tables of a database file."""
    return Catalog.discover(target, executor, config)


def open_database(
    path: str | Path,
    config: Config | str | Path | None = None,
) -> Catalog | None:
    """
    Open a database file through the sqlite3 shell.

    Args:
        path: Path of the database file
        config: Config instance, or path of a YAML/JSON config file

    Returns:
        Catalog of the database's tables, or None if discovery failed
    """
    if config is not None and not isinstance(config, Config):
        config = Config.from_file(config)
    config = config or Config()
    return Catalog.discover(Path(path), CliExecutor(config.executor), config)
