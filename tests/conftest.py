"""Shared test fixtures for litetable tests.

Unit tests never touch a real database: the RecordingExecutor stands in for
the sqlite3 shell, records every script and replays canned output.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from litetable.config import Config
from litetable.executor.base import ExecOptions, StatementExecutor
from litetable.schema.table import TableSchema
from litetable.table import TableHandle


# =============================================================================
# Recording Executor
# =============================================================================

class RecordingExecutor(StatementExecutor):
    """Executor that records calls and returns queued responses.

    Responses are consumed in order; once exhausted every call returns "".
    A None response simulates a script that could not be run.
    """

    def __init__(self, responses: list[str | None] | None = None):
        self.responses = list(responses or [])
        self.calls: list[tuple[Any, str, ExecOptions | None]] = []

    def execute(self, target, script, options=None):
        self.calls.append((target, script, options))
        if not self.responses:
            return ""
        return self.responses.pop(0)

    @property
    def scripts(self) -> list[str]:
        return [script for _, script, _ in self.calls]

    @property
    def options(self) -> list[ExecOptions | None]:
        return [options for _, _, options in self.calls]


# =============================================================================
# Schema Fixtures
# =============================================================================

PEOPLE_COLUMNS: list[dict[str, Any]] = [
    {"cid": 0, "name": "id", "type": "INTEGER", "notnull": 0, "dflt_value": None, "pk": 1},
    {"cid": 1, "name": "name", "type": "VARCHAR(10)", "notnull": 1, "dflt_value": None, "pk": 0},
    {"cid": 2, "name": "age", "type": "INT", "notnull": 0, "dflt_value": "0", "pk": 0},
    {"cid": 3, "name": "score", "type": "REAL", "notnull": 0, "dflt_value": None, "pk": 0},
    {"cid": 4, "name": "active", "type": "BOOLEAN", "notnull": 0, "dflt_value": "1", "pk": 0},
    {"cid": 5, "name": "born", "type": "DATETIME", "notnull": 0, "dflt_value": None, "pk": 0},
    {"cid": 6, "name": "photo", "type": "BLOB", "notnull": 0, "dflt_value": None, "pk": 0},
    {"cid": 7, "name": "amount", "type": "NUMERIC", "notnull": 0, "dflt_value": None, "pk": 0},
]

AB_COLUMNS: list[dict[str, Any]] = [
    {"cid": 0, "name": "A", "type": "NUMERIC", "notnull": 0, "dflt_value": None, "pk": 0},
    {"cid": 1, "name": "B", "type": "NUMERIC", "notnull": 0, "dflt_value": None, "pk": 0},
]


@pytest.fixture
def people_columns() -> list[dict[str, Any]]:
    return [dict(row) for row in PEOPLE_COLUMNS]


@pytest.fixture
def people_info_json() -> str:
    """`pragma table_info(people)` as printed by `sqlite3 -json`."""
    return json.dumps(PEOPLE_COLUMNS)


@pytest.fixture
def people_schema(people_info_json) -> TableSchema:
    return TableSchema.create(people_info_json)


@pytest.fixture
def ab_schema() -> TableSchema:
    """Two numeric columns A and B."""
    return TableSchema.create(json.dumps(AB_COLUMNS))


# =============================================================================
# Handle Fixtures
# =============================================================================

@pytest.fixture
def executor() -> RecordingExecutor:
    return RecordingExecutor()


@pytest.fixture
def make_executor():
    """Factory for executors with queued responses."""
    return RecordingExecutor


@pytest.fixture
def db_path(tmp_path) -> Path:
    return tmp_path / "test.db"


@pytest.fixture
def people(db_path, people_schema, executor) -> TableHandle:
    """Handle for the people table over the recording executor."""
    return TableHandle(db_path, "people", people_schema, executor)


@pytest.fixture
def config() -> Config:
    """Default test configuration."""
    return Config()


# =============================================================================
# Test Markers
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: runs the real sqlite3 shell")
