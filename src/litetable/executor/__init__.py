"""Executors - the single boundary through which scripts reach the database."""

from .base import READ, READ_JSON, WRITE, ExecOptions, StatementExecutor
from .cli import CliExecutor

__all__ = [
    "READ",
    "READ_JSON",
    "WRITE",
    "ExecOptions",
    "StatementExecutor",
    "CliExecutor",
]
