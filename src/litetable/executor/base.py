"""Base executor interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class ExecOptions:
    """
    Per-call options for running a script.

    readonly: the database is opened read-only
    json: result rows are printed as a JSON array
    """
    readonly: bool = False
    json: bool = False

    def flags(self) -> list[str]:
        """Command-line flags for the sqlite3 shell."""
        flags = []
        if self.readonly:
            flags.append("-readonly")
        if self.json:
            flags.append("-json")
        return flags


READ = ExecOptions(readonly=True)
READ_JSON = ExecOptions(readonly=True, json=True)
WRITE = ExecOptions()


class StatementExecutor(ABC):
    """
    Abstract base class for running SQL scripts against a database file.

    The whole store is reachable only through this call, one script at a
    time. Implementations never raise for an unrunnable script.
    """

    @abstractmethod
    def execute(
        self,
        target: str | Path,
        script: str,
        options: ExecOptions | None = None,
    ) -> str | None:
        """
        Run a script against a database file.

        Args:
            target: Path of the database file
            script: One or more statements or shell dot-commands
            options: Read-only / JSON output flags

        Returns:
            The shell's output (possibly ""), or None if the script could
            not be run
        """
        ...
