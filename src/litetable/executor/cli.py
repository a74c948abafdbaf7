"""sqlite3 command-line shell executor."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import tempfile
from pathlib import Path

from ..config import ExecutorConfig
from .base import ExecOptions, StatementExecutor


logger = logging.getLogger(__name__)


class CliExecutor(StatementExecutor):
    """
    Executor that feeds a script file to an installed ``sqlite3`` shell.

    Each call writes ``.timeout <ms>`` plus the script to a temporary file,
    runs ``sqlite3 [-readonly] [-json] <db> < script`` and removes the file
    before returning.

    Config:
        executable: Name on PATH or absolute path of the shell
        timeout_ms: Busy timeout embedded in every script
        encoding: Script and output encoding
        process_timeout_seconds: Optional wall-clock limit per call
    """

    def __init__(self, config: ExecutorConfig | None = None):
        self.config = config or ExecutorConfig()

    def resolve_executable(self) -> str | None:
        """Absolute path of the configured shell, or None if not found."""
        return shutil.which(self.config.executable)

    def execute(
        self,
        target: str | Path,
        script: str,
        options: ExecOptions | None = None,
    ) -> str | None:
        options = options or ExecOptions()

        executable = self.resolve_executable()
        if executable is None:
            logger.error(f"sqlite3 shell not found: {self.config.executable}")
            return None

        try:
            payload = f"{self.config.timeout_statement()}{script}\n".encode(self.config.encoding)
        except (UnicodeError, LookupError) as e:
            logger.error(f"Script cannot be encoded as {self.config.encoding!r}: {e}")
            return None

        fd, script_path = tempfile.mkstemp(prefix="litetable-", suffix=".sql")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(payload)

            command = [executable, *options.flags(), str(target)]
            logger.debug(f"Running {command}: {script}")

            with open(script_path, "rb") as stdin:
                completed = subprocess.run(
                    command,
                    stdin=stdin,
                    capture_output=True,
                    timeout=self.config.process_timeout_seconds,
                )
        except subprocess.TimeoutExpired:
            logger.error(f"sqlite3 timed out after {self.config.process_timeout_seconds}s: {script}")
            return None
        except OSError as e:
            logger.error(f"sqlite3 could not be run: {e}")
            return None
        finally:
            try:
                os.unlink(script_path)
            except FileNotFoundError:
                pass

        stderr = completed.stderr.decode(self.config.encoding, errors="replace").strip()
        if completed.returncode != 0:
            logger.error(f"sqlite3 exited with {completed.returncode}: {stderr} [{script}]")
            return None
        if stderr:
            logger.warning(f"sqlite3: {stderr}")

        return completed.stdout.decode(self.config.encoding, errors="replace")
