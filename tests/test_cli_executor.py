"""Tests for the sqlite3 shell executor with the process layer stubbed out."""

import logging
import subprocess
from pathlib import Path

import pytest

from litetable.config import ExecutorConfig
from litetable.executor.base import ExecOptions
from litetable.executor.cli import CliExecutor
from litetable.table import TableHandle


class FakeRun:
    """Stands in for subprocess.run and captures what the shell would see."""

    def __init__(self, returncode=0, stdout=b"", stderr=b"", error=None):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.error = error
        self.command = None
        self.script = None
        self.script_path = None
        self.timeout = None

    def __call__(self, command, stdin, capture_output, timeout):
        self.command = command
        self.script = stdin.read().decode("utf-8")
        self.script_path = Path(stdin.name)
        self.timeout = timeout
        if self.error is not None:
            raise self.error
        return subprocess.CompletedProcess(command, self.returncode, self.stdout, self.stderr)


@pytest.fixture
def found(monkeypatch):
    monkeypatch.setattr("litetable.executor.cli.shutil.which", lambda name: "/usr/bin/sqlite3")


@pytest.fixture
def fake_run(monkeypatch, found):
    def _install(**kwargs):
        fake = FakeRun(**kwargs)
        monkeypatch.setattr("litetable.executor.cli.subprocess.run", fake)
        return fake
    return _install


class TestExecOptions:
    def test_flags(self):
        assert ExecOptions().flags() == []
        assert ExecOptions(readonly=True).flags() == ["-readonly"]
        assert ExecOptions(readonly=True, json=True).flags() == ["-readonly", "-json"]


class TestCliExecutor:
    def test_runs_script_with_timeout(self, fake_run, db_path):
        fake = fake_run(stdout=b"3\n")
        output = CliExecutor().execute(db_path, "select count(*) from t;", ExecOptions(readonly=True))

        assert output == "3\n"
        assert fake.command == ["/usr/bin/sqlite3", "-readonly", str(db_path)]
        assert fake.script == ".timeout 1000\nselect count(*) from t;\n"

    def test_script_file_removed(self, fake_run, db_path):
        fake = fake_run()
        CliExecutor().execute(db_path, ".tables")
        assert fake.script_path is not None
        assert not fake.script_path.exists()

    def test_configured_timeouts(self, fake_run, db_path):
        fake = fake_run()
        config = ExecutorConfig(timeout_ms=250, process_timeout_seconds=5.0)
        CliExecutor(config).execute(db_path, ".tables")
        assert fake.script.startswith(".timeout 250\n")
        assert fake.timeout == 5.0

    def test_empty_output_is_success(self, fake_run, db_path):
        fake_run(stdout=b"")
        assert CliExecutor().execute(db_path, "delete from t;") == ""

    def test_nonzero_exit(self, fake_run, db_path, caplog):
        fake_run(returncode=1, stderr=b"Error: no such table: t")
        with caplog.at_level(logging.ERROR):
            assert CliExecutor().execute(db_path, "select * from t;") is None
        assert "no such table" in caplog.text

    def test_process_timeout(self, fake_run, db_path):
        fake = fake_run(error=subprocess.TimeoutExpired(["sqlite3"], 1.0))
        assert CliExecutor().execute(db_path, "select 1;") is None
        assert not fake.script_path.exists()

    def test_os_error(self, fake_run, db_path):
        fake = fake_run(error=PermissionError("denied"))
        assert CliExecutor().execute(db_path, "select 1;") is None
        assert not fake.script_path.exists()

    def test_missing_executable(self, monkeypatch, db_path, caplog):
        monkeypatch.setattr("litetable.executor.cli.shutil.which", lambda name: None)

        def fail(*args, **kwargs):
            raise AssertionError("shell must not be run")

        monkeypatch.setattr("litetable.executor.cli.subprocess.run", fail)
        with caplog.at_level(logging.ERROR):
            assert CliExecutor(ExecutorConfig(executable="nope")).execute(db_path, ".tables") is None
        assert "nope" in caplog.text


class TestScriptEncoding:
    @pytest.fixture
    def no_run(self, monkeypatch, found):
        def fail(*args, **kwargs):
            raise AssertionError("shell must not be run")

        monkeypatch.setattr("litetable.executor.cli.subprocess.run", fail)

    def test_unencodable_script(self, no_run, db_path, caplog):
        executor = CliExecutor(ExecutorConfig(encoding="ascii"))
        with caplog.at_level(logging.ERROR):
            assert executor.execute(db_path, "select 'café';") is None
        assert "ascii" in caplog.text

    def test_lone_surrogate(self, no_run, db_path):
        assert CliExecutor().execute(db_path, "select '\ud800';") is None

    def test_unknown_encoding(self, no_run, db_path, caplog):
        executor = CliExecutor(ExecutorConfig(encoding="utf-99"))
        with caplog.at_level(logging.ERROR):
            assert executor.execute(db_path, ".tables") is None
        assert "utf-99" in caplog.text

    def test_handle_reports_failure(self, no_run, db_path, people_schema):
        people = TableHandle(db_path, "people", people_schema, CliExecutor(ExecutorConfig(encoding="ascii")))
        assert people.insert({"name": "café"}) is False
        assert people.find({"name": "café"}) is None
