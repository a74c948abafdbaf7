"""Configuration for litetable."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from .errors import ConfigError


@dataclass
class ExecutorConfig:
    """sqlite3 shell execution configuration."""
    # Name on PATH or absolute path of the sqlite3 shell
    executable: str = "sqlite3"

    # Embedded as `.timeout <ms>` at the top of every script
    timeout_ms: int = 1000

    encoding: str = "utf-8"

    # Wall-clock limit for the shell process (None = unlimited)
    process_timeout_seconds: float | None = None

    def timeout_statement(self) -> str:
        """The busy-timeout line prefixed to every script."""
        return f".timeout {self.timeout_ms}\n"


@dataclass
class CatalogConfig:
    """Table discovery configuration."""
    # One `pragma table_info` call for all tables (True) or one per table (False)
    batched_introspection: bool = True


def _build(section_cls: type, data: dict[str, Any] | None, section: str) -> Any:
    data = data or {}
    if not isinstance(data, dict):
        raise ConfigError(f"Section '{section}' must be a mapping")
    known = {f.name for f in fields(section_cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown keys in '{section}': {', '.join(unknown)}")
    return section_cls(**data)


@dataclass
class Config:
    """Main configuration container."""
    executor: ExecutorConfig = field(default_factory=ExecutorConfig)
    catalog: CatalogConfig = field(default_factory=CatalogConfig)

    @classmethod
    def from_dict(cls, data: dict) -> Config:
        """Create config from dictionary."""
        if not isinstance(data, dict):
            raise ConfigError("Config root must be a mapping")
        unknown = sorted(set(data) - {"executor", "catalog"})
        if unknown:
            raise ConfigError(f"Unknown config sections: {', '.join(unknown)}")
        return cls(
            executor=_build(ExecutorConfig, data.get("executor"), "executor"),
            catalog=_build(CatalogConfig, data.get("catalog"), "catalog"),
        )

    @classmethod
    def from_yaml(cls, path: str | Path) -> Config:
        """Load config from YAML file."""
        import yaml
        with open(path, "r", encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        return cls.from_dict(data or {})

    @classmethod
    def from_json(cls, path: str | Path) -> Config:
        """Load config from JSON file."""
        import json
        with open(path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigError(f"Invalid JSON in {path}: {e}") from e
        return cls.from_dict(data or {})

    @classmethod
    def from_file(cls, path: str | Path) -> Config:
        """Load config from a YAML or JSON file, chosen by suffix."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        if path.suffix in (".yaml", ".yml"):
            return cls.from_yaml(path)
        return cls.from_json(path)
