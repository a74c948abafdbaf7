"""Pydantic models for sqlite3 introspection output."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, TypeAdapter, field_validator


class ColumnInfo(BaseModel):
    """One row of `pragma table_info(<table>)` as printed by `sqlite3 -json`."""

    cid: int
    name: str
    type: str = ""
    notnull: int = 0
    dflt_value: str | None = Field(default=None, description="Default as SQL text")
    pk: int = 0

    @field_validator("dflt_value", mode="before")
    @classmethod
    def _default_as_text(cls, value: Any) -> str | None:
        # The shell prints defaults as text, but hand-written JSON may not
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator("type", mode="before")
    @classmethod
    def _type_as_text(cls, value: Any) -> str:
        return "" if value is None else str(value)


COLUMN_INFO_LIST = TypeAdapter(list[ColumnInfo])
