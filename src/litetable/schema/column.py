"""Column types - declared SQLite type classification and value conversion.

SQLite accepts almost any declared type name, so each column is reduced to a
small canonical category and values are converted according to it:

    VARCHAR(10)  -> string (size 10)
    INTEGER      -> int
    DOUBLE       -> real
    DATETIME     -> datetime (stored as epoch milliseconds)
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any

from .models import ColumnInfo


logger = logging.getLogger(__name__)

NULL = "null"


class Category(str, Enum):
    """Canonical value kinds every declared type is normalized into."""
    STRING = "string"
    NUMERIC = "numeric"
    INT = "int"
    REAL = "real"
    BLOB = "blob"
    BOOLEAN = "boolean"
    DATETIME = "datetime"
    NONE = "none"
    UNCLASSIFIED = "unclassified"


# Checked in order, first match wins (https://www.sqlite.org/datatype3.html)
CATEGORY_PATTERNS: tuple[tuple[Category, re.Pattern[str]], ...] = (
    (Category.STRING, re.compile(r"char|clob|text|decimal", re.I)),
    (Category.NUMERIC, re.compile(r"numeric", re.I)),
    (Category.INT, re.compile(r"int", re.I)),
    (Category.REAL, re.compile(r"double|float|real", re.I)),
    (Category.BLOB, re.compile(r"blob", re.I)),
    (Category.BOOLEAN, re.compile(r"boolean", re.I)),
    (Category.DATETIME, re.compile(r"date|datetime", re.I)),
    (Category.NONE, re.compile(r"none", re.I)),
)

SIZE_PATTERN = re.compile(r"\((\d+)\)")

# Leading number of a string, read leniently: "12.5kg" -> 12.5
FLOAT_PREFIX_PATTERN = re.compile(
    r"^\s*([+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))"
)
INT_PREFIX_PATTERN = re.compile(r"^\s*([+-]?\d+)")

# Applied after '-' has been replaced by '/'
DATETIME_FORMATS = (
    "%Y/%m/%d %H:%M:%S.%f",
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d %H:%M",
    "%Y/%m/%dT%H:%M:%S.%f",
    "%Y/%m/%dT%H:%M:%S",
    "%Y/%m/%dT%H:%M",
    "%Y/%m/%d",
)


def classify(declared_type: str) -> Category:
    """Map a declared type name to its canonical category.

    Args:
        declared_type: Type name as written in the table definition

    Returns:
        The first matching Category, or Category.UNCLASSIFIED
    """
    for category, pattern in CATEGORY_PATTERNS:
        if pattern.search(declared_type or ""):
            return category
    return Category.UNCLASSIFIED


def parse_declaration(text: str) -> tuple[str, int | None]:
    """Split a declaration like ``VARCHAR(10)`` into ``("VARCHAR", 10)``.

    Declarations without a size bound return None for the size.
    """
    text = text or ""
    base = text.split("(", 1)[0].strip() or "NONE"
    match = SIZE_PATTERN.search(text)
    size = int(match.group(1)) if match else None
    return base, size


def is_number(value: Any) -> bool:
    """True for int and float values (bool excluded)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_float(value: Any) -> float | None:
    """Read the leading number of a value, or None if there isn't one."""
    if is_number(value):
        return float(value)
    if value is None or isinstance(value, (dict, list)):
        return None
    match = FLOAT_PREFIX_PATTERN.match(str(value))
    if not match:
        return None
    return float(match.group(1))


def number_text(value: int | float) -> str:
    """Render a number the way the shell reads it back.

    Integral floats drop the fraction, non-finite floats use the
    Infinity/NaN spelling.
    """
    if isinstance(value, int):
        return str(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def as_text(value: Any) -> str:
    """Text form of a value stored in a string column.

    Bytes are decoded as UTF-8, booleans become ``1``/``0`` and numbers use
    the same text as numeric literals.
    """
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    if isinstance(value, bool):
        return "1" if value else "0"
    if is_number(value):
        return number_text(value)
    return str(value)


def quote(text: str) -> str:
    """Single-quote a string literal, doubling embedded quotes."""
    return "'" + text.replace("'", "''") + "'"


def from_epoch_ms(ms: int | float) -> datetime | None:
    """Local naive datetime for an epoch-milliseconds value."""
    try:
        seconds, millis = divmod(int(ms), 1000)
        return datetime.fromtimestamp(seconds) + timedelta(milliseconds=millis)
    except (OverflowError, OSError, ValueError):
        return None


def to_epoch_ms(value: datetime) -> int:
    """Epoch milliseconds for a datetime (naive values are local time)."""
    seconds = int(value.replace(microsecond=0).timestamp())
    return seconds * 1000 + value.microsecond // 1000


def parse_datetime(value: Any) -> datetime | None:
    """Interpret a value as an instant.

    Numbers are epoch milliseconds. Strings are date or date/time text in
    either ``2024-01-02`` or ``2024/01/02`` form, or any ISO 8601 string.
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if is_number(value):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        return from_epoch_ms(value)
    if not isinstance(value, str):
        return None

    text = value.strip().replace("-", "/")
    for fmt in DATETIME_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(value.strip())
    except ValueError:
        return None


@dataclass(frozen=True, slots=True)
class ColumnType:
    """
    Type information for a single table column.

    The category is derived once from the declared base type and drives
    both conversion directions:
        to_literal: Python value -> SQL literal text
        from_text:  JSON-decoded shell output -> Python value
    """
    name: str
    type: str
    cid: int = 0
    size: int | None = None  # None = unconstrained
    not_null: bool = False
    default: str | None = None  # Declared default as SQL text
    primary_key: bool = False
    category: Category = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "category", classify(self.type))

    @classmethod
    def from_info(cls, info: ColumnInfo) -> ColumnType:
        """Create a ColumnType from a `pragma table_info` row."""
        base, size = parse_declaration(info.type)
        return cls(
            name=info.name,
            type=base,
            cid=info.cid,
            size=size,
            not_null=info.notnull != 0,
            default=info.dflt_value,
            primary_key=info.pk != 0,
        )

    def describe(self) -> dict[str, Any]:
        """Column information as a plain dictionary."""
        return {
            "cid": self.cid,
            "name": self.name,
            "type": self.type,
            "size": self.size,
            "dflt_value": self.default,
            "is_not_null": self.not_null,
            "category": self.category.value,
        }

    def to_literal(self, value: Any) -> str:
        """Convert a Python value to SQL literal text for this column.

        Strings are single-quoted; numbers, booleans and datetimes are
        emitted unquoted. None is always the SQL null literal.
        """
        if value is None:
            return NULL

        category = self.category

        if category is Category.STRING:
            text = as_text(value)
            if self.size is not None:
                text = text[:self.size]
            return quote(text)

        if category in (Category.NUMERIC, Category.NONE):
            if not is_number(value):
                return quote(str(value))
            return self._number_literal(value)

        if category is Category.INT:
            if is_number(value):
                if isinstance(value, float) and not math.isfinite(value):
                    return NULL
                return str(math.trunc(value))
            # Parsed text keeps its fraction; only native numbers are truncated
            number = parse_float(value)
            return NULL if number is None else self._number_literal(number)

        if category is Category.REAL:
            number = float(value) if is_number(value) else parse_float(value)
            return NULL if number is None else self._number_literal(number)

        if category is Category.BLOB:
            return NULL

        if category is Category.BOOLEAN:
            return "1" if value else "0"

        if category is Category.DATETIME:
            instant = parse_datetime(value)
            if instant is None:
                logger.warning(f"Column {self.name}: cannot read {value!r} as a date/time")
                return NULL
            return str(to_epoch_ms(instant))

        logger.warning(f"Column {self.name}: no literal form for type '{self.type}' ({value!r})")
        return NULL

    def from_text(self, value: Any) -> Any:
        """Convert one JSON-decoded shell value back to a Python value."""
        category = self.category

        if category is Category.BLOB:
            # Binary payloads are not reconstructed
            return {}

        if value is None:
            return None

        if category is Category.BOOLEAN:
            number = parse_float(value)
            # An unparseable value counts as nonzero
            return number is None or number != 0

        if isinstance(value, (dict, list)):
            return None

        if category is Category.STRING:
            return value if isinstance(value, str) else str(value)

        if category in (Category.NUMERIC, Category.NONE):
            if is_number(value):
                return value
            number = parse_float(value)
            if number is None:
                return str(value)
            if math.isfinite(number):
                return number
            if number_text(number) == str(value):
                return number
            return str(value)

        if category is Category.INT:
            if isinstance(value, float):
                return int(value) if math.isfinite(value) else None
            if isinstance(value, int):
                return int(value)
            match = INT_PREFIX_PATTERN.match(str(value))
            return int(match.group(1)) if match else None

        if category is Category.REAL:
            return parse_float(value)

        if category is Category.DATETIME:
            return parse_datetime(value)

        return None

    @staticmethod
    def _number_literal(value: int | float) -> str:
        if isinstance(value, float) and not math.isfinite(value):
            return NULL
        return number_text(value)
