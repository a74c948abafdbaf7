"""Filter documents and their clause tree."""

from .filters import (
    OPERATOR_SQL,
    OR_KEY,
    AnyOf,
    Clause,
    Equality,
    Filter,
    Operator,
    OperatorGroup,
    parse_filter,
    parse_operators,
)

__all__ = [
    "OPERATOR_SQL",
    "OR_KEY",
    "AnyOf",
    "Clause",
    "Equality",
    "Filter",
    "Operator",
    "OperatorGroup",
    "parse_filter",
    "parse_operators",
]
