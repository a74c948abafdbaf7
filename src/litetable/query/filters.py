"""Filter documents - parsing document-style filters into a clause tree.

A filter document maps column names to values or operator groups, with the
reserved key ``$or`` holding a list of nested documents:

    {"A": 1, "B": {"$gt": 5}, "$or": [{"C": "x"}, {"D": 2}]}

parses to

    Filter((
        Equality("A", 1),
        OperatorGroup("B", ((Operator.GT, 5),)),
        AnyOf((Filter((Equality("C", "x"),)), Filter((Equality("D", 2),)))),
    ))

Clauses of a Filter are AND-ed, branches of an AnyOf are OR-ed.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from ..errors import FilterError


OR_KEY = "$or"


class Operator(str, Enum):
    """Comparison operators accepted inside an operator group."""
    GT = "$gt"
    GTE = "$gte"
    LT = "$lt"
    LTE = "$lte"
    EQ = "$eq"
    NE = "$ne"

    @property
    def sql(self) -> str:
        """The SQL comparison this operator compiles to."""
        return OPERATOR_SQL[self]


OPERATOR_SQL: dict[Operator, str] = {
    Operator.GT: ">",
    Operator.GTE: ">=",
    Operator.LT: "<",
    Operator.LTE: "<=",
    Operator.EQ: "==",
    Operator.NE: "!=",
}


@dataclass(frozen=True, slots=True)
class Equality:
    """``{column: value}`` - the column equals a literal value."""
    column: str
    value: Any


@dataclass(frozen=True, slots=True)
class OperatorGroup:
    """``{column: {"$gt": 1, "$lt": 9}}`` - one comparison per operator."""
    column: str
    comparisons: tuple[tuple[Operator, Any], ...] = ()


@dataclass(frozen=True, slots=True)
class AnyOf:
    """``{"$or": [...]}`` - at least one branch matches."""
    branches: tuple[Filter, ...] = ()


Clause = Union[Equality, OperatorGroup, AnyOf]


@dataclass(frozen=True, slots=True)
class Filter:
    """A conjunction of clauses. The empty filter matches every row."""
    clauses: tuple[Clause, ...] = ()

    def __bool__(self) -> bool:
        return len(self.clauses) > 0

    def columns(self) -> set[str]:
        """All column names referenced anywhere in the filter."""
        names: set[str] = set()
        for clause in self.clauses:
            if isinstance(clause, AnyOf):
                for branch in clause.branches:
                    names |= branch.columns()
            else:
                names.add(clause.column)
        return names


def parse_operators(column: str, operators: Mapping[str, Any]) -> OperatorGroup:
    """Parse an operator mapping. Unrecognized operator keys are dropped."""
    comparisons = []
    for key, operand in operators.items():
        try:
            operator = Operator(key)
        except ValueError:
            continue
        comparisons.append((operator, operand))
    return OperatorGroup(column, tuple(comparisons))


def parse_filter(document: Mapping[str, Any] | Filter | None) -> Filter:
    """
    Parse a filter document into a Filter.

    Args:
        document: Filter document, an already-parsed Filter, or None

    Returns:
        Filter instance (empty for None or {})

    Raises:
        FilterError: If the document or an ``$or`` entry is malformed
    """
    if document is None:
        return Filter()
    if isinstance(document, Filter):
        return document
    if not isinstance(document, Mapping):
        raise FilterError(f"Filter must be a mapping, got {type(document).__name__}")

    clauses: list[Clause] = []
    for key, value in document.items():
        if key == OR_KEY:
            if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
                raise FilterError(f"'{OR_KEY}' expects a list of filters, got {type(value).__name__}")
            clauses.append(AnyOf(tuple(parse_filter(branch) for branch in value)))
        elif isinstance(value, Mapping):
            clauses.append(parse_operators(key, value))
        else:
            clauses.append(Equality(key, value))

    return Filter(tuple(clauses))
