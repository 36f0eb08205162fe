"""Predicate tree nodes consumed by the pruning evaluator."""

from __future__ import annotations

from enum import StrEnum
from functools import reduce

from zonemap.serde_msgspec import StructBaseStrict
from zonemap.values import Value, infer_value


class ComparisonOp(StrEnum):
    """Binary comparison operators."""

    EQ = "="
    NE = "!="
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="

    def negated(self) -> ComparisonOp:
        """Return the operator equivalent to ``NOT (col op lit)``.

        Returns
        -------
        ComparisonOp
            Complementary operator.
        """
        return _NEGATED[self]


_NEGATED: dict[ComparisonOp, ComparisonOp] = {
    ComparisonOp.EQ: ComparisonOp.NE,
    ComparisonOp.NE: ComparisonOp.EQ,
    ComparisonOp.LT: ComparisonOp.GE,
    ComparisonOp.LE: ComparisonOp.GT,
    ComparisonOp.GT: ComparisonOp.LE,
    ComparisonOp.GE: ComparisonOp.LT,
}


class Literal(StructBaseStrict, tag="literal", tag_field="node"):
    """Constant value."""

    value: Value


class ColumnRef(StructBaseStrict, tag="column", tag_field="node"):
    """Bare column reference."""

    name: str


class Comparison(StructBaseStrict, tag="comparison", tag_field="node"):
    """``column op literal``."""

    op: ComparisonOp
    column: str
    literal: Value


class IsNull(StructBaseStrict, tag="is_null", tag_field="node"):
    """``column IS NULL``."""

    column: str


class IsNotNull(StructBaseStrict, tag="is_not_null", tag_field="node"):
    """``column IS NOT NULL``."""

    column: str


class And(StructBaseStrict, tag="and", tag_field="node"):
    """Conjunction of two predicates."""

    left: Predicate
    right: Predicate


class Or(StructBaseStrict, tag="or", tag_field="node"):
    """Disjunction of two predicates."""

    left: Predicate
    right: Predicate


class Not(StructBaseStrict, tag="not", tag_field="node"):
    """Negation of a predicate."""

    operand: Predicate


Predicate = Literal | ColumnRef | Comparison | IsNull | IsNotNull | And | Or | Not


def comparison(op: ComparisonOp | str, column: str, value: object) -> Comparison:
    """Build a comparison, inferring the literal kind when needed.

    Parameters
    ----------
    op
        Operator or its symbol.
    column
        Column name.
    value
        ``Value`` or Python literal.

    Returns
    -------
    Comparison
        Comparison node.
    """
    return Comparison(op=ComparisonOp(op), column=column, literal=infer_value(value))


def eq(column: str, value: object) -> Comparison:
    """Return ``column = value``."""
    return comparison(ComparisonOp.EQ, column, value)


def ne(column: str, value: object) -> Comparison:
    """Return ``column != value``."""
    return comparison(ComparisonOp.NE, column, value)


def lt(column: str, value: object) -> Comparison:
    """Return ``column < value``."""
    return comparison(ComparisonOp.LT, column, value)


def le(column: str, value: object) -> Comparison:
    """Return ``column <= value``."""
    return comparison(ComparisonOp.LE, column, value)


def gt(column: str, value: object) -> Comparison:
    """Return ``column > value``."""
    return comparison(ComparisonOp.GT, column, value)


def ge(column: str, value: object) -> Comparison:
    """Return ``column >= value``."""
    return comparison(ComparisonOp.GE, column, value)


def conjunction(first: Predicate, *rest: Predicate) -> Predicate:
    """Fold predicates into a left-deep ``And`` chain.

    Returns
    -------
    Predicate
        ``first`` alone, or the conjunction of all predicates.
    """
    return reduce(lambda left, right: And(left=left, right=right), rest, first)


def disjunction(first: Predicate, *rest: Predicate) -> Predicate:
    """Fold predicates into a left-deep ``Or`` chain.

    Returns
    -------
    Predicate
        ``first`` alone, or the disjunction of all predicates.
    """
    return reduce(lambda left, right: Or(left=left, right=right), rest, first)


def referenced_columns(predicate: object) -> frozenset[str]:
    """Return the column names a predicate tree mentions.

    Unknown node types contribute nothing.

    Returns
    -------
    frozenset[str]
        Referenced column names.
    """
    if isinstance(predicate, (Comparison, IsNull, IsNotNull)):
        return frozenset({predicate.column})
    if isinstance(predicate, ColumnRef):
        return frozenset({predicate.name})
    if isinstance(predicate, (And, Or)):
        return referenced_columns(predicate.left) | referenced_columns(predicate.right)
    if isinstance(predicate, Not):
        return referenced_columns(predicate.operand)
    return frozenset()


__all__ = [
    "And",
    "ColumnRef",
    "Comparison",
    "ComparisonOp",
    "IsNotNull",
    "IsNull",
    "Literal",
    "Not",
    "Or",
    "Predicate",
    "comparison",
    "conjunction",
    "disjunction",
    "eq",
    "ge",
    "gt",
    "le",
    "lt",
    "ne",
    "referenced_columns",
]
