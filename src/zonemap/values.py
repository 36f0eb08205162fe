"""Comparable scalar domain shared by index build and pruning."""

from __future__ import annotations

import math
from collections.abc import Callable
from enum import IntEnum, StrEnum

import pyarrow as pa

from zonemap.errors import TypeMismatchError
from zonemap.serde_msgspec import StructBaseHotPath

type Payload = int | float | str
type OrderKey = int | str | tuple[int, float]


class ValueKind(StrEnum):
    """Closed set of scalar kinds the index understands."""

    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    UTF8 = "utf8"


class Ordering(IntEnum):
    """Three-way comparison outcome."""

    LESS = -1
    EQUAL = 0
    GREATER = 1


INTEGER_RANGES: dict[ValueKind, tuple[int, int]] = {
    ValueKind.INT8: (-(2**7), 2**7 - 1),
    ValueKind.INT16: (-(2**15), 2**15 - 1),
    ValueKind.INT32: (-(2**31), 2**31 - 1),
    ValueKind.INT64: (-(2**63), 2**63 - 1),
    ValueKind.UINT8: (0, 2**8 - 1),
    ValueKind.UINT16: (0, 2**16 - 1),
    ValueKind.UINT32: (0, 2**32 - 1),
    ValueKind.UINT64: (0, 2**64 - 1),
}
FLOAT_KINDS: frozenset[ValueKind] = frozenset({ValueKind.FLOAT32, ValueKind.FLOAT64})

# Textual forms of non-finite floats, as written by the JSON codec.
_FLOAT_TOKENS: dict[str, float] = {
    "nan": math.nan,
    "inf": math.inf,
    "-inf": -math.inf,
}


class Value(StructBaseHotPath):
    """Typed scalar; ``data=None`` marks a null."""

    kind: ValueKind
    data: int | float | str | None = None

    @property
    def is_null(self) -> bool:
        """Return whether this value is the null marker.

        Returns
        -------
        bool
            ``True`` when the payload is ``None``.
        """
        return self.data is None

    def as_python(self) -> Payload | None:
        """Return the payload as a native Python scalar.

        Returns
        -------
        Payload | None
            Native payload, with non-finite float tokens resolved.
        """
        if self.data is None or self.kind not in FLOAT_KINDS:
            return self.data
        return _as_float(self.data)


def _as_float(data: Payload) -> float:
    if isinstance(data, str):
        token = _FLOAT_TOKENS.get(data.strip().lower())
        if token is None:
            msg = f"Invalid float payload: {data!r}"
            raise TypeMismatchError(msg)
        return token
    return float(data)


def _int_key(data: Payload) -> OrderKey:
    return int(data)


def _float_key(data: Payload) -> OrderKey:
    # NaN sorts after every other float and equals itself.
    x = _as_float(data)
    if math.isnan(x):
        return (1, 0.0)
    return (0, x)


def _utf8_key(data: Payload) -> OrderKey:
    # Code point order on str matches UTF-8 byte order.
    return str(data)


_ORDER_KEYS: dict[ValueKind, Callable[[Payload], OrderKey]] = {
    **dict.fromkeys(INTEGER_RANGES, _int_key),
    ValueKind.FLOAT32: _float_key,
    ValueKind.FLOAT64: _float_key,
    ValueKind.UTF8: _utf8_key,
}
if set(_ORDER_KEYS) != set(ValueKind):  # pragma: no cover - import-time guard
    _missing = sorted(set(ValueKind) - set(_ORDER_KEYS))
    msg = f"ValueKind members without an ordering: {_missing}"
    raise RuntimeError(msg)


def is_null(value: Value | None) -> bool:
    """Return whether a value is absent or the null marker.

    Returns
    -------
    bool
        ``True`` for ``None`` or a null ``Value``.
    """
    return value is None or value.data is None


def compare(a: Value, b: Value) -> Ordering:
    """Compare two non-null values of the same kind.

    Parameters
    ----------
    a
        Left operand.
    b
        Right operand.

    Returns
    -------
    Ordering
        Three-way comparison of ``a`` against ``b``.

    Raises
    ------
    TypeMismatchError
        Raised when the operands have different kinds.
    ValueError
        Raised when either operand is null.
    """
    if a.kind != b.kind:
        msg = f"Cannot compare {a.kind} with {b.kind}"
        raise TypeMismatchError(msg)
    if a.data is None or b.data is None:
        msg = "Null values are excluded from ordering comparisons."
        raise ValueError(msg)
    key = _ORDER_KEYS[a.kind]
    left = key(a.data)
    right = key(b.data)
    return Ordering((left > right) - (left < right))


def value_min(a: Value, b: Value) -> Value:
    """Return the lesser of two values.

    Returns
    -------
    Value
        ``a`` unless ``b`` compares strictly less.
    """
    return b if compare(b, a) is Ordering.LESS else a


def value_max(a: Value, b: Value) -> Value:
    """Return the greater of two values.

    Returns
    -------
    Value
        ``a`` unless ``b`` compares strictly greater.
    """
    return b if compare(b, a) is Ordering.GREATER else a


def make_value(kind: ValueKind, data: object) -> Value:
    """Build a value after validating the payload against its kind.

    Parameters
    ----------
    kind
        Target scalar kind.
    data
        Raw payload; ``None`` yields the null marker.

    Returns
    -------
    Value
        Validated value.

    Raises
    ------
    TypeMismatchError
        Raised when the payload does not fit the kind.
    """
    if data is None:
        return Value(kind=kind)
    if isinstance(data, bool):
        msg = f"Boolean payloads are not supported for {kind}"
        raise TypeMismatchError(msg)
    bounds = INTEGER_RANGES.get(kind)
    if bounds is not None:
        if not isinstance(data, int):
            msg = f"Expected an integer payload for {kind}, got {type(data).__name__}"
            raise TypeMismatchError(msg)
        low, high = bounds
        if not low <= data <= high:
            msg = f"Payload {data} out of range for {kind}"
            raise TypeMismatchError(msg)
        return Value(kind=kind, data=data)
    if kind in FLOAT_KINDS:
        if not isinstance(data, (int, float, str)):
            msg = f"Expected a float payload for {kind}, got {type(data).__name__}"
            raise TypeMismatchError(msg)
        return Value(kind=kind, data=_as_float(data))
    if isinstance(data, (bytes, bytearray, memoryview)):
        try:
            data = bytes(data).decode("utf-8")
        except UnicodeDecodeError as exc:
            msg = "Byte payload is not valid UTF-8"
            raise TypeMismatchError(msg) from exc
    if not isinstance(data, str):
        msg = f"Expected a string payload for {kind}, got {type(data).__name__}"
        raise TypeMismatchError(msg)
    return Value(kind=kind, data=data)


def infer_value(obj: object) -> Value:
    """Infer a typed value from a Python literal.

    Returns
    -------
    Value
        Value with the default kind for the literal's Python type.

    Raises
    ------
    TypeMismatchError
        Raised when the literal has no supported kind.
    """
    if isinstance(obj, Value):
        return obj
    if obj is None:
        return Value(kind=ValueKind.INT64)
    if isinstance(obj, bool):
        msg = "Boolean literals are not supported."
        raise TypeMismatchError(msg)
    if isinstance(obj, int):
        for kind in (ValueKind.INT64, ValueKind.UINT64):
            low, high = INTEGER_RANGES[kind]
            if low <= obj <= high:
                return Value(kind=kind, data=obj)
        msg = f"Integer literal {obj} exceeds 64-bit range"
        raise TypeMismatchError(msg)
    if isinstance(obj, float):
        return Value(kind=ValueKind.FLOAT64, data=obj)
    if isinstance(obj, (str, bytes, bytearray, memoryview)):
        return make_value(ValueKind.UTF8, obj)
    msg = f"Unsupported literal type: {type(obj).__name__}"
    raise TypeMismatchError(msg)


def _fits_float_kind(x: float, kind: ValueKind) -> bool:
    # float32 holds every non-finite value but only some finite float64s.
    if kind is not ValueKind.FLOAT32 or not math.isfinite(x):
        return True
    try:
        narrowed = pa.scalar(x, type=pa.float32()).as_py()
    except (pa.ArrowInvalid, OverflowError):
        return False
    return narrowed == x


def coerce_value(value: Value, kind: ValueKind) -> Value | None:
    """Re-tag a value to another kind when no information is lost.

    Parameters
    ----------
    value
        Value to coerce.
    kind
        Target kind.

    Returns
    -------
    Value | None
        Coerced value, or ``None`` when the conversion would be lossy.
    """
    if value.kind == kind:
        return value
    if value.data is None:
        return Value(kind=kind)
    payload = value.as_python()
    source_is_int = value.kind in INTEGER_RANGES
    if source_is_int and kind in INTEGER_RANGES:
        low, high = INTEGER_RANGES[kind]
        if low <= int(payload) <= high:
            return Value(kind=kind, data=payload)
        return None
    if source_is_int and kind in FLOAT_KINDS:
        as_float = float(payload)
        if as_float == payload and _fits_float_kind(as_float, kind):
            return Value(kind=kind, data=as_float)
        return None
    if value.kind in FLOAT_KINDS and kind in FLOAT_KINDS:
        if _fits_float_kind(payload, kind):
            return Value(kind=kind, data=payload)
        return None
    return None


def resolve_float_tokens(value: Value) -> Value:
    """Return ``value`` with a textual non-finite float payload parsed back to a float.

    Returns
    -------
    Value
        Equivalent value whose float payload is a ``float``.
    """
    if value.kind in FLOAT_KINDS and isinstance(value.data, str):
        return Value(kind=value.kind, data=_as_float(value.data))
    return value


__all__ = [
    "FLOAT_KINDS",
    "INTEGER_RANGES",
    "Ordering",
    "Value",
    "ValueKind",
    "coerce_value",
    "compare",
    "infer_value",
    "is_null",
    "make_value",
    "resolve_float_tokens",
    "value_max",
    "value_min",
]
