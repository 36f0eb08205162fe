"""Shared msgspec policy and helpers."""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from typing import Literal, cast

import msgspec


class StructBaseStrict(
    msgspec.Struct,
    frozen=True,
    kw_only=True,
    omit_defaults=True,
    repr_omit_defaults=True,
    forbid_unknown_fields=True,
):
    """Base struct for strict contracts."""


class StructBaseRecord(
    msgspec.Struct,
    frozen=True,
    kw_only=True,
    repr_omit_defaults=True,
    forbid_unknown_fields=False,
):
    """Base struct for persisted records whose field shape never varies."""


class StructBaseHotPath(
    msgspec.Struct,
    frozen=True,
    kw_only=True,
    omit_defaults=True,
    repr_omit_defaults=True,
    forbid_unknown_fields=False,
    gc=False,
    cache_hash=True,
):
    """Base struct for high-volume, immutable artifacts."""


_DEFAULT_ORDER: Literal["deterministic"] = "deterministic"

_VALIDATION_RE = re.compile(r"^(?P<summary>.*?)(?:\s+-\s+at\s+`(?P<path>[^`]+)`)?$")


def _nonfinite_token(value: float) -> str:
    # JSON has no spelling for non-finite floats.
    if math.isnan(value):
        return "nan"
    return "inf" if value > 0 else "-inf"


def _json_safe(obj: object) -> object:
    if isinstance(obj, float):
        return obj if math.isfinite(obj) else _nonfinite_token(obj)
    if isinstance(obj, dict):
        return {key: _json_safe(item) for key, item in obj.items()}
    if isinstance(obj, list):
        return [_json_safe(item) for item in obj]
    return obj


JSON_ENCODER = msgspec.json.Encoder(
    order=_DEFAULT_ORDER,
)
MSGPACK_ENCODER = msgspec.msgpack.Encoder(
    order=_DEFAULT_ORDER,
)


def json_schema(struct: type[msgspec.Struct]) -> Mapping[str, object]:
    """Return a JSON Schema 2020-12 payload for a msgspec struct.

    Parameters
    ----------
    struct
        msgspec struct type.

    Returns
    -------
    Mapping[str, object]
        JSON Schema payload.
    """
    return cast("Mapping[str, object]", msgspec.json.schema(struct))


def validation_error_payload(exc: msgspec.ValidationError) -> dict[str, str]:
    """Normalize a msgspec ValidationError for diagnostics.

    Parameters
    ----------
    exc
        ValidationError raised by msgspec decoding/conversion.

    Returns
    -------
    dict[str, str]
        Normalized error payload containing type, summary, and optional path.
    """
    message = str(exc).strip()
    match = _VALIDATION_RE.match(message)
    payload: dict[str, str] = {"type": exc.__class__.__name__}
    if match:
        summary = (match.group("summary") or "").strip()
        if summary:
            payload["summary"] = summary
        path = match.group("path")
        if path:
            payload["path"] = path
        return payload
    payload["summary"] = message
    return payload


def to_builtins(obj: object) -> object:
    """Convert an object into JSON-compatible builtins.

    Non-finite floats are replaced by their textual tokens.

    Returns
    -------
    object
        Builtin representation of ``obj``.
    """
    raw = msgspec.to_builtins(obj, order=_DEFAULT_ORDER)
    return _json_safe(raw)


def dumps_json(obj: object, *, pretty: bool = False) -> bytes:
    """Serialize an object to JSON bytes.

    Parameters
    ----------
    obj
        Object to serialize.
    pretty
        Whether to format with indentation.

    Returns
    -------
    bytes
        JSON payload.
    """
    raw = JSON_ENCODER.encode(to_builtins(obj))
    if not pretty:
        return raw
    return msgspec.json.format(raw, indent=2)


def loads_json[T](buf: bytes | str, *, target_type: type[T], strict: bool = True) -> T:
    """Deserialize JSON bytes into the requested type.

    Parameters
    ----------
    buf
        JSON payload.
    target_type
        Target type for decoding.
    strict
        Whether to enforce strict decoding.

    Returns
    -------
    T
        Decoded payload.
    """
    decoder = msgspec.json.Decoder(
        type=target_type,
        strict=strict,
    )
    return decoder.decode(buf)


def dumps_msgpack(obj: object) -> bytes:
    """Serialize an object to MessagePack bytes.

    Parameters
    ----------
    obj
        Object to serialize.

    Returns
    -------
    bytes
        MessagePack payload.
    """
    return MSGPACK_ENCODER.encode(obj)


def loads_msgpack[T](buf: bytes, *, target_type: type[T], strict: bool = True) -> T:
    """Deserialize MessagePack bytes into the requested type.

    Parameters
    ----------
    buf
        MessagePack payload.
    target_type
        Target type for decoding.
    strict
        Whether to enforce strict decoding.

    Returns
    -------
    T
        Decoded payload.
    """
    decoder = msgspec.msgpack.Decoder(
        type=target_type,
        strict=strict,
    )
    return decoder.decode(buf)


__all__ = [
    "JSON_ENCODER",
    "MSGPACK_ENCODER",
    "StructBaseHotPath",
    "StructBaseRecord",
    "StructBaseStrict",
    "dumps_json",
    "dumps_msgpack",
    "json_schema",
    "loads_json",
    "loads_msgpack",
    "to_builtins",
    "validation_error_payload",
]
