"""Persistence tests for zone map index records and predicates."""

from __future__ import annotations

import math
from collections.abc import Callable

import msgspec
import pyarrow as pa
import pytest

from tests.test_helpers.zonemap_blocks import arrow_block
from zonemap.builder import create_index
from zonemap.evaluator import evaluate
from zonemap.models import (
    IndexSchema,
    PruneResult,
    dumps_index_schemas,
    loads_index_schemas,
)
from zonemap.predicates import IsNull, Not, Predicate, conjunction, gt
from zonemap.serde_msgspec import (
    dumps_json,
    dumps_msgpack,
    json_schema,
    loads_json,
    to_builtins,
    validation_error_payload,
)
from zonemap.values import ValueKind


def _schemas() -> tuple[IndexSchema, ...]:
    schema = pa.schema([("name", pa.string()), ("age", pa.int32())])
    blocks = [
        arrow_block({"name": ["jack", None], "age": [11, 6]}, schema=schema),
        arrow_block({"name": [None, None], "age": [24, None]}, schema=schema),
        arrow_block({"name": [], "age": []}, schema=schema),
    ]
    return create_index(["name", "age"], blocks)


@pytest.mark.parametrize("fmt", ["json", "msgpack"])
def test_index_schemas_roundtrip(fmt: str) -> None:
    """Restore structurally equal schemas from either encoding."""
    schemas = _schemas()
    payload = dumps_index_schemas(schemas, fmt=fmt)
    assert loads_index_schemas(payload, fmt=fmt) == schemas


def test_index_schema_json_shape() -> None:
    """Persist the documented record fields, sentinels included."""
    raw = msgspec.json.decode(dumps_index_schemas(_schemas()))
    name = raw[0]
    assert set(name) == {"col", "min_max", "sparse"}
    assert name["min_max"] == {
        "min": {"kind": "utf8", "data": "jack"},
        "max": {"kind": "utf8", "data": "jack"},
    }
    assert set(name["sparse"][0]) == {"min", "max", "page_no", "has_null"}
    assert name["sparse"][1] == {"min": None, "max": None, "page_no": 1, "has_null": True}
    assert name["sparse"][2] == {"min": None, "max": None, "page_no": 2, "has_null": True}


def test_non_finite_bounds_survive_json() -> None:
    """Write non-finite floats as tokens and keep pruning on reload."""
    (schema,) = create_index(["f"], [arrow_block({"f": [1.0, math.nan, -math.inf]})])
    payload = dumps_index_schemas([schema])
    raw = msgspec.json.decode(payload)
    assert raw[0]["min_max"]["max"] == {"kind": "float64", "data": "nan"}
    assert raw[0]["min_max"]["min"] == {"kind": "float64", "data": "-inf"}
    (restored,) = loads_index_schemas(payload)
    assert restored.min_max.max is not None
    assert restored.min_max.max.kind is ValueKind.FLOAT64
    assert math.isnan(restored.min_max.max.as_python())
    assert evaluate(gt("f", 5.0), [restored]).scan_pages == frozenset({0})


def test_infinite_bounds_reload_equal() -> None:
    """Restore infinite bounds as floats so reloaded schemas compare equal."""
    blocks = [arrow_block({"f": [1.0, math.inf]}), arrow_block({"f": [-math.inf, None]})]
    schemas = create_index(["f"], blocks)
    (restored,) = loads_index_schemas(dumps_index_schemas(schemas))
    assert (restored,) == schemas
    assert restored.sparse[0].max is not None
    assert restored.sparse[0].max.data == math.inf
    assert isinstance(restored.sparse[1].min.data, float)


def test_predicate_roundtrip_through_tagged_union() -> None:
    """Decode predicate trees by their node tag."""
    predicate = conjunction(gt("age", 30), Not(operand=IsNull(column="name")))
    payload = dumps_json(predicate)
    assert msgspec.json.decode(payload)["node"] == "and"
    assert loads_json(payload, target_type=Predicate) == predicate


def test_predicate_decode_rejects_unknown_fields() -> None:
    """Reject predicate payloads with fields outside the node contract."""
    with pytest.raises(msgspec.ValidationError):
        loads_json(b'{"node": "is_null", "column": "a", "extra": 1}', target_type=Predicate)


def test_validation_error_payload_reports_path() -> None:
    """Normalize decode failures into a summary and a path."""
    payload = (
        b'{"node": "comparison", "op": "~", "column": "a", '
        b'"literal": {"kind": "int64", "data": 1}}'
    )
    with pytest.raises(msgspec.ValidationError) as excinfo:
        loads_json(payload, target_type=Predicate)
    details = validation_error_payload(excinfo.value)
    assert details["type"] == "ValidationError"
    assert details["path"] == "$.op"
    assert "summary" in details


def test_prune_result_builtins_are_sorted() -> None:
    """Render page sets as sorted lists."""
    result = PruneResult(scan_pages=frozenset({3, 0, 2}), proven_empty=False)
    assert to_builtins(result) == {
        "scan_pages": [0, 2, 3],
        "proven_empty": False,
        "diagnostics": [],
    }


def test_pretty_json_and_schema() -> None:
    """Expose indented output and a JSON Schema for persisted records."""
    assert b"\n" in dumps_json(_schemas(), pretty=True)
    schema = json_schema(IndexSchema)
    assert "IndexSchema" in schema["$defs"]


@pytest.mark.parametrize("fmt", ["yaml", ""])
def test_unknown_format_is_rejected(fmt: str) -> None:
    """Refuse formats other than JSON and MessagePack."""
    with pytest.raises(ValueError, match="format"):
        dumps_index_schemas(_schemas(), fmt=fmt)
    with pytest.raises(ValueError, match="format"):
        loads_index_schemas(b"[]", fmt=fmt)


@pytest.mark.parametrize("encode", [dumps_json, dumps_msgpack])
def test_encoders_reject_non_record_objects(encode: Callable[[object], bytes]) -> None:
    """Refuse objects outside the record and builtin types."""
    with pytest.raises(TypeError):
        encode(object())
