"""Property-based tests for the engine, the enumerator and the coverage ledger.

Key properties tested:
1. Determinism - validating the same value twice gives the same verdict and events
2. Containment - every pointer the engine reports inside a target is enumerated
3. Monotonicity - adding suites never clears a coverage flag
4. Idempotence - rebinding a registry alias to the same schema changes nothing
"""

from __future__ import annotations

from typing import Any

from hypothesis import given, settings
from hypothesis import strategies as st

from schemacov.coverage import CoverageLedger, enumerate_pointers, measure_coverage
from schemacov.engine import KeywordError, Validator
from schemacov.registry import SchemaRegistry

TARGET_ID = "http://example.com/props.json"

TARGET: dict[str, Any] = {
    "id": TARGET_ID,
    "definitions": {
        "count": {"type": "integer", "minimum": 0, "maximum": 10, "multipleOf": 2},
        "label": {"type": "string", "minLength": 1, "maxLength": 4, "pattern": "^[a-z]"},
    },
    "anyOf": [{"type": "object"}, {"type": "array"}, {"type": "string"}],
    "properties": {
        "count": {"$ref": "#/definitions/count"},
        "label": {"$ref": "#/definitions/label"},
        "list": {"type": "array", "items": {"enum": [1, "a", None]}, "uniqueItems": True, "minItems": 1},
        "flag": {"oneOf": [{"type": "boolean"}, {"type": "null"}], "not": {"enum": [False]}},
    },
    "patternProperties": {"^x": {"type": ["number", "string"]}},
    "additionalProperties": {"maxProperties": 1},
    "dependencies": {"count": ["label"], "list": {"required": ["flag"]}},
    "items": [{"type": "number"}],
    "additionalItems": False,
    "maxLength": 3,
}

json_scalars = st.one_of(
    st.none(),
    st.booleans(),
    st.integers(min_value=-20, max_value=20),
    st.floats(min_value=-20, max_value=20, allow_nan=False, allow_infinity=False),
    st.sampled_from(["", "a", "ab", "xyz", "Label", "count"]),
)

json_values = st.recursive(
    json_scalars,
    lambda children: st.one_of(
        st.lists(children, max_size=4),
        st.dictionaries(st.sampled_from(["count", "label", "list", "flag", "x1", "other"]), children, max_size=4),
    ),
    max_leaves=12,
)


def _validator() -> Validator:
    validator = Validator()
    validator.registry.add(TARGET_ID, TARGET)
    return validator


def _suite(values: list[Any]) -> dict[str, Any]:
    return {
        "description": "generated",
        "schema": {"$ref": f"{TARGET_ID}#"},
        "tests": [{"description": f"value {i}", "data": value, "valid": True} for i, value in enumerate(values)],
    }


@given(json_values)
@settings(max_examples=200)
def test_validation_is_deterministic(data: Any):
    """Same schema and data always give the same verdict and event sequence."""
    validator = _validator()
    first: list[tuple] = []
    second: list[tuple] = []
    result_a = validator.validate(f"{TARGET_ID}#", data, instrument=lambda *event: first.append(event))
    result_b = validator.validate(f"{TARGET_ID}#", data, instrument=lambda *event: second.append(event))
    assert result_a.is_valid == result_b.is_valid
    assert [(kw, ptr, err is None) for kw, ptr, err in first] == [(kw, ptr, err is None) for kw, ptr, err in second]


@given(json_values)
@settings(max_examples=200)
def test_reported_pointers_are_enumerated(data: Any):
    """The engine never reports a pointer the enumerator does not know."""
    enumerated = set(enumerate_pointers(TARGET))
    reported: list[str] = []
    _validator().validate(f"{TARGET_ID}#", data, instrument=lambda kw, ptr, err: reported.append(ptr))
    assert set(reported) <= enumerated


@given(json_values)
def test_errors_match_failing_events(data: Any):
    """A value is valid exactly when no error reaches the root."""
    result = _validator().validate(f"{TARGET_ID}#", data)
    assert result.is_valid == (result.errors == [])


def test_enumeration_is_stable():
    assert enumerate_pointers(TARGET) == enumerate_pointers(TARGET)
    assert len(set(enumerate_pointers(TARGET))) == len(enumerate_pointers(TARGET))


@given(st.lists(st.lists(json_values, max_size=4), min_size=1, max_size=4))
@settings(max_examples=50)
def test_coverage_is_monotonic_over_suites(batches: list[list[Any]]):
    """Running more suites can only set flags, never clear them."""
    suites = [_suite(values) for values in batches]
    previous = None
    for end in range(len(suites) + 1):
        rows = measure_coverage([TARGET], suites[:end], [TARGET])[TARGET_ID]
        if previous is not None:
            for before, after in zip(previous, rows):
                assert before.pointer == after.pointer
                assert after.succeeded >= before.succeeded
                assert after.failed >= before.failed
        previous = rows


@given(st.lists(st.tuples(st.text(max_size=3), st.booleans()), max_size=20))
def test_ledger_flags_only_accumulate(records: list[tuple[str, bool]]):
    ledger = CoverageLedger()
    seen: dict[str, set[bool]] = {}
    for pointer, ok in records:
        ledger("type", pointer, None if ok else KeywordError("type", pointer, "type failed"))
        seen.setdefault(pointer, set()).add(ok)
        for known, flags in seen.items():
            assert ledger.succeeded(known) == (True in flags)
            assert ledger.failed(known) == (False in flags)


@given(json_values)
def test_rebinding_alias_is_idempotent(schema: Any):
    registry = SchemaRegistry()
    registry.put("@entry", schema)
    registry.put("@entry", schema)
    assert len(registry) == 1
    assert registry.get("@entry") is schema
