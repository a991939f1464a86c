"""Tests for pointer enumeration, the coverage ledger and aggregation."""

from __future__ import annotations

import dataclasses

import pytest

from schemacov.coverage import (
    CoverageLedger,
    CoverageResult,
    enumerate_pointers,
    measure_coverage,
    run_coverage,
)
from schemacov.engine import KeywordError, Validator
from schemacov.errors import DuplicateSchemaError


class TestEnumeratePointers:
    def test_schema_without_keywords(self):
        assert enumerate_pointers({}) == []
        assert enumerate_pointers({"id": "x", "description": "no keywords"}) == []

    def test_object_scenario(self):
        schema = {"id": "s1", "type": "object", "required": ["a"], "properties": {"a": {"type": "number"}}}
        assert enumerate_pointers(schema) == ["s1#/properties/a/type", "s1#/required", "s1#/type"]

    def test_identifier_is_cut_at_hash(self):
        assert enumerate_pointers({"id": "http://x.example/y.json#", "type": "string"}) == ["http://x.example/y.json#/type"]

    def test_missing_identifier(self):
        assert enumerate_pointers({"type": "string"}) == ["#/type"]

    def test_ref_hides_siblings_but_not_definitions(self):
        schema = {"id": "r", "$ref": "#/definitions/a", "definitions": {"a": {"type": "integer"}}, "maximum": 3}
        assert enumerate_pointers(schema) == ["r#/$ref", "r#/definitions/a/type"]

    def test_combinators(self):
        schema = {"id": "c", "allOf": [{"type": "integer"}], "not": {"minimum": 0}}
        assert enumerate_pointers(schema) == ["c#/allOf", "c#/allOf/0/type", "c#/not", "c#/not/minimum"]

    def test_object_and_array_sites(self):
        schema = {
            "id": "o",
            "patternProperties": {"^x": {"type": "string"}},
            "additionalProperties": False,
            "dependencies": {"a": ["b"], "c": {"required": ["d"]}},
            "items": [{"type": "integer"}],
            "additionalItems": {"type": "string"},
            "uniqueItems": True,
        }
        assert enumerate_pointers(schema) == [
            "o#/patternProperties/^x",
            "o#/patternProperties/^x/type",
            "o#/additionalProperties",
            "o#/dependencies/a",
            "o#/dependencies/c/required",
            "o#/items/0/type",
            "o#/additionalItems",
            "o#/additionalItems/type",
            "o#/uniqueItems",
        ]

    def test_inactive_keywords_are_skipped(self):
        schema = {"id": "i", "uniqueItems": False, "items": {"type": "string"}, "additionalItems": False}
        assert enumerate_pointers(schema) == ["i#/items/type"]

    def test_schema_valued_additional_properties_is_a_container(self):
        schema = {"id": "a", "additionalProperties": {"type": "string"}}
        assert enumerate_pointers(schema) == ["a#/additionalProperties/type"]

    def test_segments_are_escaped(self):
        schema = {"id": "p", "properties": {"a/b": {"type": "string"}, "c~d": {"type": "string"}}}
        assert enumerate_pointers(schema) == ["p#/properties/a~1b/type", "p#/properties/c~0d/type"]


class TestEngineAndEnumeratorAgree:
    """Every pointer the engine reports inside a target is an enumerated pointer."""

    TARGET = {
        "id": "http://example.com/target.json",
        "definitions": {
            "positive": {"type": "number", "minimum": 0, "exclusiveMinimum": True},
            "tag": {"type": "string", "pattern": "^[a-z]+$", "maxLength": 8},
        },
        "type": "object",
        "required": ["name"],
        "properties": {
            "name": {"type": "string", "minLength": 1},
            "size": {"$ref": "#/definitions/positive"},
            "tags": {"type": "array", "items": {"$ref": "#/definitions/tag"}, "uniqueItems": True, "maxItems": 3},
            "pair": {"items": [{"type": "integer"}, {"type": "string"}], "additionalItems": False},
            "mode": {"enum": ["a", "b"]},
            "choice": {"oneOf": [{"type": "integer"}, {"multipleOf": 2}], "not": {"type": "null"}},
        },
        "patternProperties": {"^x-": {"anyOf": [{"type": "string"}, {"type": "boolean"}]}},
        "additionalProperties": False,
        "dependencies": {"size": ["name"], "pair": {"minProperties": 3}},
        "maxProperties": 10,
    }

    DATA = [
        {"name": "a"},
        {},
        {"name": "", "size": -1, "tags": ["ok", "ok", "BAD", "x"], "extra": 1},
        {"name": "b", "size": 3, "tags": ["a"], "pair": [1, "x", None], "mode": "c"},
        {"name": "c", "choice": 4, "x-a": 1, "x-b": True, "pair": [1, "y"]},
        {"name": "d", "choice": 3.0, "x-c": "s", "mode": "a"},
        [],
        "string",
    ]

    def test_reported_pointers_are_enumerated(self, events, recorder):
        validator = Validator()
        validator.registry.add(self.TARGET["id"], self.TARGET)
        for data in self.DATA:
            validator.validate(self.TARGET["id"] + "#", data, instrument=recorder)
        reported = {pointer for _, pointer, _ in events}
        enumerated = set(enumerate_pointers(self.TARGET))
        assert reported
        assert reported <= enumerated

    def test_corpus_reaches_every_pointer(self):
        suites = [{"description": "all", "schema": {"$ref": self.TARGET["id"] + "#"}, "tests": [
            {"description": f"case {i}", "data": data, "valid": False} for i, data in enumerate(self.DATA)
        ]}]
        results = measure_coverage([self.TARGET], suites, [self.TARGET])
        rows = results[self.TARGET["id"]]
        assert [row.pointer for row in rows] == enumerate_pointers(self.TARGET)
        untouched = [row.pointer for row in rows if not (row.succeeded or row.failed)]
        assert untouched == []


class TestLedger:
    def test_polarities_accumulate(self):
        ledger = CoverageLedger()
        ledger("type", "s#/type", None)
        assert ledger.succeeded("s#/type")
        assert not ledger.failed("s#/type")
        ledger("type", "s#/type", KeywordError("type", "s#/type", "type failed"))
        ledger("type", "s#/type", None)
        assert ledger.succeeded("s#/type")
        assert ledger.failed("s#/type")

    def test_unknown_pointer(self):
        ledger = CoverageLedger()
        assert not ledger.succeeded("s#/type")
        assert not ledger.failed("s#/type")
        assert "s#/type" not in ledger
        assert len(ledger) == 0


class TestMeasureCoverage:
    TARGET = {"id": "t", "type": "integer", "minimum": 0, "maxLength": 3}

    def test_two_of_three_keywords_hit_passing_only(self):
        suites = [
            {
                "description": "integers",
                "schema": {"$ref": "t#"},
                "tests": [
                    {"description": "five", "data": 5, "valid": True},
                    {"description": "seven", "data": 7, "valid": True},
                ],
            }
        ]
        results = measure_coverage([self.TARGET], suites, [self.TARGET])
        assert list(results) == ["t"]
        assert results["t"] == [
            CoverageResult(id="t", pointer="t#/maxLength", succeeded=False, failed=False),
            CoverageResult(id="t", pointer="t#/minimum", succeeded=True, failed=False),
            CoverageResult(id="t", pointer="t#/type", succeeded=True, failed=False),
        ]

    def test_failing_cases_mark_failed(self):
        suites = [
            {
                "description": "mixed",
                "schema": {"$ref": "t#"},
                "tests": [
                    {"description": "ok", "data": 5, "valid": True},
                    {"description": "negative", "data": -1, "valid": False},
                    {"description": "long string", "data": "abcd", "valid": False},
                ],
            }
        ]
        rows = {row.pointer: row for row in measure_coverage([self.TARGET], suites, [self.TARGET])["t"]}
        assert rows["t#/minimum"].succeeded and rows["t#/minimum"].failed
        assert rows["t#/maxLength"].failed and not rows["t#/maxLength"].succeeded
        assert rows["t#/type"].succeeded and rows["t#/type"].failed

    def test_suite_subject_locations_are_not_target_pointers(self):
        target = {"id": "t", "type": "integer"}
        suites = [{"description": "inline", "schema": {"type": "integer"}, "tests": [{"description": "x", "data": 1, "valid": True}]}]
        rows = measure_coverage([target], suites, [target])["t"]
        assert rows == [CoverageResult(id="t", pointer="t#/type")]

    def test_targets_sorted_with_empty_id_first(self):
        targets = [{"id": "b", "type": "string"}, {"type": "string"}, {"id": "a", "type": "string"}]
        results = measure_coverage([], [], targets)
        assert list(results) == ["", "a", "b"]

    def test_target_without_keywords_has_no_rows(self):
        assert measure_coverage([], [], [{"id": "empty"}]) == {"empty": []}

    def test_duplicate_schema_ids_rejected(self):
        with pytest.raises(DuplicateSchemaError):
            measure_coverage([{"id": "d"}, {"id": "d#"}], [], [])

    def test_results_are_immutable(self):
        (row,) = measure_coverage([], [], [{"id": "t", "type": "string"}])["t"]
        with pytest.raises(dataclasses.FrozenInstanceError):
            row.succeeded = True  # type: ignore[misc]

    def test_deterministic(self):
        suites = [{"description": "s", "schema": {"$ref": "t#"}, "tests": [{"description": "x", "data": 1, "valid": True}]}]
        first = measure_coverage([self.TARGET], suites, [self.TARGET])
        second = measure_coverage([self.TARGET], suites, [self.TARGET])
        assert first == second

    def test_run_exposes_assertion_report(self):
        suites = [
            {
                "description": "wrong expectation",
                "schema": {"$ref": "t#"},
                "tests": [{"description": "x", "data": -5, "valid": True}],
            }
        ]
        run = run_coverage([self.TARGET], suites, [self.TARGET])
        assert run.report.total == 1
        assert [failure.description for failure in run.report.failures] == ["x"]
        assert "t#/minimum" in run.ledger
