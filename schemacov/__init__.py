"""Schemacov - conformance and coverage tooling for JSON Schema draft-4.

Example:
    from schemacov import Validator, measure_coverage

    validator = Validator()
    validator.registry.add("s1", schema)
    validator.validate("s1#", {"a": 1}).is_valid

    results = measure_coverage(schemas, suites, targets)
    for identifier, rows in results.items():
        print(identifier, sum(row.succeeded and row.failed for row in rows), "/", len(rows))
"""

from schemacov.coverage import (
    CoverageLedger,
    CoverageResult,
    CoverageResultSet,
    CoverageRun,
    enumerate_pointers,
    measure_coverage,
    run_coverage,
)
from schemacov.engine import KeywordError, ValidationResult, Validator
from schemacov.errors import (
    ConfigError,
    DuplicateSchemaError,
    InvalidPatternError,
    MalformedInputError,
    ReferenceCycleError,
    SchemacovError,
    SchemaError,
    UnresolvedReferenceError,
)
from schemacov.models import Suite, TestCase
from schemacov.registry import SchemaRegistry
from schemacov.runner import CaseOutcome, SuiteReport, run_suites

__version__ = "0.1.0"

__all__ = [
    "CaseOutcome",
    "ConfigError",
    "CoverageLedger",
    "CoverageResult",
    "CoverageResultSet",
    "CoverageRun",
    "DuplicateSchemaError",
    "InvalidPatternError",
    "KeywordError",
    "MalformedInputError",
    "ReferenceCycleError",
    "SchemaError",
    "SchemaRegistry",
    "SchemacovError",
    "Suite",
    "SuiteReport",
    "TestCase",
    "UnresolvedReferenceError",
    "ValidationResult",
    "Validator",
    "enumerate_pointers",
    "measure_coverage",
    "run_coverage",
    "run_suites",
]
