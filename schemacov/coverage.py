"""Keyword coverage of target schemas by a corpus of assertion suites.

Coverage is measured per *pointer*: one keyword site inside one target
schema, e.g. ``http://example.com/s.json#/properties/a/type``. A pointer is
"succeeded" when some case evaluated it and it passed, and "failed" when
some case evaluated it and it failed. A thorough corpus drives every
pointer both ways.

Usage::

    results = measure_coverage(schemas, suites, targets)
    for identifier, rows in results.items():
        missing = [row.pointer for row in rows if not (row.succeeded or row.failed)]
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import asdict, dataclass, field
from typing import Any

from schemacov.config import Settings
from schemacov.engine import KeywordError
from schemacov.keywords import present_keywords
from schemacov.lib.log import get_logger
from schemacov.models import Suite
from schemacov.pointer import Context, normalize_id
from schemacov.runner import SuiteReport, run_suites

logger = get_logger(__name__)


# --- Enumeration ---


def schema_identifier(schema: Any) -> str:
    if isinstance(schema, dict) and isinstance(schema.get("id"), str):
        return normalize_id(schema["id"])
    return ""


def enumerate_pointers(schema: Any) -> list[str]:
    """Every keyword site of ``schema``, in evaluation order.

    Pure function of the schema: no data is involved and ``$ref`` targets are
    not followed (they are enumerated as part of their own document).
    """
    return list(_walk(Context(schema_identifier(schema)), schema))


def _walk(context: Context, schema: Any) -> Iterator[str]:
    for keyword in present_keywords(schema):
        for segments in keyword.sites(schema):
            yield context.descend(*segments).ref
        for segments, child in keyword.children(schema):
            yield from _walk(context.descend(*segments), child)


# --- Ledger ---


class CoverageLedger:
    """Instrument that remembers the outcome polarities seen per pointer.

    Flags only ever go from unset to set, so recording more events can never
    remove an observation.
    """

    def __init__(self) -> None:
        self._seen: dict[str, set[bool]] = {}

    def __call__(self, keyword: str, pointer: str, error: KeywordError | None) -> None:
        self.record(keyword, pointer, error)

    def __len__(self) -> int:
        return len(self._seen)

    def __contains__(self, pointer: str) -> bool:
        return pointer in self._seen

    def record(self, keyword: str, pointer: str, error: KeywordError | None) -> None:
        self._seen.setdefault(pointer, set()).add(error is None)

    def succeeded(self, pointer: str) -> bool:
        return True in self._seen.get(pointer, ())

    def failed(self, pointer: str) -> bool:
        return False in self._seen.get(pointer, ())


# --- Aggregation ---


@dataclass(frozen=True)
class CoverageResult:
    id: str
    pointer: str
    succeeded: bool = False
    failed: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


CoverageResultSet = dict[str, list[CoverageResult]]


@dataclass
class CoverageRun:
    results: CoverageResultSet
    report: SuiteReport
    ledger: CoverageLedger = field(repr=False)


def _target_sort_key(schema: Any) -> str:
    if isinstance(schema, dict) and isinstance(schema.get("id"), str):
        return schema["id"]
    return ""


def collect_results(targets: Iterable[Any], ledger: CoverageLedger) -> CoverageResultSet:
    """Join a ledger against the enumerated pointers of each target.

    Targets are ordered by identifier (missing id sorts first); rows keep
    enumeration order.
    """
    results: CoverageResultSet = {}
    for target in sorted(targets, key=_target_sort_key):
        identifier = schema_identifier(target)
        rows = results.setdefault(identifier, [])
        for pointer in enumerate_pointers(target):
            rows.append(
                CoverageResult(
                    id=identifier,
                    pointer=pointer,
                    succeeded=ledger.succeeded(pointer),
                    failed=ledger.failed(pointer),
                )
            )
    return results


def run_coverage(
    schemas: Iterable[Any],
    suites: Iterable[Suite | dict[str, Any]],
    targets: Iterable[Any],
    *,
    settings: Settings | None = None,
) -> CoverageRun:
    """Run all suites with a coverage ledger attached, then aggregate per target."""
    ledger = CoverageLedger()
    report = run_suites(suites, list(schemas), instrument=ledger, settings=settings)
    targets = list(targets)
    results = collect_results(targets, ledger)
    logger.info(
        "Coverage measured",
        tests=report.total,
        mismatches=len(report.failures),
        targets=len(targets),
        pointers=sum(len(rows) for rows in results.values()),
    )
    return CoverageRun(results=results, report=report, ledger=ledger)


def measure_coverage(
    schemas: Iterable[Any],
    suites: Iterable[Suite | dict[str, Any]],
    targets: Iterable[Any],
    *,
    settings: Settings | None = None,
) -> CoverageResultSet:
    return run_coverage(schemas, suites, targets, settings=settings).results
