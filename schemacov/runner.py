"""Run assertion suites through the validation engine."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from schemacov.config import Settings
from schemacov.engine import Instrument, Validator, format_errors
from schemacov.lib.log import get_logger, log_context
from schemacov.models import Suite, coerce_suites
from schemacov.registry import SchemaRegistry

logger = get_logger(__name__)


@dataclass(frozen=True)
class CaseOutcome:
    suite: str
    description: str
    expected: bool
    observed: bool
    source: str | None = None

    @property
    def passed(self) -> bool:
        return self.expected == self.observed


@dataclass
class SuiteReport:
    outcomes: list[CaseOutcome] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def failures(self) -> list[CaseOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.passed]

    @property
    def passed(self) -> bool:
        return not self.failures

    def summary(self) -> str:
        return f"{len(self.failures)}/{self.total} failed"


def build_validator(schemas: Iterable[Any], settings: Settings | None = None) -> Validator:
    """Fresh validator whose registry holds every schema carrying an ``id``.

    Raises:
        DuplicateSchemaError: If two schemas share an identifier.
    """
    settings = settings or Settings()
    registry = SchemaRegistry()
    for schema in schemas:
        if isinstance(schema, dict) and schema.get("id"):
            registry.add(schema["id"], schema)
    return Validator(registry, detect_ref_cycles=settings.detect_ref_cycles)


def run_suites(
    suites: Iterable[Suite | dict[str, Any]],
    schemas: Iterable[Any] = (),
    *,
    instrument: Instrument | None = None,
    settings: Settings | None = None,
) -> SuiteReport:
    """Validate every case of every suite, recording expected vs observed validity.

    A mismatch is recorded, never raised; reference errors abort the run.
    """
    settings = settings or Settings()
    validator = build_validator(schemas, settings)
    entry_ref = f"{settings.entry_alias}#"
    report = SuiteReport()

    for suite in coerce_suites(suites):
        validator.registry.put(settings.entry_alias, suite.subject)
        with log_context(suite=suite.description, source=suite.source):
            for case in suite.tests:
                result = validator.validate(entry_ref, case.data, instrument=instrument)
                outcome = CaseOutcome(
                    suite=suite.description,
                    description=case.description,
                    expected=case.valid,
                    observed=result.is_valid,
                    source=suite.source,
                )
                report.outcomes.append(outcome)
                if not outcome.passed:
                    logger.warning(
                        "Assertion mismatch",
                        test=case.description,
                        expected=case.valid,
                        observed=result.is_valid,
                    )
                    if result.errors:
                        logger.debug("Validation errors", details=format_errors(result.errors))

    return report
