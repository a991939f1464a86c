"""Reporter protocol and per-target coverage summaries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from schemacov.coverage import CoverageResult, CoverageResultSet


class CoverageReporter(Protocol):
    """Protocol for coverage reporters.

    Reporters only consume an already computed CoverageResultSet and return
    the rendered document; writing it anywhere is the caller's business.
    """

    def render(self, results: CoverageResultSet) -> str:
        """Render the result set.

        Args:
            results: Mapping from target id to its ordered coverage rows

        Returns:
            The rendered report
        """
        ...


@dataclass(frozen=True)
class CoverageSummary:
    id: str
    total: int
    succeeded: int
    failed: int
    either: int
    both: int

    @classmethod
    def from_results(cls, identifier: str, results: list[CoverageResult]) -> CoverageSummary:
        return cls(
            id=identifier,
            total=len(results),
            succeeded=sum(1 for row in results if row.succeeded),
            failed=sum(1 for row in results if row.failed),
            either=sum(1 for row in results if row.succeeded or row.failed),
            both=sum(1 for row in results if row.succeeded and row.failed),
        )

    @property
    def rate(self) -> float:
        """Half credit for pointers hit one way, full credit for both ways."""
        if not self.total:
            return 0.0
        return (self.both + self.either) / 2 / self.total

    @property
    def success_coverage(self) -> float:
        return self.succeeded / self.total if self.total else 0.0

    @property
    def failure_coverage(self) -> float:
        return self.failed / self.total if self.total else 0.0


def summarize(results: CoverageResultSet) -> list[CoverageSummary]:
    return [CoverageSummary.from_results(identifier, rows) for identifier, rows in results.items()]
