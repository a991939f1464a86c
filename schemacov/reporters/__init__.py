"""Reporter factory and implementations."""

from __future__ import annotations

from schemacov.config import Settings
from schemacov.errors import ConfigError

from .base import CoverageReporter, CoverageSummary, summarize
from .cli import CliReporter
from .html import HtmlReporter
from .json import JsonReporter

REPORTER_KINDS = ("cli", "html", "json")


def create_reporter(kind: str, settings: Settings | None = None) -> CoverageReporter:
    """Create a reporter for the requested output kind.

    Raises:
        ConfigError: If ``kind`` is not supported
    """
    kind_lower = kind.lower()
    if kind_lower == "cli":
        return CliReporter()
    if kind_lower == "html":
        template_path = settings.html_template if settings is not None else None
        return HtmlReporter(template_path=template_path)
    if kind_lower == "json":
        return JsonReporter()
    raise ConfigError(f"Unsupported reporter: {kind}. Supported reporters: {', '.join(REPORTER_KINDS)}")


__all__ = [
    "CliReporter",
    "CoverageReporter",
    "CoverageSummary",
    "HtmlReporter",
    "JsonReporter",
    "REPORTER_KINDS",
    "create_reporter",
    "summarize",
]
