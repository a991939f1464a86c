"""Document models for assertion suites."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from schemacov.errors import MalformedInputError


class TestCase(BaseModel):
    """One assertion: ``data`` is expected to be valid iff ``valid``."""

    __test__ = False  # not a pytest class

    description: str
    data: Any
    valid: bool


class Suite(BaseModel):
    """A subject schema plus the ordered cases asserted against it."""

    model_config = ConfigDict(populate_by_name=True)

    description: str
    subject: Any = Field(alias="schema")
    tests: list[TestCase] = Field(default_factory=list)
    source: str | None = Field(default=None, exclude=True)
    """File the suite was loaded from, when known."""


def parse_suites(raw: Any, source: str = "<memory>") -> list[Suite]:
    """Validate a decoded suite document (a JSON array of suites).

    Raises:
        MalformedInputError: If the document does not have the suite shape.
    """
    if not isinstance(raw, list):
        raise MalformedInputError(source, "suite document must be a JSON array")
    try:
        suites = [Suite.model_validate(item) for item in raw]
    except ValidationError as exc:
        raise MalformedInputError(source, str(exc)) from exc
    for suite in suites:
        suite.source = source
    return suites


def coerce_suites(suites: Iterable[Suite | dict[str, Any]]) -> list[Suite]:
    coerced: list[Suite] = []
    for suite in suites:
        if isinstance(suite, Suite):
            coerced.append(suite)
        else:
            coerced.extend(parse_suites([suite]))
    return coerced
