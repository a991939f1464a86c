"""Declarative draft-4 keyword table.

Every keyword the validation engine understands is described here once:
which data kind it applies to, when it counts as present on a schema node,
which *sites* it owns (locations that receive an instrumentation event and
therefore are coverage pointers) and which *children* (sub-schema
locations) it descends into.

The engine (``schemacov.engine``) and the coverage enumerator
(``schemacov.coverage``) are both drivers over ``KEYWORDS``. The engine
evaluates a keyword only at the sites and children listed here, and the
enumerator emits exactly those sites and recurses into exactly those
children, so the two walks cannot drift apart.

Table order is evaluation order: ``$ref``, combinators, object, array,
string and number rules, then ``type`` and ``enum``.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

Schema = dict[str, Any]
Segments = tuple[str, ...]
Child = tuple[Segments, Schema]


@dataclass(frozen=True)
class Keyword:
    name: str
    kind: str | None
    """Data kind the keyword applies to (``object``, ``array``, ``string``,
    ``number``), or None for keywords evaluated against any value."""

    present: Callable[[Schema], bool]
    sites: Callable[[Schema], list[Segments]]
    children: Callable[[Schema], list[Child]]

    container: bool = False
    """Pure holder of sub-schemas that the engine never evaluates itself
    (``definitions``). Containers are walked even beside ``$ref``."""

    def applies_to(self, data_kind: str) -> bool:
        if self.kind is None:
            return True
        if self.kind == "number":
            return data_kind in ("integer", "number")
        return self.kind == data_kind


def _has(name: str) -> Callable[[Schema], bool]:
    return lambda schema: name in schema


def _own_site(name: str) -> Callable[[Schema], list[Segments]]:
    return lambda schema: [(name,)]


def _no_sites(schema: Schema) -> list[Segments]:
    return []


def _no_children(schema: Schema) -> list[Child]:
    return []


def _simple(name: str, kind: str | None) -> Keyword:
    """Keyword with a single site of its own and no sub-schemas."""
    return Keyword(name, kind, _has(name), _own_site(name), _no_children)


def _branches(name: str) -> Keyword:
    def children(schema: Schema) -> list[Child]:
        return [((name, str(i)), branch) for i, branch in enumerate(schema[name])]

    return Keyword(name, None, _has(name), _own_site(name), children)


def _keyed_children(name: str) -> Callable[[Schema], list[Child]]:
    def children(schema: Schema) -> list[Child]:
        return [((name, key), sub) for key, sub in schema[name].items()]

    return children


def _additional_properties_sites(schema: Schema) -> list[Segments]:
    return [("additionalProperties",)] if isinstance(schema["additionalProperties"], bool) else []


def _additional_properties_children(schema: Schema) -> list[Child]:
    value = schema["additionalProperties"]
    return [(("additionalProperties",), value)] if isinstance(value, dict) else []


def _dependency_sites(schema: Schema) -> list[Segments]:
    return [("dependencies", key) for key, value in schema["dependencies"].items() if isinstance(value, list)]


def _dependency_children(schema: Schema) -> list[Child]:
    return [(("dependencies", key), value) for key, value in schema["dependencies"].items() if isinstance(value, dict)]


def _items_children(schema: Schema) -> list[Child]:
    items = schema["items"]
    if isinstance(items, list):
        return [(("items", str(i)), sub) for i, sub in enumerate(items)]
    return [(("items",), items)]


def _additional_items_present(schema: Schema) -> bool:
    # Ignored unless "items" is positional.
    return "additionalItems" in schema and isinstance(schema.get("items"), list)


def _additional_items_children(schema: Schema) -> list[Child]:
    value = schema["additionalItems"]
    return [(("additionalItems",), value)] if isinstance(value, dict) else []


KEYWORDS: tuple[Keyword, ...] = (
    _simple("$ref", None),
    Keyword("definitions", None, _has("definitions"), _no_sites, _keyed_children("definitions"), container=True),
    _branches("allOf"),
    _branches("anyOf"),
    _branches("oneOf"),
    Keyword("not", None, _has("not"), _own_site("not"), lambda schema: [(("not",), schema["not"])]),
    # object
    Keyword("properties", "object", _has("properties"), _no_sites, _keyed_children("properties")),
    Keyword(
        "patternProperties",
        "object",
        _has("patternProperties"),
        lambda schema: [("patternProperties", pattern) for pattern in schema["patternProperties"]],
        _keyed_children("patternProperties"),
    ),
    Keyword(
        "additionalProperties",
        "object",
        _has("additionalProperties"),
        _additional_properties_sites,
        _additional_properties_children,
    ),
    _simple("maxProperties", "object"),
    _simple("minProperties", "object"),
    _simple("required", "object"),
    Keyword("dependencies", "object", _has("dependencies"), _dependency_sites, _dependency_children),
    # array
    Keyword("items", "array", _has("items"), _no_sites, _items_children),
    Keyword(
        "additionalItems",
        "array",
        _additional_items_present,
        _own_site("additionalItems"),
        _additional_items_children,
    ),
    Keyword("uniqueItems", "array", lambda schema: schema.get("uniqueItems") is True, _own_site("uniqueItems"), _no_children),
    _simple("maxItems", "array"),
    _simple("minItems", "array"),
    # string
    _simple("maxLength", "string"),
    _simple("minLength", "string"),
    _simple("pattern", "string"),
    # number; exclusiveMaximum/exclusiveMinimum only modify their partner
    _simple("multipleOf", "number"),
    _simple("maximum", "number"),
    _simple("minimum", "number"),
    _simple("type", None),
    _simple("enum", None),
)

KEYWORDS_BY_NAME: dict[str, Keyword] = {keyword.name: keyword for keyword in KEYWORDS}


def present_keywords(schema: Any) -> list[Keyword]:
    """Keywords present on a schema node, in evaluation order.

    A ``$ref`` node hides every sibling except containers, matching draft-4
    where the engine ignores keywords next to ``$ref``.
    """
    if not isinstance(schema, dict):
        return []
    present = [keyword for keyword in KEYWORDS if keyword.present(schema)]
    if "$ref" in schema:
        return [keyword for keyword in present if keyword.name == "$ref" or keyword.container]
    return present
