"""Draft-4 validation engine with keyword instrumentation.

The engine walks a schema graph alongside a data value and collects one
``KeywordError`` per failing keyword. Keyword failures never stop sibling
keywords from being evaluated; only an unresolvable or cyclic ``$ref``
aborts the call, by raising.

Usage::

    validator = Validator()
    validator.registry.add("s1", {"id": "s1", "type": "object"})
    result = validator.validate("s1#", {"a": 1})

    events = []
    validator.validate("s1#", [], instrument=lambda kw, ptr, err: events.append((kw, ptr, err)))

The instrument is passed per call, so a Validator can be reused without
carrying state from one run into the next.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Optional

from schemacov.equality import code_point_length, detect_kind, is_multiple_of, json_equal
from schemacov.errors import ReferenceCycleError
from schemacov.keywords import Keyword, Schema, present_keywords
from schemacov.patterns import compile_pattern
from schemacov.pointer import Context, normalize_id
from schemacov.registry import SchemaRegistry


@dataclass
class KeywordError:
    """A single keyword mismatch, carried as data rather than raised."""

    keyword: str
    pointer: str
    """Fully qualified location of the failing keyword, ``{id}#{pointer}``."""

    message: str
    children: list[list[KeywordError]] = field(default_factory=list)
    """Errors of failing sub-schema evaluations (one list per branch/element)."""


Instrument = Callable[[str, str, Optional[KeywordError]], None]
"""Observer invoked once per evaluated keyword site: (keyword, pointer, error-or-None)."""


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    errors: list[KeywordError] = field(default_factory=list)


def format_errors(errors: list[KeywordError]) -> str:
    lines: list[str] = []
    for error in errors:
        lines.append(f"error: {error.message} ({error.pointer})")
        for branch in error.children:
            for child in branch:
                lines.append(f"- {child.message} ({child.pointer})")
    return "\n".join(lines)


class Validator:
    """Validates data against schemas held in a SchemaRegistry."""

    def __init__(self, registry: SchemaRegistry | None = None, *, detect_ref_cycles: bool = True):
        self.registry = registry if registry is not None else SchemaRegistry()
        self.detect_ref_cycles = detect_ref_cycles

    def validate(self, ref: str, data: Any, *, instrument: Instrument | None = None) -> ValidationResult:
        """Validate ``data`` against the schema addressed by ``ref`` (``"id#pointer"``).

        Raises:
            UnresolvedReferenceError: If ``ref`` or any ``$ref`` reached cannot be resolved.
            ReferenceCycleError: If a ``$ref`` chain loops without consuming data.
        """
        context = Context.from_ref(ref)
        context = Context(normalize_id(context.id), context.path)
        schema = self.registry.lookup(context)
        evaluation = _Evaluation(self.registry, instrument, self.detect_ref_cycles)
        errors = evaluation.node(context, schema, data)
        return ValidationResult(is_valid=not errors, errors=errors)


class _Evaluation:
    """State owned by a single ``Validator.validate`` call."""

    def __init__(self, registry: SchemaRegistry, instrument: Instrument | None, detect_ref_cycles: bool):
        self.registry = registry
        self.instrument = instrument
        self.detect_ref_cycles = detect_ref_cycles
        self._active_refs: set[tuple[str, int]] = set()

    def node(self, context: Context, schema: Any, data: Any) -> list[KeywordError]:
        kind = detect_kind(data)
        errors: list[KeywordError] = []
        for keyword in present_keywords(schema):
            if keyword.container or not keyword.applies_to(kind):
                continue
            errors.extend(_CHECKS[keyword.name](self, keyword, context, schema, data))
        return errors

    def report(self, keyword: str, site: Context, error: KeywordError | None) -> list[KeywordError]:
        if self.instrument is not None:
            self.instrument(keyword, site.ref, error)
        return [error] if error is not None else []

    def enter_ref(self, target: Context, data: Any) -> tuple[str, int]:
        key = (target.ref, id(data))
        if self.detect_ref_cycles and key in self._active_refs:
            raise ReferenceCycleError(target.ref)
        self._active_refs.add(key)
        return key

    def leave_ref(self, key: tuple[str, int]) -> None:
        self._active_refs.discard(key)


Check = Callable[[_Evaluation, Keyword, Context, Schema, Any], list[KeywordError]]


def _fail(keyword: str, site: Context, message: str, children: list[list[KeywordError]] | None = None) -> KeywordError:
    return KeywordError(keyword, site.ref, message, children or [])


# --- $ref and combinators ---


def _check_ref(ev: _Evaluation, keyword: Keyword, ctx: Context, schema: Schema, data: Any) -> list[KeywordError]:
    site = ctx.descend("$ref")
    target = ctx.follow(schema["$ref"])
    resolved = ev.registry.lookup(target)
    key = ev.enter_ref(target, data)
    try:
        errors = ev.node(target, resolved, data)
    finally:
        ev.leave_ref(key)
    error = _fail("$ref", site, f"$ref {schema['$ref']} failed", [errors]) if errors else None
    return ev.report("$ref", site, error)


def _check_all_of(ev: _Evaluation, keyword: Keyword, ctx: Context, schema: Schema, data: Any) -> list[KeywordError]:
    failures = []
    for segments, branch in keyword.children(schema):
        errors = ev.node(ctx.descend(*segments), branch, data)
        if errors:
            failures.append(errors)
    site = ctx.descend("allOf")
    return ev.report("allOf", site, _fail("allOf", site, "allOf failed", failures) if failures else None)


def _check_any_of(ev: _Evaluation, keyword: Keyword, ctx: Context, schema: Schema, data: Any) -> list[KeywordError]:
    failures = []
    passed = False
    for segments, branch in keyword.children(schema):
        errors = ev.node(ctx.descend(*segments), branch, data)
        if not errors:
            passed = True
            break
        failures.append(errors)
    site = ctx.descend("anyOf")
    return ev.report("anyOf", site, None if passed else _fail("anyOf", site, "anyOf failed", failures))


def _check_one_of(ev: _Evaluation, keyword: Keyword, ctx: Context, schema: Schema, data: Any) -> list[KeywordError]:
    failures = []
    passed = 0
    for segments, branch in keyword.children(schema):
        errors = ev.node(ctx.descend(*segments), branch, data)
        if errors:
            failures.append(errors)
        else:
            passed += 1
    site = ctx.descend("oneOf")
    error = None if passed == 1 else _fail("oneOf", site, f"oneOf failed, {passed} passed", failures)
    return ev.report("oneOf", site, error)


def _check_not(ev: _Evaluation, keyword: Keyword, ctx: Context, schema: Schema, data: Any) -> list[KeywordError]:
    ((segments, negated),) = keyword.children(schema)
    errors = ev.node(ctx.descend(*segments), negated, data)
    site = ctx.descend("not")
    return ev.report("not", site, None if errors else _fail("not", site, "not failed"))


# --- object ---


def _check_properties(ev: _Evaluation, keyword: Keyword, ctx: Context, schema: Schema, data: dict) -> list[KeywordError]:
    found = []
    for segments, sub in keyword.children(schema):
        key = segments[-1]
        if key not in data:
            continue
        location = ctx.descend(*segments)
        errors = ev.node(location, sub, data[key])
        if errors:
            found.append(_fail("properties", location, f'properties "{key}" failed', [errors]))
    return found


def _check_pattern_properties(
    ev: _Evaluation, keyword: Keyword, ctx: Context, schema: Schema, data: dict
) -> list[KeywordError]:
    found = []
    for segments, sub in keyword.children(schema):
        pattern = segments[-1]
        regex = compile_pattern(pattern)
        site = ctx.descend(*segments)
        for key, value in data.items():
            if not regex.search(key):
                continue
            errors = ev.node(site, sub, value)
            error = _fail("patternProperties", site, f'patternProperties "{pattern}" failed for "{key}"', [errors]) if errors else None
            found.extend(ev.report("patternProperties", site, error))
    return found


def _unmatched_keys(schema: Schema, data: dict) -> list[str]:
    declared = schema.get("properties", {})
    patterns = [compile_pattern(pattern) for pattern in schema.get("patternProperties", {})]
    return [key for key in data if key not in declared and not any(regex.search(key) for regex in patterns)]


def _check_additional_properties(
    ev: _Evaluation, keyword: Keyword, ctx: Context, schema: Schema, data: dict
) -> list[KeywordError]:
    extras = _unmatched_keys(schema, data)
    found = []
    for segments in keyword.sites(schema):
        site = ctx.descend(*segments)
        allowed = schema["additionalProperties"]
        error = None
        if not allowed and extras:
            names = ", ".join(f'"{key}"' for key in extras)
            error = _fail("additionalProperties", site, f"additionalProperties failed: {names} not allowed")
        found.extend(ev.report("additionalProperties", site, error))
    for segments, sub in keyword.children(schema):
        location = ctx.descend(*segments)
        for key in extras:
            errors = ev.node(location, sub, data[key])
            if errors:
                found.append(_fail("additionalProperties", location, f'additionalProperties "{key}" failed', [errors]))
    return found


def _check_max_properties(ev: _Evaluation, keyword: Keyword, ctx: Context, schema: Schema, data: dict) -> list[KeywordError]:
    site = ctx.descend("maxProperties")
    limit = schema["maxProperties"]
    error = _fail("maxProperties", site, f'maxProperties "{limit}" failed') if len(data) > limit else None
    return ev.report("maxProperties", site, error)


def _check_min_properties(ev: _Evaluation, keyword: Keyword, ctx: Context, schema: Schema, data: dict) -> list[KeywordError]:
    site = ctx.descend("minProperties")
    limit = schema["minProperties"]
    error = _fail("minProperties", site, f'minProperties "{limit}" failed') if len(data) < limit else None
    return ev.report("minProperties", site, error)


def _check_required(ev: _Evaluation, keyword: Keyword, ctx: Context, schema: Schema, data: dict) -> list[KeywordError]:
    site = ctx.descend("required")
    missing = [key for key in schema["required"] if key not in data]
    error = None
    if missing:
        error = _fail("required", site, "required " + ", ".join(f'"{key}"' for key in missing) + " failed")
    return ev.report("required", site, error)


def _check_dependencies(ev: _Evaluation, keyword: Keyword, ctx: Context, schema: Schema, data: dict) -> list[KeywordError]:
    found = []
    dependencies = schema["dependencies"]
    for segments in keyword.sites(schema):
        key = segments[-1]
        if key not in data:
            continue
        site = ctx.descend(*segments)
        missing = [name for name in dependencies[key] if name not in data]
        error = None
        if missing:
            names = ", ".join(f'"{name}"' for name in missing)
            error = _fail("dependencies", site, f'dependencies "{key}" failed: {names} missing')
        found.extend(ev.report("dependencies", site, error))
    for segments, sub in keyword.children(schema):
        key = segments[-1]
        if key not in data:
            continue
        location = ctx.descend(*segments)
        errors = ev.node(location, sub, data)
        if errors:
            found.append(_fail("dependencies", location, f'dependencies "{key}" failed', [errors]))
    return found


# --- array ---


def _check_items(ev: _Evaluation, keyword: Keyword, ctx: Context, schema: Schema, data: list) -> list[KeywordError]:
    found = []
    children = keyword.children(schema)
    if isinstance(schema["items"], list):
        pairs = zip(children, data)
    else:
        ((segments, sub),) = children
        pairs = (((segments, sub), value) for value in data)
    for index, ((segments, sub), value) in enumerate(pairs):
        location = ctx.descend(*segments)
        errors = ev.node(location, sub, value)
        if errors:
            found.append(_fail("items", location, f"items failed at index {index}", [errors]))
    return found


def _check_additional_items(
    ev: _Evaluation, keyword: Keyword, ctx: Context, schema: Schema, data: list
) -> list[KeywordError]:
    site = ctx.descend("additionalItems")
    extras = data[len(schema["items"]):]
    allowed = schema["additionalItems"]
    error = None
    if allowed is False and extras:
        error = _fail("additionalItems", site, f"additionalItems failed: {len(extras)} extra item(s)")
    failures = []
    for segments, sub in keyword.children(schema):
        for value in extras:
            errors = ev.node(ctx.descend(*segments), sub, value)
            if errors:
                failures.append(errors)
    if failures:
        error = _fail("additionalItems", site, "additionalItems failed", failures)
    return ev.report("additionalItems", site, error)


def _check_unique_items(ev: _Evaluation, keyword: Keyword, ctx: Context, schema: Schema, data: list) -> list[KeywordError]:
    site = ctx.descend("uniqueItems")
    duplicate = any(json_equal(data[i], data[j]) for i in range(len(data)) for j in range(i + 1, len(data)))
    return ev.report("uniqueItems", site, _fail("uniqueItems", site, "uniqueItems failed") if duplicate else None)


def _check_max_items(ev: _Evaluation, keyword: Keyword, ctx: Context, schema: Schema, data: list) -> list[KeywordError]:
    site = ctx.descend("maxItems")
    limit = schema["maxItems"]
    return ev.report("maxItems", site, _fail("maxItems", site, f'maxItems "{limit}" failed') if len(data) > limit else None)


def _check_min_items(ev: _Evaluation, keyword: Keyword, ctx: Context, schema: Schema, data: list) -> list[KeywordError]:
    site = ctx.descend("minItems")
    limit = schema["minItems"]
    return ev.report("minItems", site, _fail("minItems", site, f'minItems "{limit}" failed') if len(data) < limit else None)


# --- string ---


def _check_max_length(ev: _Evaluation, keyword: Keyword, ctx: Context, schema: Schema, data: str) -> list[KeywordError]:
    site = ctx.descend("maxLength")
    limit = schema["maxLength"]
    too_long = code_point_length(data) > limit
    return ev.report("maxLength", site, _fail("maxLength", site, f'maxLength "{limit}" failed') if too_long else None)


def _check_min_length(ev: _Evaluation, keyword: Keyword, ctx: Context, schema: Schema, data: str) -> list[KeywordError]:
    site = ctx.descend("minLength")
    limit = schema["minLength"]
    too_short = code_point_length(data) < limit
    return ev.report("minLength", site, _fail("minLength", site, f'minLength "{limit}" failed') if too_short else None)


def _check_pattern(ev: _Evaluation, keyword: Keyword, ctx: Context, schema: Schema, data: str) -> list[KeywordError]:
    site = ctx.descend("pattern")
    pattern = schema["pattern"]
    matched = compile_pattern(pattern).search(data) is not None
    return ev.report("pattern", site, None if matched else _fail("pattern", site, f'pattern "{pattern}" failed'))


# --- number ---


def _check_multiple_of(ev: _Evaluation, keyword: Keyword, ctx: Context, schema: Schema, data: float) -> list[KeywordError]:
    site = ctx.descend("multipleOf")
    divisor = schema["multipleOf"]
    ok = is_multiple_of(data, divisor)
    return ev.report("multipleOf", site, None if ok else _fail("multipleOf", site, f'multipleOf "{divisor}" failed'))


def _check_maximum(ev: _Evaluation, keyword: Keyword, ctx: Context, schema: Schema, data: float) -> list[KeywordError]:
    site = ctx.descend("maximum")
    limit = schema["maximum"]
    error = None
    if schema.get("exclusiveMaximum", False):
        if data >= limit:
            error = _fail("maximum", site, f'exclusive maximum "{limit}" failed')
    elif data > limit:
        error = _fail("maximum", site, f'maximum "{limit}" failed')
    return ev.report("maximum", site, error)


def _check_minimum(ev: _Evaluation, keyword: Keyword, ctx: Context, schema: Schema, data: float) -> list[KeywordError]:
    site = ctx.descend("minimum")
    limit = schema["minimum"]
    error = None
    if schema.get("exclusiveMinimum", False):
        if data <= limit:
            error = _fail("minimum", site, f'exclusive minimum "{limit}" failed')
    elif data < limit:
        error = _fail("minimum", site, f'minimum "{limit}" failed')
    return ev.report("minimum", site, error)


# --- any kind ---


def type_matches(types: list[str], data: Any) -> bool:
    kind = detect_kind(data)
    return kind in types or (kind == "integer" and "number" in types)


def _check_type(ev: _Evaluation, keyword: Keyword, ctx: Context, schema: Schema, data: Any) -> list[KeywordError]:
    site = ctx.descend("type")
    declared = schema["type"]
    types = declared if isinstance(declared, list) else [declared]
    ok = type_matches(types, data)
    return ev.report("type", site, None if ok else _fail("type", site, f"type {','.join(types)} failed"))


def _check_enum(ev: _Evaluation, keyword: Keyword, ctx: Context, schema: Schema, data: Any) -> list[KeywordError]:
    site = ctx.descend("enum")
    ok = any(json_equal(candidate, data) for candidate in schema["enum"])
    return ev.report("enum", site, None if ok else _fail("enum", site, "enum failed"))


_CHECKS: dict[str, Check] = {
    "$ref": _check_ref,
    "allOf": _check_all_of,
    "anyOf": _check_any_of,
    "oneOf": _check_one_of,
    "not": _check_not,
    "properties": _check_properties,
    "patternProperties": _check_pattern_properties,
    "additionalProperties": _check_additional_properties,
    "maxProperties": _check_max_properties,
    "minProperties": _check_min_properties,
    "required": _check_required,
    "dependencies": _check_dependencies,
    "items": _check_items,
    "additionalItems": _check_additional_items,
    "uniqueItems": _check_unique_items,
    "maxItems": _check_max_items,
    "minItems": _check_min_items,
    "maxLength": _check_max_length,
    "minLength": _check_min_length,
    "pattern": _check_pattern,
    "multipleOf": _check_multiple_of,
    "maximum": _check_maximum,
    "minimum": _check_minimum,
    "type": _check_type,
    "enum": _check_enum,
}
