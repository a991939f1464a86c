"""Schemacov error hierarchy.

All project exceptions inherit from SchemacovError, enabling:
- ``except SchemacovError`` at the top-level boundary (CLI)
- Fine-grained catches deeper in the stack (``except UnresolvedReferenceError``)

Hierarchy:
    SchemacovError
    ├── SchemaError
    │   ├── DuplicateSchemaError
    │   ├── UnresolvedReferenceError
    │   ├── ReferenceCycleError
    │   └── InvalidPatternError
    ├── MalformedInputError
    └── ConfigError

Keyword violations are not exceptions. They are returned as
``schemacov.engine.KeywordError`` values.
"""

from __future__ import annotations


class SchemacovError(Exception):
    """Base class for all Schemacov errors."""


class SchemaError(SchemacovError):
    """Base class for structural problems in a schema graph."""


class DuplicateSchemaError(SchemaError):
    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"schema id {identifier!r} already exists")


class UnresolvedReferenceError(SchemaError):
    def __init__(self, identifier: str, pointer: str = ""):
        self.identifier = identifier
        self.pointer = pointer
        super().__init__(f"cannot resolve {identifier}#{pointer}")


class ReferenceCycleError(SchemaError):
    """A $ref was re-entered with the same data before its first visit returned."""

    def __init__(self, ref: str):
        self.ref = ref
        super().__init__(f"$ref cycle detected at {ref}")


class InvalidPatternError(SchemaError):
    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        super().__init__(f"invalid pattern {pattern!r}: {reason}")


class MalformedInputError(SchemacovError):
    """A schema or suite document could not be parsed or has the wrong shape."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"failed to parse JSON in {source}: {reason}")


class ConfigError(SchemacovError):
    """Invalid configuration value."""
