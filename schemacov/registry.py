"""Registry of named root schemas.

Usage::

    registry = SchemaRegistry()
    registry.add("http://example.com/root.json#", root_schema)
    registry.put("@entry", suite_schema)          # rebinding is allowed
    node = registry.resolve("http://example.com/root.json", "/definitions/a")
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from schemacov.errors import DuplicateSchemaError, UnresolvedReferenceError
from schemacov.lib.log import get_logger
from schemacov.pointer import Context, join_pointer, normalize_id, split_pointer

logger = get_logger(__name__)


class SchemaRegistry:
    """Mapping from schema identifier (trailing ``#`` stripped) to root schema."""

    def __init__(self) -> None:
        self._schemas: dict[str, Any] = {}

    def __contains__(self, identifier: str) -> bool:
        return normalize_id(identifier) in self._schemas

    def __len__(self) -> int:
        return len(self._schemas)

    def __iter__(self) -> Iterator[str]:
        return iter(self._schemas)

    # --- Write operations ---

    def add(self, identifier: str, schema: Any) -> None:
        """Insert a schema, refusing to replace an existing one.

        Raises:
            DuplicateSchemaError: If ``identifier`` is already registered.
        """
        if identifier in self:
            raise DuplicateSchemaError(normalize_id(identifier))
        self.put(identifier, schema)

    def put(self, identifier: str, schema: Any) -> None:
        """Insert or overwrite a schema unconditionally."""
        key = normalize_id(identifier)
        if key in self._schemas:
            logger.debug("Rebinding schema", id=key)
        else:
            logger.debug("Registering schema", id=key)
        self._schemas[key] = schema

    # --- Read operations ---

    def get(self, identifier: str) -> Any:
        key = normalize_id(identifier)
        try:
            return self._schemas[key]
        except KeyError:
            raise UnresolvedReferenceError(key) from None

    def resolve(self, identifier: str, pointer: str = "") -> Any:
        """Walk a JSON Pointer from the root schema stored under ``identifier``.

        Raises:
            UnresolvedReferenceError: If the id is unknown or the path is absent.
        """
        return self._walk(normalize_id(identifier), split_pointer(pointer))

    def lookup(self, context: Context) -> Any:
        """Schema node addressed by an evaluation context."""
        return self._walk(normalize_id(context.id), context.path)

    def _walk(self, key: str, segments: tuple[str, ...]) -> Any:
        node = self.get(key)
        for segment in segments:
            if isinstance(node, dict) and segment in node:
                node = node[segment]
            elif isinstance(node, list) and _is_index(segment, len(node)):
                node = node[int(segment)]
            else:
                raise UnresolvedReferenceError(key, join_pointer(segments))
        return node


def _is_index(segment: str, length: int) -> bool:
    # RFC 6901 array index: "0" or digits without a leading zero.
    if not (segment.isascii() and segment.isdigit()):
        return False
    if len(segment) > 1 and segment[0] == "0":
        return False
    return int(segment) < length

