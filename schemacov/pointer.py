"""JSON Pointer helpers and the immutable evaluation Context.

A Context names a position inside a registered schema document: the
document identifier plus the unescaped path segments leading to the node.
Both the validation engine and the coverage enumerator thread a Context
through their recursion and derive pointers such as ``s1#/properties/a/type``
from it, so the two walks name locations identically.
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urljoin, urlsplit


def escape_segment(segment: str) -> str:
    return segment.replace("~", "~0").replace("/", "~1")


def unescape_segment(segment: str) -> str:
    # Order matters: "~01" must decode to "~1", not "/".
    return segment.replace("~1", "/").replace("~0", "~")


def split_pointer(pointer: str) -> tuple[str, ...]:
    """Split a JSON Pointer fragment into raw segments; ``""`` is the root.

    Only ``%25`` is percent-decoded (to ``%``). Other escapes such as
    ``%2F`` stay literal parts of the key.
    """
    if not pointer:
        return ()
    decoded = pointer.replace("%25", "%")
    if decoded.startswith("/"):
        decoded = decoded[1:]
    return tuple(unescape_segment(part) for part in decoded.split("/"))


def join_pointer(segments: tuple[str, ...]) -> str:
    return "".join(f"/{escape_segment(segment)}" for segment in segments)


def normalize_id(identifier: str) -> str:
    """Registry key for a schema identifier: everything before the first ``#``."""
    return identifier.split("#", 1)[0]


def parse_ref(ref: str) -> tuple[str, str]:
    identifier, _, pointer = ref.partition("#")
    return identifier, pointer


@dataclass(frozen=True)
class Context:
    """Evaluation position: document id plus path segments (copy-on-descend)."""

    id: str
    path: tuple[str, ...] = ()

    @classmethod
    def from_ref(cls, ref: str) -> Context:
        identifier, pointer = parse_ref(ref)
        return cls(identifier, split_pointer(pointer))

    @property
    def pointer(self) -> str:
        return join_pointer(self.path)

    @property
    def ref(self) -> str:
        return f"{self.id}#{self.pointer}"

    def descend(self, *segments: str | int) -> Context:
        return Context(self.id, self.path + tuple(str(segment) for segment in segments))

    def follow(self, ref: str) -> Context:
        """Context addressed by a ``$ref`` value seen at this position.

        An empty identifier part keeps the active document; anything else is
        joined against the active document id when that id is an absolute URI.
        """
        identifier, pointer = parse_ref(ref)
        if identifier:
            if urlsplit(self.id).scheme:
                identifier = urljoin(self.id, identifier)
        else:
            identifier = self.id
        return Context(identifier, split_pointer(pointer))

    def __str__(self) -> str:
        return self.ref
