"""ECMA-262 regular expressions on top of the ``re`` module.

Draft-4 ``pattern`` and ``patternProperties`` use the ECMA dialect (no
flags, Annex B syntax). ``translate_pattern`` rewrites the constructs whose
meaning differs in Python and the result is compiled with ``re.ASCII``,
which already gives ``\\d``, ``\\w`` and ``\\b`` their ECMA meaning:

- ``$`` matches only at the very end of the input, never before a final ``\\n``
- ``.`` excludes every ECMA line terminator, not just ``\\n``
- ``\\s``/``\\S`` use the ECMA white space set, which includes Unicode spaces
- ``[]`` matches nothing and ``[^]`` matches anything
- an escaped letter with no special meaning (``\\p``, ``\\q``) is that letter
- ``(?<name>...)`` and ``\\k<name>`` are named groups and backreferences

Strings are still matched per code point, not per UTF-16 code unit.
"""

from __future__ import annotations

import re
from functools import lru_cache

from schemacov.errors import InvalidPatternError

# ECMA WhiteSpace and LineTerminator beyond what re.ASCII's \s covers.
_EXTRA_SPACE = "\\u00a0\\u1680\\u2000-\\u200a\\u2028\\u2029\\u202f\\u205f\\u3000\\ufeff"
_SPACE_SET = "\\s" + _EXTRA_SPACE
_ANY_BUT_NEWLINE = "[^\\n\\r\\u2028\\u2029]"

# Escapes re understands exactly as ECMA does (classes are ASCII under re.ASCII).
_SHARED_ESCAPES = frozenset("dDwWbBtnvfr")
_HEX = frozenset("0123456789abcdefABCDEF")


def _hex_run(pattern: str, start: int, length: int) -> bool:
    chunk = pattern[start : start + length]
    return len(chunk) == length and all(ch in _HEX for ch in chunk)


def _escape(pattern: str, i: int, in_class: bool) -> tuple[str, int, bool]:
    """Translate the escape starting at ``pattern[i] == "\\\\"``.

    Returns the replacement, the index after the escape, and whether the
    escape was ``\\S`` inside a class (which needs class-level rewriting).
    """
    if i + 1 >= len(pattern):
        raise re.error("\\ at end of pattern", pattern, i)
    ch = pattern[i + 1]
    end = i + 2
    if in_class and ch in "B89":
        return ch, end, False
    if ch in _SHARED_ESCAPES:
        return "\\" + ch, end, False
    if ch == "s":
        return (_SPACE_SET if in_class else f"[{_SPACE_SET}]"), end, False
    if ch == "S":
        if in_class:
            return "", end, True
        return f"[^{_SPACE_SET}]", end, False
    if ch == "x":
        return ("\\x" + pattern[end : end + 2], end + 2, False) if _hex_run(pattern, end, 2) else ("x", end, False)
    if ch == "u":
        return ("\\u" + pattern[end : end + 4], end + 4, False) if _hex_run(pattern, end, 4) else ("u", end, False)
    if ch == "c":
        if end < len(pattern) and pattern[end].isascii() and pattern[end].isalpha():
            return re.escape(chr(ord(pattern[end]) % 32)), end + 1, False
        return "\\\\c", end, False
    if ch == "k" and not in_class and pattern.startswith("<", end):
        close = pattern.find(">", end)
        if close > end + 1:
            return f"(?P={pattern[end + 1 : close]})", close + 1, False
        return "k", end, False
    if ch.isdigit():
        if ch == "0" and not (end < len(pattern) and pattern[end].isdigit()):
            return "\\x00", end, False
        return "\\" + ch, end, False
    if ch.isascii() and ch.isalpha():
        # Annex B identity escape: "\p" is just "p".
        return ch, end, False
    return re.escape(ch), end, False


def _character_class(pattern: str, i: int) -> tuple[str, int]:
    """Translate the class opening at ``pattern[i] == "["``."""
    start = i
    i += 1
    negated = pattern.startswith("^", i)
    if negated:
        i += 1
    parts: list[str] = []
    non_space = False
    # In ECMA the first unescaped "]" always closes the class.
    while i < len(pattern) and pattern[i] != "]":
        ch = pattern[i]
        if ch == "\\":
            escaped = pattern[i + 1 : i + 2]
            text, i, is_non_space = _escape(pattern, i, in_class=True)
            non_space = non_space or is_non_space
            parts.append(text)
            if escaped in "dDwWsS" and pattern.startswith("-", i):
                # A class escape cannot start a range; the hyphen is literal.
                parts.append("\\-")
                i += 1
            continue
        parts.append("\\" + ch if ch in "[&~|^" else ch)
        i += 1
    if i >= len(pattern):
        raise re.error("unterminated character set", pattern, start)
    body = "".join(parts)
    end = i + 1

    if non_space:
        if negated:
            # Not in body and not non-space: a space char outside body.
            return (f"(?:(?![{body}])[{_SPACE_SET}])" if body else f"[{_SPACE_SET}]"), end
        return (f"(?:[{body}]|[^{_SPACE_SET}])" if body else f"[^{_SPACE_SET}]"), end
    if not body:
        return ("[\\s\\S]" if negated else "(?!)"), end
    return f"[{'^' if negated else ''}{body}]", end


def translate_pattern(pattern: str) -> str:
    """Rewrite an ECMA-262 pattern into ``re`` syntax (compile with ``re.ASCII``).

    Raises:
        re.error: On a trailing backslash or an unterminated class.
    """
    out: list[str] = []
    i = 0
    while i < len(pattern):
        ch = pattern[i]
        if ch == "\\":
            text, i, _ = _escape(pattern, i, in_class=False)
            out.append(text)
        elif ch == "[":
            text, i = _character_class(pattern, i)
            out.append(text)
        elif ch == "$":
            out.append("\\Z")
            i += 1
        elif ch == ".":
            out.append(_ANY_BUT_NEWLINE)
            i += 1
        elif pattern.startswith("(?<", i) and not pattern.startswith(("(?<=", "(?<!"), i):
            out.append("(?P<")
            i += 3
        else:
            out.append(ch)
            i += 1
    return "".join(out)


@lru_cache(maxsize=512)
def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile an ECMA-262 pattern for ``search``-style matching.

    Raises:
        InvalidPatternError: If the pattern is not a valid regular expression.
    """
    try:
        return re.compile(translate_pattern(pattern), re.ASCII)
    except re.error as exc:
        raise InvalidPatternError(pattern, str(exc)) from exc
