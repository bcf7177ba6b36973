"""Canonical JSON for feed signing.

The canonical payload is the only thing that gets hashed and signed, so two
implementations agree on a signature only if they agree on these bytes:
object keys sorted at every depth, arrays in order, no whitespace, and the
number/string formatting of JavaScript ``JSON.stringify`` (RFC 8785).
"""

from __future__ import annotations

import hashlib
import re
from typing import Any, cast

import jcs


_LONE_SURROGATE_RE = re.compile(r"[\ud800-\udfff]")


def _utf16_sort_key(key: str) -> bytes:
    # JS Array.prototype.sort() compares UTF-16 code units, not code points.
    return key.encode("utf-16-be", "surrogatepass")


def _escape_lone_surrogates(text: str) -> str:
    # Pair up adjacent surrogates first; whatever is left cannot be UTF-8 encoded.
    text = text.encode("utf-16-le", "surrogatepass").decode("utf-16-le", "surrogatepass")
    return _LONE_SURROGATE_RE.sub(lambda m: f"\\u{ord(m.group()):04x}", text)


def canonicalize(value: Any) -> Any:
    """Return ``value`` with every object's keys sorted, recursively.

    Primitives pass through unchanged, lists keep their element order.

    Example:
        >>> canonicalize({"b": 1, "a": {"d": [{"f": 1, "e": 2}], "c": None}})
        {'a': {'c': None, 'd': [{'e': 2, 'f': 1}]}, 'b': 1}
    """
    if isinstance(value, dict):
        return {key: canonicalize(value[key]) for key in sorted(value, key=_utf16_sort_key)}
    if isinstance(value, (list, tuple)):
        return [canonicalize(item) for item in value]
    return value


def canonical_json(value: Any) -> str:
    """Serialize ``value`` canonically with no insignificant whitespace."""
    text = cast(str, jcs.canonicalize(canonicalize(value), utf8=False))
    return _escape_lone_surrogates(text)


def sha256_hex(text: str) -> str:
    """SHA-256 of the UTF-8 bytes of ``text`` as 64 lowercase hex chars."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()
