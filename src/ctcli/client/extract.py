"""Pull single values out of JSON response bodies by a dotted path.

The appliance wraps its answers differently per endpoint: collections come
back under a ``resources`` array, created objects come back bare, some
operations nest result lists deeper. Rather than model every envelope, the
client primitives take a path string and let the caller say where the
interesting value lives.

Path syntax:

* ``a.b.c`` -- walk object keys; ``\\.`` escapes a literal dot in a key.
* ``resources.0.id`` -- an integer segment indexes into an array.
* ``resources.#`` -- ``#`` as the last segment yields the array length.
* ``resources.#.id`` -- ``#`` followed by more segments maps the rest of
  the path over every element, collecting the values that exist.

Rendering (:func:`render`) follows the conventions callers rely on: strings
come back unquoted, numbers and booleans as their JSON text, objects and
arrays as compact JSON text, and a missing value or ``null`` as ``""``.

The public functions are :func:`extract`, :func:`lookup`, and :func:`render`.
"""

from __future__ import annotations

import json
from typing import Any

from ctcli.exceptions import DecodingError

MISSING: Any = object()
"""Sentinel returned by :func:`lookup` when the path does not exist."""


def extract(body: bytes | str, path: str) -> str:
    """Return the value at *path* inside the JSON document *body*, rendered as text.

    Args:
        body: Raw response body. An empty or whitespace-only body yields ``""``
            (DELETE and some PATCH endpoints answer 204 with nothing).
        path: Dotted field path, see the module docstring.

    Returns:
        The rendered value, or ``""`` when the path does not exist.

    Raises:
        DecodingError: If *body* is non-empty and not valid JSON.

    Example::

        extract(b'{"resources":[{"id":"a"},{"id":"b"}]}', "resources")
        # '[{"id":"a"},{"id":"b"}]'
        extract(b'{"id":"xyz","name":"foo"}', "id")
        # 'xyz'
    """
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    if not body.strip():
        return ""
    try:
        document = json.loads(body)
    except json.JSONDecodeError as exc:
        raise DecodingError(f"Response body is not valid JSON ({exc}): {body[:200]}") from exc
    return render(lookup(document, path))


def lookup(document: Any, path: str) -> Any:
    """Walk *document* along *path* and return the Python value found there.

    Returns:
        The value, or :data:`MISSING` if any segment does not exist. An
        empty path also yields :data:`MISSING`.
    """
    segments = split_path(path)
    if not segments:
        return MISSING
    return _walk(document, segments)


def split_path(path: str) -> list[str]:
    """Split *path* on unescaped dots. ``"a\\.b.c"`` becomes ``["a.b", "c"]``."""
    if not path:
        return []
    segments: list[str] = []
    current: list[str] = []
    escaped = False
    for char in path:
        if escaped:
            current.append(char)
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == ".":
            segments.append("".join(current))
            current = []
        else:
            current.append(char)
    segments.append("".join(current))
    return segments


def render(value: Any) -> str:
    """Render an extracted value as text (see the module docstring for the rules)."""
    if value is MISSING or value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def _walk(node: Any, segments: list[str]) -> Any:
    if not segments:
        return node
    head, rest = segments[0], segments[1:]

    if isinstance(node, dict):
        if head not in node:
            return MISSING
        return _walk(node[head], rest)

    if isinstance(node, list):
        if head == "#":
            if not rest:
                return len(node)
            found = (_walk(item, rest) for item in node)
            return [value for value in found if value is not MISSING]
        if head.isdigit():
            index = int(head)
            if index >= len(node):
                return MISSING
            return _walk(node[index], rest)

    return MISSING
