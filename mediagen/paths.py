"""Ordered path lookups into loosely shaped provider JSON.

A path is a tuple of steps. A ``str`` step indexes a mapping, an ``int``
step indexes a list, and ``PARSE_JSON`` decodes a JSON-encoded string
field (or passes an already decoded object through). Any miss yields
``None`` instead of raising, so a list of paths can be tried in order.
"""

from __future__ import annotations

import json
from typing import Any, Iterable, Mapping, Sequence, Union


class _ParseJson:
    def __repr__(self) -> str:
        return "PARSE_JSON"


PARSE_JSON = _ParseJson()

Step = Union[str, int, _ParseJson]


def lookup(payload: Any, path: Sequence[Step]) -> Any:
    """Follow ``path`` into ``payload`` and return the value, or None."""
    node = payload
    for step in path:
        if node is None:
            return None
        if step is PARSE_JSON:
            node = _decode(node)
        elif isinstance(step, int):
            if not isinstance(node, list) or not -len(node) <= step < len(node):
                return None
            node = node[step]
        else:
            if not isinstance(node, Mapping):
                return None
            node = node.get(step)
    return node


def _decode(node: Any) -> Any:
    if isinstance(node, (Mapping, list)):
        return node
    if not isinstance(node, str) or not node.strip():
        return None
    try:
        return json.loads(node)
    except json.JSONDecodeError:
        return None


def is_present(value: Any) -> bool:
    """Whether a looked-up value counts as populated."""
    if value is None or value is False:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (Mapping, list, tuple)):
        return bool(value)
    return True


def first_present(payload: Any, paths: Iterable[Sequence[Step]]) -> Any:
    """Return the first populated value along ``paths``, or None."""
    for path in paths:
        value = lookup(payload, path)
        if is_present(value):
            return value
    return None


def first_url(payload: Any, paths: Iterable[Sequence[Step]]) -> str | None:
    """Return the first non-empty string found along ``paths``, or None."""
    for path in paths:
        value = lookup(payload, path)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def section(payload: Any, key: str = "data") -> Mapping[str, Any]:
    """Return ``payload[key]`` when it is a mapping, else an empty dict."""
    if isinstance(payload, Mapping):
        inner = payload.get(key)
        if isinstance(inner, Mapping):
            return inner
    return {}
