"""
Layering of configuration documents.

Every source (defaults, global file, explicit or project file, environment)
yields a plain mapping and later layers win. Mappings merge key by key;
anything else is replaced. Two key prefixes edit a list instead of
replacing it: ``+key`` appends the items not already present and ``-key``
drops matching items. A null value deletes the key.

Nested values are addressed with dotted key paths such as
``fetch.max_redirects``.
"""

from collections.abc import Iterable, Mapping
from typing import Any

LIST_APPEND = "+"
LIST_REMOVE = "-"


def _edit_list(current: list[Any], op: str, items: list[Any]) -> list[Any]:
    if op == LIST_APPEND:
        return current + [item for item in items if item not in current]
    return [item for item in current if item not in items]


def merge_documents(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """
    Layer ``override`` on top of ``base``. Neither input is modified.

    >>> merge_documents({"roots": ["/srv"]}, {"+roots": ["/tmp"]})
    {'roots': ['/srv', '/tmp']}
    >>> merge_documents({"fetch": {"max_redirects": 5}}, {"fetch": None})
    {}
    """
    merged = dict(base)

    for key, value in override.items():
        op, target = key[:1], key[1:]

        if op in (LIST_APPEND, LIST_REMOVE) and isinstance(value, list):
            current = merged.get(target)
            if isinstance(current, list):
                merged[target] = _edit_list(current, op, value)
            elif op == LIST_APPEND:
                merged[target] = _edit_list([], op, value)
        elif value is None:
            merged.pop(key, None)
        elif isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = merge_documents(merged[key], value)
        else:
            merged[key] = value

    return merged


def merge_layers(layers: Iterable[Mapping[str, Any]]) -> dict[str, Any]:
    """Fold layers left to right; the last one has the final say."""
    result: dict[str, Any] = {}
    for layer in layers:
        result = merge_documents(result, layer)
    return result


def lookup(document: Mapping[str, Any], key_path: str) -> Any:
    """
    Value at a dotted key path.

    Raises:
        KeyError: If any segment of the path is missing
    """
    node: Any = document
    for part in key_path.split("."):
        if not isinstance(node, Mapping) or part not in node:
            raise KeyError(key_path)
        node = node[part]
    return node


def document_for(key_path: str, value: Any) -> dict[str, Any]:
    """Smallest document setting one key path, for use as a layer."""
    *parents, leaf = key_path.split(".")
    document: dict[str, Any] = {leaf: value}
    for part in reversed(parents):
        document = {part: document}
    return document


def resolve_key_path(document: Mapping[str, Any], words: list[str]) -> str | None:
    """
    Map underscore-split words onto existing keys of ``document``.

    Keys may themselves contain underscores, so the longest matching key is
    tried first: ``["max", "response", "chars"]`` resolves to
    ``max_response_chars`` rather than stopping at a ``max`` key.

    Returns:
        Dotted key path, or None when no existing key matches
    """
    for end in range(len(words), 0, -1):
        key = "_".join(words[:end])
        if key not in document:
            continue
        rest = words[end:]
        if not rest:
            return key
        if isinstance(document[key], Mapping):
            nested = resolve_key_path(document[key], rest)
            if nested is not None:
                return f"{key}.{nested}"
    return None
