from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from domain.translations import TranslationDocument

KEY_SEPARATOR = "."


def flatten(document: Mapping[str, Any], prefix: str = "") -> TranslationDocument:
    """Flatten a nested translation document into dot-joined leaf keys.

    Objects recurse; every other value (strings, numbers, booleans, null and
    arrays) is kept as an opaque leaf. Empty objects contribute no keys.
    """
    result: TranslationDocument = {}
    _flatten_into(document, prefix, result)
    return result


def _flatten_into(document: Mapping[str, Any], prefix: str, result: TranslationDocument) -> None:
    for key, value in document.items():
        flat_key = f"{prefix}{KEY_SEPARATOR}{key}" if prefix else str(key)
        if isinstance(value, Mapping):
            _flatten_into(value, flat_key, result)
        else:
            result[flat_key] = value


def unflatten(flat: Mapping[str, Any]) -> dict[str, Any]:
    nested: dict[str, Any] = {}
    for flat_key, value in flat.items():
        parts = flat_key.split(KEY_SEPARATOR)
        node = nested
        for part in parts[:-1]:
            child = node.setdefault(part, {})
            if not isinstance(child, dict):
                msg = f"Key '{flat_key}' conflicts with leaf value at '{part}'"
                raise ValueError(msg)
            node = child
        leaf = parts[-1]
        if isinstance(node.get(leaf), dict):
            msg = f"Key '{flat_key}' conflicts with nested keys below it"
            raise ValueError(msg)
        node[leaf] = value
    return nested
