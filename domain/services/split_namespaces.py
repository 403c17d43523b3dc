from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from domain.services.flatten_translations import KEY_SEPARATOR
from domain.translations import DEFAULT_NAMESPACE, NamespaceSplit, TranslationDocument

logger = logging.getLogger(__name__)

NamespaceTable = Mapping[str, Sequence[str]]


def matches_prefix(key: str, prefix: str) -> bool:
    return key == prefix or key.startswith(f"{prefix}{KEY_SEPARATOR}")


def resolve_namespace(key: str, table: NamespaceTable) -> str | None:
    """Return the first namespace in table order owning ``key``, if any."""
    for namespace, prefixes in table.items():
        if any(matches_prefix(key, prefix) for prefix in prefixes):
            return namespace
    return None


def split_by_namespace(
    flat: Mapping[str, Any],
    table: NamespaceTable,
    default_namespace: str = DEFAULT_NAMESPACE,
) -> NamespaceSplit:
    namespaces: dict[str, TranslationDocument] = {name: {} for name in table}
    namespaces.setdefault(default_namespace, {})
    unassigned: list[str] = []
    for key, value in flat.items():
        namespace = resolve_namespace(key, table)
        if namespace is None:
            logger.warning(
                "Key %r not assigned to any namespace, adding to %s", key, default_namespace
            )
            unassigned.append(key)
            namespace = default_namespace
        namespaces[namespace][key] = value
    return NamespaceSplit(namespaces=namespaces, unassigned_keys=unassigned)
