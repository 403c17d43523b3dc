from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime

from domain.ports.translations import TranslationStore
from domain.services.build_translation_store import format_timestamp
from domain.translations import (
    MANIFEST_SCHEMA_VERSION,
    LanguageBundle,
    TranslationDocument,
    TranslationManifest,
    UnknownNamespaceError,
    UnsupportedLanguageError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HealthReport:
    healthy: bool
    languages: list[str]
    namespaces: list[str]

    def to_dict(self) -> dict[str, object]:
        if not self.healthy:
            return {"status": "unhealthy", "error": "Translations directory not accessible"}
        return {
            "status": "healthy",
            "languages": list(self.languages),
            "namespaces": list(self.namespaces),
        }


class TranslationService:
    """Read-only access to the translation store for the HTTP layer."""

    def __init__(
        self,
        store: TranslationStore,
        languages: Sequence[str],
        namespaces: Sequence[str],
        started_at: datetime | None = None,
    ) -> None:
        self._store = store
        self._languages = list(languages)
        self._namespaces = list(namespaces)
        self._started_at = started_at or datetime.now(tz=UTC)

    @property
    def languages(self) -> list[str]:
        return list(self._languages)

    @property
    def namespaces(self) -> list[str]:
        return list(self._namespaces)

    async def check_health(self) -> HealthReport:
        healthy = await asyncio.to_thread(self._store.is_accessible)
        return HealthReport(healthy=healthy, languages=self.languages, namespaces=self.namespaces)

    def get_manifest(self) -> TranslationManifest:
        stored = self._store.load_manifest()
        last_modified = stored.last_modified if stored is not None else None
        return TranslationManifest(
            languages=self.languages,
            namespaces=self.namespaces,
            version=MANIFEST_SCHEMA_VERSION,
            last_modified=last_modified or format_timestamp(self._started_at),
        )

    async def get_all_translations(self, language: str) -> LanguageBundle:
        self._ensure_language(language)
        documents = await asyncio.gather(
            *(self._load_or_empty(language, namespace) for namespace in self._namespaces)
        )
        return dict(zip(self._namespaces, documents, strict=True))

    async def get_namespace_translations(
        self, language: str, namespace: str
    ) -> TranslationDocument:
        self._ensure_language(language)
        if namespace not in self._namespaces:
            raise UnknownNamespaceError(namespace)
        try:
            return await asyncio.to_thread(self._store.load_namespace, language, namespace)
        except FileNotFoundError:
            return {}

    async def _load_or_empty(self, language: str, namespace: str) -> TranslationDocument:
        try:
            return await asyncio.to_thread(self._store.load_namespace, language, namespace)
        except FileNotFoundError:
            logger.debug("No %s translations for %s", namespace, language)
            return {}
        except Exception as exc:  # noqa: BLE001
            logger.warning("Failed to load %s for %s: %s", namespace, language, exc)
            return {}

    def _ensure_language(self, language: str) -> None:
        if language not in self._languages:
            raise UnsupportedLanguageError(language)
