from __future__ import annotations

from collections.abc import Iterable

from domain.services.translation_loader import TranslationLoader
from domain.translations import (
    DEFAULT_FALLBACK_LANGUAGE,
    SUPPORTED_LANGUAGES,
    LanguageBundle,
    TranslationDocument,
)


def normalize_language(
    value: str | None, supported: Iterable[str] = SUPPORTED_LANGUAGES
) -> str | None:
    raw = str(value or "").strip().lower()
    if not raw:
        return None
    supported_set = {item.lower() for item in supported}
    if raw in supported_set:
        return raw
    lang = raw.replace("_", "-").split("-", 1)[0]
    if lang in supported_set:
        return lang
    return None


def resolve_initial_language(
    url_language: str | None,
    stored_language: str | None,
    supported: Iterable[str] = SUPPORTED_LANGUAGES,
    default: str = DEFAULT_FALLBACK_LANGUAGE,
) -> str:
    supported_list = list(supported)
    requested = normalize_language(url_language, supported_list)
    if requested is not None:
        return requested
    stored = normalize_language(stored_language, supported_list)
    if stored is not None:
        return stored
    return default


class TranslationBackend:
    """i18next-style backend: ``read(language, namespace)`` served by the loader."""

    def __init__(self, loader: TranslationLoader) -> None:
        self._loader = loader

    async def read(self, language: str, namespace: str) -> TranslationDocument:
        return await self._loader.load_namespace(language, namespace)

    async def read_all(self, language: str) -> LanguageBundle:
        return await self._loader.load_language(language)

    async def reload_translations(self, language: str) -> LanguageBundle:
        return await self._loader.reload_language(language)
