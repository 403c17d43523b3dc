from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Dict

from pydantic import TypeAdapter, ValidationError

from domain.ports.translations import CacheStorage, TranslationApi
from domain.translation_cache import DEFAULT_CACHE_TTL_MS, TranslationCache, current_time_ms
from domain.translations import (
    DEFAULT_FALLBACK_LANGUAGE,
    SUPPORTED_LANGUAGES,
    LanguageBundle,
    TranslationDocument,
    TranslationLoadError,
    TranslationManifest,
)

logger = logging.getLogger(__name__)

_FLAT_TRANSLATIONS = TypeAdapter(Dict[str, str])
_LANGUAGE_BUNDLE = TypeAdapter(Dict[str, Dict[str, Any]])


@dataclass(frozen=True)
class TranslationLoaderConfig:
    enable_cache: bool = True
    cache_ttl_ms: float = DEFAULT_CACHE_TTL_MS
    fallback_language: str = DEFAULT_FALLBACK_LANGUAGE
    default_languages: list[str] = field(default_factory=lambda: list(SUPPORTED_LANGUAGES))


def language_cache_key(language: str) -> str:
    return f"all-{language}"


def namespace_cache_key(language: str, namespace: str) -> str:
    return f"{language}/{namespace}"


def is_language_cache_key(key: str, language: str) -> bool:
    return (
        key == language
        or key == language_cache_key(language)
        or key.startswith(f"{language}/")
    )


class TranslationLoader:
    """Fetches translations from the translation service with TTL caching.

    Failed loads fall back to ``config.fallback_language``. A whole-language
    load at the fallback language re-raises; a namespace load returns an empty
    mapping instead.
    """

    def __init__(
        self,
        api: TranslationApi,
        config: TranslationLoaderConfig | None = None,
        storage: CacheStorage | None = None,
        clock: Callable[[], float] = current_time_ms,
    ) -> None:
        self._api = api
        self._config = config or TranslationLoaderConfig()
        self._cache = TranslationCache(
            ttl_ms=self._config.cache_ttl_ms,
            storage=storage if self._config.enable_cache else None,
            clock=clock,
        )
        if self._config.enable_cache:
            self._cache.restore()

    @property
    def config(self) -> TranslationLoaderConfig:
        return self._config

    @property
    def cache(self) -> TranslationCache:
        return self._cache

    async def load_language(self, language: str) -> LanguageBundle:
        cache_key = language_cache_key(language)
        if self._config.enable_cache:
            cached = self._cache.get(cache_key)
            if cached is not None:
                return cached

        try:
            payload = await self._api.get_json(f"/translations/{language}")
            data = self._validate_bundle(payload, language)
        except TranslationLoadError as exc:
            logger.error("Failed to load translations for %s: %s", language, exc)
            fallback = self._config.fallback_language
            if language != fallback:
                logger.warning("Falling back to %s", fallback)
                return await self.load_language(fallback)
            raise

        if self._config.enable_cache:
            self._cache.set(cache_key, data)
        return data

    async def load_namespace(self, language: str, namespace: str) -> TranslationDocument:
        cache_key = namespace_cache_key(language, namespace)
        if self._config.enable_cache:
            cached = self._cache.get(cache_key)
            if cached is not None:
                return cached

        try:
            payload = await self._api.get_json(f"/translations/{language}/{namespace}")
            data = _FLAT_TRANSLATIONS.validate_python(payload, strict=True)
        except (TranslationLoadError, ValidationError) as exc:
            logger.error("Failed to load %s for %s: %s", namespace, language, exc)
            fallback = self._config.fallback_language
            if language != fallback:
                logger.warning("Falling back to %s", fallback)
                return await self.load_namespace(fallback, namespace)
            return {}

        if self._config.enable_cache:
            self._cache.set(cache_key, data)
        return data

    async def get_manifest(self) -> TranslationManifest:
        try:
            payload = await self._api.get_json("/translations/manifest")
            return TranslationManifest.model_validate(payload)
        except (TranslationLoadError, ValidationError) as exc:
            logger.error("Failed to load translation manifest: %s", exc)
            return TranslationManifest(
                languages=list(self._config.default_languages),
                namespaces=[],
            )

    def clear_cache(self) -> None:
        self._cache.clear()

    async def reload_language(self, language: str) -> LanguageBundle:
        stale = [key for key in self._cache.keys() if is_language_cache_key(key, language)]
        self._cache.delete_many(stale)
        return await self.load_language(language)

    def _validate_bundle(self, payload: Any, language: str) -> LanguageBundle:
        try:
            return _LANGUAGE_BUNDLE.validate_python(payload)
        except ValidationError as exc:
            msg = f"Invalid translation bundle for {language}"
            raise TranslationLoadError(msg) from exc
