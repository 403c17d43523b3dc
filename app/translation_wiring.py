from __future__ import annotations

import httpx

from adapters.filesystem.cache_storage import FileSystemCacheStorage
from adapters.filesystem.translation_source import FileSystemTranslationSource
from adapters.filesystem.translation_store import FileSystemTranslationStore
from adapters.http.translation_api import HttpTranslationApi
from app.config import AppSettings
from domain.ports.translations import CacheStorage
from domain.services.build_translation_store import BuildTranslationStore
from domain.services.serve_translations import TranslationService
from domain.services.translation_loader import TranslationLoader


def build_translation_store(settings: AppSettings) -> FileSystemTranslationStore:
    return FileSystemTranslationStore(settings.translations.store_dir)


def build_store_builder(settings: AppSettings) -> BuildTranslationStore:
    return BuildTranslationStore(FileSystemTranslationSource(), build_translation_store(settings))


def build_translation_service(settings: AppSettings) -> TranslationService:
    translations = settings.translations
    if not translations.languages:
        msg = "translations.languages must list at least one language"
        raise ValueError(msg)
    return TranslationService(
        build_translation_store(settings),
        languages=translations.languages,
        namespaces=translations.namespaces,
    )


def build_cache_storage(settings: AppSettings) -> CacheStorage | None:
    if settings.loader.cache_dir is None:
        return None
    return FileSystemCacheStorage(settings.loader.cache_dir)


def build_translation_loader(
    settings: AppSettings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> TranslationLoader:
    loader = settings.loader
    api = HttpTranslationApi(
        loader.api_url,
        timeout=loader.request_timeout_seconds,
        transport=transport,
    )
    return TranslationLoader(
        api,
        config=loader.to_loader_config(),
        storage=build_cache_storage(settings),
    )
