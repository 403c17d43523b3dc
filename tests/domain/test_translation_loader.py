from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import pytest

from adapters.filesystem.cache_storage import FileSystemCacheStorage
from domain.services.translation_loader import (
    TranslationLoader,
    TranslationLoaderConfig,
    is_language_cache_key,
)
from domain.translations import TranslationLoadError


class FakeClock:
    def __init__(self, now: float = 5_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class FakeTranslationApi:
    def __init__(self, responses: dict[str, Any]) -> None:
        self.responses = responses
        self.calls: list[str] = []

    async def get_json(self, path: str) -> Any:
        self.calls.append(path)
        response = self.responses.get(path)
        if response is None or isinstance(response, Exception):
            raise response or TranslationLoadError(f"Failed to load {path}: 404")
        return response


EN_BUNDLE = {"common": {"common.continue": "Continue"}, "validation": {}}
ES_BUNDLE = {"common": {"common.continue": "Continuar"}, "validation": {}}


def _loader(
    api: FakeTranslationApi,
    *,
    clock: FakeClock | None = None,
    storage: FileSystemCacheStorage | None = None,
    **config: Any,
) -> TranslationLoader:
    return TranslationLoader(
        api,
        config=TranslationLoaderConfig(**config),
        storage=storage,
        clock=clock or FakeClock(),
    )


def test_load_language_fetches_once_then_serves_cache() -> None:
    api = FakeTranslationApi({"/translations/es": ES_BUNDLE})
    loader = _loader(api)

    first = asyncio.run(loader.load_language("es"))
    second = asyncio.run(loader.load_language("es"))

    assert first == ES_BUNDLE
    assert second == ES_BUNDLE
    assert api.calls == ["/translations/es"]
    assert loader.cache.keys() == ["all-es"]


def test_load_language_refetches_after_ttl() -> None:
    clock = FakeClock()
    api = FakeTranslationApi({"/translations/en": EN_BUNDLE})
    loader = _loader(api, clock=clock, cache_ttl_ms=1000)

    asyncio.run(loader.load_language("en"))
    clock.now += 999
    asyncio.run(loader.load_language("en"))
    assert len(api.calls) == 1

    clock.now += 2
    asyncio.run(loader.load_language("en"))
    assert len(api.calls) == 2


def test_load_language_falls_back_to_fallback_language() -> None:
    api = FakeTranslationApi({"/translations/en": EN_BUNDLE})
    loader = _loader(api)

    result = asyncio.run(loader.load_language("fr"))

    assert result == EN_BUNDLE
    assert api.calls == ["/translations/fr", "/translations/en"]
    assert loader.cache.keys() == ["all-en"]


def test_load_language_at_fallback_propagates_failure() -> None:
    api = FakeTranslationApi({})
    loader = _loader(api)

    with pytest.raises(TranslationLoadError):
        asyncio.run(loader.load_language("fr"))

    assert api.calls == ["/translations/fr", "/translations/en"]


def test_load_language_rejects_non_object_bundle() -> None:
    api = FakeTranslationApi({"/translations/en": ["not", "a", "bundle"]})
    loader = _loader(api)

    with pytest.raises(TranslationLoadError, match="Invalid translation bundle"):
        asyncio.run(loader.load_language("en"))


def test_load_namespace_validates_flat_string_map() -> None:
    api = FakeTranslationApi(
        {
            "/translations/es/common": {"common.continue": {"nested": "value"}},
            "/translations/en/common": {"common.continue": "Continue"},
        }
    )
    loader = _loader(api)

    result = asyncio.run(loader.load_namespace("es", "common"))

    assert result == {"common.continue": "Continue"}
    assert loader.cache.keys() == ["en/common"]


def test_load_namespace_returns_empty_at_fallback() -> None:
    api = FakeTranslationApi({})
    loader = _loader(api)

    assert asyncio.run(loader.load_namespace("en", "documents")) == {}
    assert api.calls == ["/translations/en/documents"]


def test_cached_empty_namespace_is_a_hit() -> None:
    api = FakeTranslationApi({"/translations/en/documents": {}})
    loader = _loader(api)

    asyncio.run(loader.load_namespace("en", "documents"))
    asyncio.run(loader.load_namespace("en", "documents"))

    assert api.calls == ["/translations/en/documents"]


def test_get_manifest_returns_default_on_failure() -> None:
    api = FakeTranslationApi({"/translations/manifest": {"languages": "en"}})
    loader = _loader(api, default_languages=["en", "es"])

    manifest = asyncio.run(loader.get_manifest())

    assert manifest.to_dict() == {"languages": ["en", "es"], "namespaces": []}


@pytest.mark.parametrize("payload", [{}, {"languages": ["en"]}, {"namespaces": ["common"]}])
def test_get_manifest_requires_languages_and_namespaces(payload: dict[str, Any]) -> None:
    loader = _loader(
        FakeTranslationApi({"/translations/manifest": payload}), default_languages=["en", "es"]
    )

    manifest = asyncio.run(loader.get_manifest())

    assert manifest.to_dict() == {"languages": ["en", "es"], "namespaces": []}


def test_get_manifest_parses_service_manifest() -> None:
    payload = {
        "languages": ["en", "es"],
        "namespaces": ["common"],
        "version": "1.0.0",
        "lastModified": "2026-03-01T00:00:00.000Z",
    }
    loader = _loader(FakeTranslationApi({"/translations/manifest": payload}))

    manifest = asyncio.run(loader.get_manifest())

    assert manifest.last_modified == "2026-03-01T00:00:00.000Z"
    assert manifest.to_dict() == payload


def test_reload_language_evicts_only_that_language() -> None:
    api = FakeTranslationApi(
        {
            "/translations/en": EN_BUNDLE,
            "/translations/en/common": {"common.continue": "Continue"},
            "/translations/en-US-extra/common": {"common.continue": "Continue!"},
            "/translations/es": ES_BUNDLE,
        }
    )
    loader = _loader(api, fallback_language="es")

    async def scenario() -> None:
        await loader.load_language("en")
        await loader.load_namespace("en", "common")
        await loader.load_namespace("en-US-extra", "common")
        await loader.load_language("es")
        api.calls.clear()
        await loader.reload_language("en")

    asyncio.run(scenario())

    assert api.calls == ["/translations/en"]
    assert sorted(loader.cache.keys()) == ["all-en", "all-es", "en-US-extra/common"]


def test_language_cache_key_matching() -> None:
    assert is_language_cache_key("en", "en")
    assert is_language_cache_key("all-en", "en")
    assert is_language_cache_key("en/common", "en")
    assert not is_language_cache_key("en-US-extra/common", "en")
    assert not is_language_cache_key("all-es", "en")


def test_clear_cache_forces_refetch_and_removes_blob(tmp_path: Path) -> None:
    storage = FileSystemCacheStorage(tmp_path)
    api = FakeTranslationApi({"/translations/en": EN_BUNDLE})
    loader = _loader(api, storage=storage)

    asyncio.run(loader.load_language("en"))
    assert storage.path.exists()
    loader.clear_cache()
    asyncio.run(loader.load_language("en"))

    assert api.calls == ["/translations/en", "/translations/en"]


def test_construction_restores_persisted_entries(tmp_path: Path) -> None:
    storage = FileSystemCacheStorage(tmp_path)
    clock = FakeClock()
    api = FakeTranslationApi({"/translations/en": EN_BUNDLE})
    asyncio.run(_loader(api, storage=storage, clock=clock).load_language("en"))

    clock.now += 1000
    restored = _loader(FakeTranslationApi({}), storage=storage, clock=clock)

    assert asyncio.run(restored.load_language("en")) == EN_BUNDLE


def test_disabled_cache_always_fetches_and_never_persists(tmp_path: Path) -> None:
    storage = FileSystemCacheStorage(tmp_path)
    api = FakeTranslationApi({"/translations/en": EN_BUNDLE})
    loader = _loader(api, storage=storage, enable_cache=False)

    asyncio.run(loader.load_language("en"))
    asyncio.run(loader.load_language("en"))

    assert len(api.calls) == 2
    assert not storage.path.exists()


def test_loaders_do_not_share_cache_state() -> None:
    api = FakeTranslationApi({"/translations/en": EN_BUNDLE})
    first = _loader(api)
    second = _loader(api)

    asyncio.run(first.load_language("en"))

    assert first.cache.keys() == ["all-en"]
    assert second.cache.keys() == []
