from __future__ import annotations

import os
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest

from app.config import AppSettings, LoaderSettings, TranslationSettings


def _clear_onb_env() -> None:
    for key in list(os.environ):
        if key.startswith("ONB_"):
            os.environ.pop(key, None)


_clear_onb_env()


@pytest.fixture(autouse=True)
def clear_onb_env() -> Generator[None, None, None]:
    _clear_onb_env()
    yield
    _clear_onb_env()


@pytest.fixture
def nested_source() -> dict[str, Any]:
    return {
        "common": {"continue": "Continue", "back": "Back"},
        "navigation": {"steps": {"products": "Products", "confirm": "Confirm"}},
        "productSelection": {"title": "Choose your account", "tags": ["new", "popular"]},
        "validation": {"required": "Required"},
        "footer": {"copyright": "Bank"},
    }


@pytest.fixture
def translation_settings(tmp_path: Path) -> TranslationSettings:
    return TranslationSettings(
        store_dir=tmp_path / "translations",
        source_dir=tmp_path / "locales",
        languages=["en", "es"],
    )


@pytest.fixture
def translation_settings_factory(
    translation_settings: TranslationSettings,
) -> Callable[..., TranslationSettings]:
    def _factory(**overrides: object) -> TranslationSettings:
        return translation_settings.model_copy(update=overrides)

    return _factory


@pytest.fixture
def loader_settings(tmp_path: Path) -> LoaderSettings:
    return LoaderSettings(
        api_url="http://testserver/api",
        enable_cache=True,
        cache_ttl_ms=300_000,
        fallback_language="en",
        cache_dir=tmp_path / "cache",
        request_timeout_seconds=5.0,
    )


@pytest.fixture
def app_settings(
    translation_settings: TranslationSettings, loader_settings: LoaderSettings
) -> AppSettings:
    return AppSettings(translations=translation_settings, loader=loader_settings)


@pytest.fixture
def app_settings_factory(
    translation_settings_factory: Callable[..., TranslationSettings],
    loader_settings: LoaderSettings,
) -> Callable[..., AppSettings]:
    def _factory(**overrides: object) -> AppSettings:
        return AppSettings(
            translations=translation_settings_factory(**overrides),
            loader=loader_settings,
        )

    return _factory
