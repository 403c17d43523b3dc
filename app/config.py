from __future__ import annotations

import os
from pathlib import Path
from typing import Annotated, ClassVar

from pydantic import AfterValidator, BaseModel, Field, HttpUrl, TypeAdapter, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from pydantic_settings.sources import PydanticBaseSettingsSource, YamlConfigSettingsSource

from adapters.http.translation_api import DEFAULT_API_URL, DEFAULT_TIMEOUT_SECONDS
from domain.services.build_translation_store import TranslationStoreConfig
from domain.services.translation_loader import TranslationLoaderConfig
from domain.translation_cache import DEFAULT_CACHE_TTL_MS
from domain.translations import (
    DEFAULT_FALLBACK_LANGUAGE,
    DEFAULT_NAMESPACE,
    DEFAULT_NAMESPACE_PREFIXES,
    SUPPORTED_LANGUAGES,
)

DEFAULT_CONFIG_PATH = Path("config/translations.yaml")

_HTTP_URL_ADAPTER = TypeAdapter(HttpUrl)


def _split_string_list_value(raw_value: str) -> list[str]:
    raw = raw_value.strip()
    if not raw:
        return []
    if (
        (raw.startswith('"') and raw.endswith('"')) or (raw.startswith("'") and raw.endswith("'"))
    ) and len(raw) >= 2:
        raw = raw[1:-1].strip()
    if raw.startswith("[") and raw.endswith("]"):
        raw = raw[1:-1].strip()
    if not raw:
        return []
    return [
        token for token in (part.strip().strip("'").strip('"') for part in raw.split(",")) if token
    ]


def _normalize_string_list(value: object) -> list[str]:
    if value is None:
        return []
    if isinstance(value, list | tuple):
        normalized: list[str] = []
        for item in value:
            normalized.extend(_split_string_list_value(str(item)))
        return normalized
    return _split_string_list_value(str(value))


def _validate_api_url(value: str) -> str:
    normalized = str(value or "").strip()
    _HTTP_URL_ADAPTER.validate_python(normalized)
    return normalized.rstrip("/")


ApiUrl = Annotated[str, AfterValidator(_validate_api_url)]


class TranslationSettings(BaseModel):
    store_dir: Path = Path("translations")
    source_dir: Path = Path("src/i18n/locales")
    languages: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: list(SUPPORTED_LANGUAGES)
    )
    namespace_prefixes: dict[str, list[str]] = Field(
        default_factory=lambda: {
            name: list(prefixes) for name, prefixes in DEFAULT_NAMESPACE_PREFIXES.items()
        }
    )
    default_namespace: str = DEFAULT_NAMESPACE
    api_prefix: str = "/api/translations"
    cache_max_age_seconds: int = Field(default=300, ge=0)

    @field_validator("languages", mode="before")
    @classmethod
    def normalize_languages(cls, value: object) -> list[str]:
        return _normalize_string_list(value)

    @field_validator("namespace_prefixes", mode="before")
    @classmethod
    def normalize_namespace_prefixes(cls, value: object) -> dict[str, list[str]]:
        if not isinstance(value, dict):
            msg = "translations.namespace_prefixes must be a mapping of namespace to prefixes"
            raise ValueError(msg)
        return {str(name): _normalize_string_list(prefixes) for name, prefixes in value.items()}

    @field_validator("api_prefix", mode="before")
    @classmethod
    def normalize_api_prefix(cls, value: object) -> str:
        raw = str(value or "").strip().strip("/")
        return f"/{raw}" if raw else ""

    @property
    def namespaces(self) -> list[str]:
        names = list(self.namespace_prefixes)
        if self.default_namespace not in names:
            names.append(self.default_namespace)
        return names

    def to_store_config(self) -> TranslationStoreConfig:
        return TranslationStoreConfig(
            source_dir=self.source_dir,
            languages=list(self.languages),
            namespace_prefixes={
                name: list(prefixes) for name, prefixes in self.namespace_prefixes.items()
            },
            default_namespace=self.default_namespace,
        )


class LoaderSettings(BaseModel):
    api_url: ApiUrl = DEFAULT_API_URL
    enable_cache: bool = True
    cache_ttl_ms: int = Field(default=DEFAULT_CACHE_TTL_MS, ge=0)
    fallback_language: str = DEFAULT_FALLBACK_LANGUAGE
    default_languages: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: list(SUPPORTED_LANGUAGES)
    )
    cache_dir: Path | None = Path(".cache/i18n")
    request_timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)

    @field_validator("default_languages", mode="before")
    @classmethod
    def normalize_default_languages(cls, value: object) -> list[str]:
        return _normalize_string_list(value)

    def to_loader_config(self) -> TranslationLoaderConfig:
        return TranslationLoaderConfig(
            enable_cache=self.enable_cache,
            cache_ttl_ms=self.cache_ttl_ms,
            fallback_language=self.fallback_language,
            default_languages=list(self.default_languages),
        )


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="ONB_", env_nested_delimiter="__")

    translations: TranslationSettings = TranslationSettings()
    loader: LoaderSettings = LoaderSettings()

    _yaml_path: ClassVar[Path | None] = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: list[PydanticBaseSettingsSource] = [
            init_settings,
            env_settings,
            dotenv_settings,
            file_secret_settings,
        ]
        if cls._yaml_path:
            sources.append(YamlConfigSettingsSource(settings_cls, yaml_file=cls._yaml_path))
        return tuple(sources)


def load_settings(config_path: Path | None = None) -> AppSettings:
    env_path = os.getenv("ONB_CONFIG_PATH")
    resolved_path: Path | None = None

    if config_path is not None:
        resolved_path = config_path
    elif env_path:
        resolved_path = Path(env_path)
    elif DEFAULT_CONFIG_PATH.exists():
        resolved_path = DEFAULT_CONFIG_PATH

    previous = AppSettings._yaml_path
    try:
        if resolved_path is not None:
            if not resolved_path.exists():
                msg = f"Config file not found: {resolved_path}"
                raise FileNotFoundError(msg)
            AppSettings._yaml_path = resolved_path
        return AppSettings()
    finally:
        AppSettings._yaml_path = previous
