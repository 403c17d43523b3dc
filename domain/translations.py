from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

MANIFEST_SCHEMA_VERSION = "1.0.0"
MANIFEST_FILENAME = "manifest.json"
DEFAULT_NAMESPACE = "common"
DEFAULT_FALLBACK_LANGUAGE = "en"
SUPPORTED_LANGUAGES: tuple[str, ...] = ("en", "es")
CACHE_STORAGE_KEY = "i18n-cache"

DEFAULT_NAMESPACE_PREFIXES: Dict[str, List[str]] = {
    "common": ["common"],
    "navigation": ["navigation"],
    "products": ["productSelection"],
    "customer-info": ["customerInfo"],
    "identification": ["identificationInfo"],
    "documents": ["documentAcceptance"],
    "confirmation": ["confirmationScreen"],
    "validation": ["validation"],
    "bank-info": ["bankInfo"],
}

TranslationDocument = Dict[str, Any]
LanguageBundle = Dict[str, TranslationDocument]


class TranslationLoadError(Exception):
    """Raised when translations cannot be fetched from the service."""


class TranslationSourceError(Exception):
    """Raised when a nested source document is missing or unparsable."""


class UnsupportedLanguageError(LookupError):
    pass


class UnknownNamespaceError(LookupError):
    pass


class TranslationManifest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    languages: List[str]
    namespaces: List[str]
    version: Optional[str] = None
    last_modified: Optional[str] = Field(default=None, alias="lastModified")

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "languages": list(self.languages),
            "namespaces": list(self.namespaces),
        }
        if self.version is not None:
            payload["version"] = self.version
        if self.last_modified is not None:
            payload["lastModified"] = self.last_modified
        return payload


@dataclass(frozen=True)
class NamespaceSplit:
    namespaces: dict[str, TranslationDocument]
    unassigned_keys: list[str] = field(default_factory=list)

    def non_empty(self) -> dict[str, TranslationDocument]:
        return {name: values for name, values in self.namespaces.items() if values}

    def key_count(self) -> int:
        return sum(len(values) for values in self.namespaces.values())


@dataclass(frozen=True)
class LanguageStoreReport:
    language: str
    key_count: int
    written: dict[str, int]
    skipped: list[str]
    unassigned_keys: list[str]


@dataclass(frozen=True)
class TranslationStoreReport:
    manifest: TranslationManifest
    languages: list[LanguageStoreReport]
