from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol

from domain.translations import TranslationDocument, TranslationManifest


class TranslationSource(Protocol):
    def load_language(self, directory: Path, language: str) -> dict[str, Any]: ...


class TranslationStore(Protocol):
    def is_accessible(self) -> bool: ...

    def load_namespace(self, language: str, namespace: str) -> TranslationDocument: ...

    def save_namespace(
        self, language: str, namespace: str, document: Mapping[str, Any]
    ) -> Path: ...

    def load_manifest(self) -> TranslationManifest | None: ...

    def save_manifest(self, manifest: TranslationManifest) -> Path: ...


class TranslationApi(Protocol):
    async def get_json(self, path: str) -> Any: ...


class CacheStorage(Protocol):
    def load(self) -> dict[str, Any] | None: ...

    def save(self, payload: Mapping[str, Any]) -> None: ...

    def remove(self) -> None: ...
