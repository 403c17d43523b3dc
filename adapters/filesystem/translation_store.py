from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from adapters.filesystem.json_utils import load_json_object, write_json_locked
from domain.ports.translations import TranslationStore
from domain.translations import MANIFEST_FILENAME, TranslationDocument, TranslationManifest

logger = logging.getLogger(__name__)


class FileSystemTranslationStore(TranslationStore):
    """Translation files under ``<root>/<language>/<namespace>.json`` plus ``manifest.json``."""

    def __init__(self, root: Path) -> None:
        self._root = root

    @property
    def root(self) -> Path:
        return self._root

    def namespace_path(self, language: str, namespace: str) -> Path:
        return self._root / language / f"{namespace}.json"

    def manifest_path(self) -> Path:
        return self._root / MANIFEST_FILENAME

    def is_accessible(self) -> bool:
        return self._root.is_dir()

    def load_namespace(self, language: str, namespace: str) -> TranslationDocument:
        return load_json_object(self.namespace_path(language, namespace))

    def save_namespace(self, language: str, namespace: str, document: Mapping[str, Any]) -> Path:
        path = self.namespace_path(language, namespace)
        write_json_locked(path, document)
        return path

    def load_manifest(self) -> TranslationManifest | None:
        path = self.manifest_path()
        if not path.exists():
            return None
        return TranslationManifest.model_validate(load_json_object(path))

    def save_manifest(self, manifest: TranslationManifest) -> Path:
        path = self.manifest_path()
        write_json_locked(path, manifest.to_dict())
        logger.info("Wrote translation manifest to %s", path)
        return path
