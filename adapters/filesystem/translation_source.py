from __future__ import annotations

from pathlib import Path
from typing import Any

import orjson

from adapters.filesystem.json_utils import load_json_object
from domain.ports.translations import TranslationSource
from domain.translations import TranslationSourceError


class FileSystemTranslationSource(TranslationSource):
    """Reads nested per-language documents laid out as ``<directory>/<language>.json``."""

    def load_language(self, directory: Path, language: str) -> dict[str, Any]:
        path = directory / f"{language}.json"
        try:
            return load_json_object(path)
        except FileNotFoundError as exc:
            msg = f"Source translations not found: {path}"
            raise TranslationSourceError(msg) from exc
        except (orjson.JSONDecodeError, ValueError) as exc:
            msg = f"Source translations are not a valid JSON object: {path}"
            raise TranslationSourceError(msg) from exc
        except OSError as exc:
            msg = f"Source translations could not be read: {path}"
            raise TranslationSourceError(msg) from exc
