from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from domain.ports.translations import TranslationSource, TranslationStore
from domain.services.flatten_translations import flatten
from domain.services.split_namespaces import split_by_namespace
from domain.translations import (
    DEFAULT_NAMESPACE,
    DEFAULT_NAMESPACE_PREFIXES,
    MANIFEST_SCHEMA_VERSION,
    LanguageStoreReport,
    NamespaceSplit,
    TranslationManifest,
    TranslationStoreReport,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TranslationStoreConfig:
    source_dir: Path
    languages: list[str]
    namespace_prefixes: dict[str, list[str]] = field(
        default_factory=lambda: {
            name: list(prefixes) for name, prefixes in DEFAULT_NAMESPACE_PREFIXES.items()
        }
    )
    default_namespace: str = DEFAULT_NAMESPACE

    def namespaces(self) -> list[str]:
        names = list(self.namespace_prefixes)
        if self.default_namespace not in names:
            names.append(self.default_namespace)
        return names


def format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class BuildTranslationStore:
    def __init__(
        self,
        source: TranslationSource,
        store: TranslationStore,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._source = source
        self._store = store
        self._clock = clock or (lambda: datetime.now(tz=UTC))

    def build(self, config: TranslationStoreConfig) -> TranslationStoreReport:
        # Every language is split before the first write so a bad source leaves no output.
        splits = {
            language: self._split_language(config, language) for language in config.languages
        }
        reports = [
            self._write_language(language, split, config.namespaces())
            for language, split in splits.items()
        ]
        manifest = TranslationManifest(
            languages=list(config.languages),
            namespaces=config.namespaces(),
            version=MANIFEST_SCHEMA_VERSION,
            last_modified=format_timestamp(self._clock()),
        )
        self._store.save_manifest(manifest)
        return TranslationStoreReport(manifest=manifest, languages=reports)

    def _split_language(self, config: TranslationStoreConfig, language: str) -> NamespaceSplit:
        document = self._source.load_language(config.source_dir, language)
        flat = flatten(document)
        logger.info("Flattened %d keys for %s", len(flat), language)
        return split_by_namespace(flat, config.namespace_prefixes, config.default_namespace)

    def _write_language(
        self, language: str, split: NamespaceSplit, namespaces: Sequence[str]
    ) -> LanguageStoreReport:
        written: dict[str, int] = {}
        skipped: list[str] = []
        for namespace in namespaces:
            values: Mapping[str, object] = split.namespaces.get(namespace, {})
            if not values:
                skipped.append(namespace)
                continue
            self._store.save_namespace(language, namespace, values)
            written[namespace] = len(values)
        return LanguageStoreReport(
            language=language,
            key_count=split.key_count(),
            written=written,
            skipped=skipped,
            unassigned_keys=list(split.unassigned_keys),
        )
