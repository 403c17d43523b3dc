from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Optional

import typer
import uvicorn
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from adapters.filesystem.json_utils import load_json_object
from app.config import AppSettings, load_settings
from app.i18n_backend import TranslationBackend, resolve_initial_language
from app.translation_wiring import build_store_builder, build_translation_loader
from app.web_main import create_app
from domain.services.build_translation_store import TranslationStoreConfig
from domain.services.flatten_translations import flatten, unflatten
from domain.translations import (
    MANIFEST_FILENAME,
    TranslationLoadError,
    TranslationManifest,
    TranslationSourceError,
)

app = typer.Typer(no_args_is_help=True)
console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _settings(config: Optional[Path]) -> AppSettings:
    try:
        return load_settings(config)
    except FileNotFoundError as exc:
        console.print(f"[red]{exc}[/]")
        raise typer.Exit(code=1) from exc


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging.")) -> None:
    _configure_logging(verbose)


@app.command("split")
def split(
    source_dir: Optional[Path] = typer.Option(
        None, help="Directory with nested <language>.json source files.",
    ),
    output_dir: Optional[Path] = typer.Option(
        None, help="Translation store directory to write namespace files into.",
    ),
    config: Optional[Path] = typer.Option(None, help="YAML settings file."),
) -> None:
    settings = _settings(config)
    if output_dir is not None:
        settings = settings.model_copy(
            update={
                "translations": settings.translations.model_copy(update={"store_dir": output_dir})
            }
        )
    store_config = settings.translations.to_store_config()
    if source_dir is not None:
        store_config = TranslationStoreConfig(
            source_dir=source_dir,
            languages=store_config.languages,
            namespace_prefixes=store_config.namespace_prefixes,
            default_namespace=store_config.default_namespace,
        )

    console.print("Converting translations from nested to flat structure...")
    try:
        report = build_store_builder(settings).build(store_config)
    except TranslationSourceError as exc:
        console.print(f"[red]Conversion failed:[/] {exc}")
        raise typer.Exit(code=1) from exc
    except OSError as exc:
        console.print(f"[red]Could not write translations:[/] {exc}")
        raise typer.Exit(code=1) from exc

    for language in report.languages:
        console.print(f"\n[bold]{language.language}[/]: flattened {language.key_count} keys")
        for namespace, count in language.written.items():
            console.print(f"  [green]Created[/] {namespace}.json with {count} keys")
        for namespace in language.skipped:
            console.print(f"  [yellow]Skipped[/] {namespace}.json (no keys)")
        if language.unassigned_keys:
            console.print(
                f"  [yellow]{len(language.unassigned_keys)} keys routed to "
                f"{store_config.default_namespace}[/]"
            )
    console.print(f"\n[green]Translation conversion complete:[/] {settings.translations.store_dir}")


@app.command("validate")
def validate(input_path: Path = typer.Argument(..., help="Namespace file, manifest or nested source.")) -> None:
    if not input_path.exists():
        console.print(f"[red]File not found:[/] {input_path}")
        raise typer.Exit(code=1)

    try:
        data = load_json_object(input_path)
        if input_path.name == MANIFEST_FILENAME:
            TranslationManifest.model_validate(data)
            console.print(f"[green]Valid translation manifest:[/] {input_path}")
        elif data and all(isinstance(value, str) for value in data.values()):
            unflatten(data)
            console.print(f"[green]Valid namespace file ({len(data)} keys):[/] {input_path}")
        else:
            flat = flatten(data)
            console.print(f"[green]Valid nested source ({len(flat)} keys):[/] {input_path}")
    except (ValueError, ValidationError) as exc:
        console.print(f"[red]Validation failed:[/] {exc}")
        raise typer.Exit(code=1) from exc


@app.command("fetch")
def fetch(
    language: Optional[str] = typer.Argument(None, help="Language code; detected when omitted."),
    namespace: Optional[str] = typer.Option(None, help="Load a single namespace."),
    stored_language: Optional[str] = typer.Option(None, help="Previously stored preference."),
    reload: bool = typer.Option(False, help="Bypass cached entries for the language."),
    manifest: bool = typer.Option(False, help="Print the service manifest instead."),
    config: Optional[Path] = typer.Option(None, help="YAML settings file."),
) -> None:
    settings = _settings(config)
    loader = build_translation_loader(settings)
    backend = TranslationBackend(loader)
    resolved = resolve_initial_language(
        language,
        stored_language,
        supported=settings.loader.default_languages,
        default=settings.loader.fallback_language,
    )

    async def run() -> Any:
        if manifest:
            return (await loader.get_manifest()).to_dict()
        if namespace:
            return await backend.read(resolved, namespace)
        if reload:
            return await backend.reload_translations(resolved)
        return await backend.read_all(resolved)

    try:
        payload = asyncio.run(run())
    except TranslationLoadError as exc:
        console.print(f"[red]Failed to load translations for {resolved}:[/] {exc}")
        raise typer.Exit(code=1) from exc
    console.print_json(json.dumps(payload, ensure_ascii=False))


@app.command("serve")
def serve(
    host: str = typer.Option("127.0.0.1", help="Bind address."),
    port: int = typer.Option(3001, help="Bind port."),
    config: Optional[Path] = typer.Option(None, help="YAML settings file."),
) -> None:
    settings = _settings(config)
    uvicorn.run(create_app(settings), host=host, port=port)


if __name__ == "__main__":
    app()
