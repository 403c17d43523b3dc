from __future__ import annotations

import hashlib
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, cast

import orjson
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.responses import ORJSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import AppSettings, load_settings
from app.translation_wiring import build_translation_service
from domain.services.serve_translations import TranslationService
from domain.translations import UnknownNamespaceError, UnsupportedLanguageError

logger = logging.getLogger(__name__)

LANGUAGE_NOT_SUPPORTED = "Language not supported"
NAMESPACE_NOT_FOUND = "Namespace not found"
LOAD_FAILED = "Failed to load translations"
MANIFEST_FAILED = "Failed to fetch manifest"


@dataclass(frozen=True)
class TranslationContext:
    settings: AppSettings
    service: TranslationService


def create_app(settings: AppSettings) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> Any:
        health = await context.service.check_health()
        if health.healthy:
            logger.info(
                "Serving translations from %s (%s)",
                settings.translations.store_dir,
                ", ".join(context.service.languages),
            )
        else:
            logger.warning(
                "Translations directory %s is not accessible", settings.translations.store_dir
            )
        yield

    app = FastAPI(title="Onboarding translations", lifespan=lifespan)
    context = TranslationContext(settings=settings, service=build_translation_service(settings))
    app.state.context = context

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> ORJSONResponse:
        return ORJSONResponse({"error": exc.detail}, status_code=exc.status_code)

    router = APIRouter(prefix=settings.translations.api_prefix, tags=["translations"])

    @router.get("/health")
    async def health(context: TranslationContext = Depends(get_context)) -> ORJSONResponse:
        report = await context.service.check_health()
        status_code = 200 if report.healthy else 503
        return ORJSONResponse(report.to_dict(), status_code=status_code)

    @router.get("/manifest")
    def manifest(context: TranslationContext = Depends(get_context)) -> ORJSONResponse:
        try:
            payload = context.service.get_manifest().to_dict()
        except Exception as exc:
            logger.exception("Error fetching translation manifest.")
            raise HTTPException(status_code=500, detail=MANIFEST_FAILED) from exc
        return ORJSONResponse(payload)

    @router.get("/{language}")
    async def language_translations(
        language: str,
        request: Request,
        context: TranslationContext = Depends(get_context),
    ) -> Response:
        try:
            payload = await context.service.get_all_translations(language)
        except UnsupportedLanguageError as exc:
            raise HTTPException(status_code=404, detail=LANGUAGE_NOT_SUPPORTED) from exc
        except Exception as exc:
            logger.exception("Error loading translations for %s.", language)
            raise HTTPException(status_code=500, detail=LOAD_FAILED) from exc
        return cached_json_response(request, payload, context.settings)

    @router.get("/{language}/{namespace}")
    async def namespace_translations(
        language: str,
        namespace: str,
        request: Request,
        context: TranslationContext = Depends(get_context),
    ) -> Response:
        try:
            payload = await context.service.get_namespace_translations(language, namespace)
        except UnsupportedLanguageError as exc:
            raise HTTPException(status_code=404, detail=LANGUAGE_NOT_SUPPORTED) from exc
        except UnknownNamespaceError as exc:
            raise HTTPException(status_code=404, detail=NAMESPACE_NOT_FOUND) from exc
        except Exception as exc:
            logger.exception("Error loading %s for %s.", namespace, language)
            raise HTTPException(status_code=500, detail=LOAD_FAILED) from exc
        return cached_json_response(request, payload, context.settings)

    app.include_router(router)
    return app


def get_context(request: Request) -> TranslationContext:
    return cast(TranslationContext, request.app.state.context)


def compute_etag(body: bytes) -> str:
    return f'"{hashlib.sha256(body).hexdigest()}"'


def etag_matches(if_none_match: str | None, etag: str) -> bool:
    if not if_none_match:
        return False
    candidates = {part.strip().removeprefix("W/") for part in if_none_match.split(",")}
    return "*" in candidates or etag in candidates


def cached_json_response(request: Request, payload: Any, settings: AppSettings) -> Response:
    body = orjson.dumps(payload)
    etag = compute_etag(body)
    headers = {
        "Cache-Control": f"public, max-age={settings.translations.cache_max_age_seconds}",
        "ETag": etag,
    }
    if etag_matches(request.headers.get("if-none-match"), etag):
        return Response(status_code=304, headers=headers)
    return Response(content=body, media_type="application/json", headers=headers)


def create_default_app() -> FastAPI:
    return create_app(load_settings())
