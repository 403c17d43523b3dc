from __future__ import annotations

from typing import Any

import httpx
import orjson

from domain.ports.translations import TranslationApi
from domain.translations import TranslationLoadError

DEFAULT_API_URL = "http://localhost:3001/api"
DEFAULT_TIMEOUT_SECONDS = 10.0


class HttpTranslationApi(TranslationApi):
    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base_url

    async def get_json(self, path: str) -> Any:
        url = f"{self._base_url}/{path.lstrip('/')}"
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
                follow_redirects=True,
            ) as client:
                response = await client.get(url, headers={"Accept": "application/json"})
        except httpx.HTTPError as exc:
            msg = f"Request to {url} failed: {exc}"
            raise TranslationLoadError(msg) from exc
        if not response.is_success:
            msg = f"Failed to load {url}: {response.status_code}"
            raise TranslationLoadError(msg)
        try:
            return orjson.loads(response.content)
        except orjson.JSONDecodeError as exc:
            msg = f"Invalid JSON from {url}"
            raise TranslationLoadError(msg) from exc
