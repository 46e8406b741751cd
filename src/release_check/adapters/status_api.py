"""Fetcher del status API de instancias.

Un GET por instancia contra la URL configurada; del JSON solo se lee
`releaseNumber`. Todos los fallos (red, status != 200, payload inválido) se
traducen a `StatusFetchError` para que el comparador los convierta en un
resultado y no aborte al resto de instancias.
"""

from __future__ import annotations

import logging
from types import TracebackType

import httpx
from pydantic import ValidationError

from release_check.adapters.http_client import build_async_client
from release_check.core.config import AppSettings
from release_check.core.domain.models import StatusResponse
from release_check.core.errors import StatusFetchError

log = logging.getLogger(__name__)


def _describe_validation_error(exc: ValidationError) -> str:
    parts: list[str] = []
    for error in exc.errors():
        loc = ".".join(str(p) for p in error.get("loc", ())) or "body"
        parts.append(f"{loc}: {error.get('msg')}")
    return "; ".join(parts)


class SalesforceStatusFetcher:
    """Reads the release number of an instance from the public status API.

    The fetcher owns its `httpx.AsyncClient` unless one is passed in, so use
    it as an async context manager:

        async with SalesforceStatusFetcher(settings) as fetcher:
            version = await fetcher.fetch("NA1")
    """

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._owns_client = client is None
        self._client = client or build_async_client(self._settings)

    def build_url(self, instance: str) -> str:
        return self._settings.status_url_template.format(
            instance=instance,
            locale=self._settings.locale,
        )

    async def fetch(self, instance: str) -> str:
        url = self.build_url(instance)
        log.debug("GET %s", url)

        try:
            async with self._client.stream("GET", url) as response:
                if response.status_code != httpx.codes.OK:
                    raise StatusFetchError(
                        "API returned non-OK status: "
                        f"{response.status_code} {response.reason_phrase}",
                        instance=instance,
                    )
                body = await response.aread()
        except httpx.HTTPError as exc:
            detail = str(exc) or exc.__class__.__name__
            raise StatusFetchError(f"failed to fetch status: {detail}", instance=instance) from exc

        try:
            status = StatusResponse.model_validate_json(body)
        except ValidationError as exc:
            raise StatusFetchError(
                f"failed to decode response: {_describe_validation_error(exc)}",
                instance=instance,
            ) from exc

        return status.release_number

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "SalesforceStatusFetcher":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
