import asyncio
from typing import Callable

import httpx
import pytest

from release_check.adapters.status_api import SalesforceStatusFetcher
from release_check.core.config import AppSettings
from release_check.core.errors import StatusFetchError


class FakeFetcher:
    """In-memory fetcher: maps instance -> version or exception."""

    def __init__(self, versions, delay: float = 0.0):
        self.versions = versions
        self.delay = delay
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def fetch(self, instance: str) -> str:
        self.calls.append(instance)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            value = self.versions[instance]
            if isinstance(value, Exception):
                raise value
            return value
        finally:
            self.in_flight -= 1


def fetch_error(instance: str, message: str = "API returned non-OK status: 503 Service Unavailable"):
    return StatusFetchError(message, instance=instance)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "RELEASE_CHECK_STATUS_URL_TEMPLATE",
        "RELEASE_CHECK_LOCALE",
        "RELEASE_CHECK_HTTP_TIMEOUT_SECONDS",
        "RELEASE_CHECK_USER_AGENT",
        "RELEASE_CHECK_MAX_CONCURRENCY",
        "RELEASE_CHECK_FAIL_ON_ERROR",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def settings():
    return AppSettings()


@pytest.fixture
def status_handler():
    """Default handler: every instance reports release 250.12."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"releaseNumber": "250.12", "key": "NA1"})

    return handler


@pytest.fixture
def make_fetcher(settings) -> Callable[..., SalesforceStatusFetcher]:
    def _make(handler) -> SalesforceStatusFetcher:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return SalesforceStatusFetcher(settings, client=client)

    return _make
