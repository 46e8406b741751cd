"""Tests for the status API fetcher"""

import asyncio

import httpx
import pytest

from release_check.adapters.http_client import build_async_client
from release_check.adapters.status_api import SalesforceStatusFetcher
from release_check.core.config import AppSettings
from release_check.core.errors import StatusFetchError


def _fetch(fetcher, instance):
    return asyncio.run(fetcher.fetch(instance))


class TestSalesforceStatusFetcher:
    def test_returns_release_number(self, make_fetcher):
        fetcher = make_fetcher(lambda request: httpx.Response(200, json={"releaseNumber": "v1"}))
        assert _fetch(fetcher, "NA1") == "v1"

    def test_requests_preview_status_url(self, make_fetcher):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"releaseNumber": "v1"})

        _fetch(make_fetcher(handler), "EU5")

        assert len(seen) == 1
        assert seen[0].method == "GET"
        assert str(seen[0].url) == (
            "https://status.salesforce.com/api/instances/EU5/status/preview?locale=en"
        )

    def test_ignores_extra_fields(self, make_fetcher):
        payload = {"releaseNumber": "250.12", "key": "NA1", "releaseVersion": "Spring '25"}
        fetcher = make_fetcher(lambda request: httpx.Response(200, json=payload))
        assert _fetch(fetcher, "NA1") == "250.12"

    def test_non_ok_status(self, make_fetcher):
        fetcher = make_fetcher(lambda request: httpx.Response(503))

        with pytest.raises(StatusFetchError) as excinfo:
            _fetch(fetcher, "CS42")

        assert str(excinfo.value) == "API returned non-OK status: 503 Service Unavailable"
        assert excinfo.value.instance == "CS42"

    def test_non_ok_success_code_is_an_error(self, make_fetcher):
        fetcher = make_fetcher(lambda request: httpx.Response(204))

        with pytest.raises(StatusFetchError, match="non-OK status: 204"):
            _fetch(fetcher, "NA1")

    def test_malformed_body(self, make_fetcher):
        fetcher = make_fetcher(lambda request: httpx.Response(200, content=b"<html>oops</html>"))

        with pytest.raises(StatusFetchError, match="^failed to decode response"):
            _fetch(fetcher, "NA1")

    def test_missing_release_number(self, make_fetcher):
        fetcher = make_fetcher(lambda request: httpx.Response(200, json={"key": "NA1"}))

        with pytest.raises(StatusFetchError, match="releaseNumber"):
            _fetch(fetcher, "NA1")

    def test_transport_error(self, make_fetcher):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(StatusFetchError) as excinfo:
            _fetch(make_fetcher(handler), "NA1")

        assert str(excinfo.value) == "failed to fetch status: connection refused"
        assert isinstance(excinfo.value.__cause__, httpx.ConnectError)

    def test_custom_template_and_locale(self):
        settings = AppSettings(
            status_url_template="https://status.example.test/{instance}?lang={locale}",
            locale="fr",
        )
        fetcher = SalesforceStatusFetcher(settings)
        assert fetcher.build_url("NA1") == "https://status.example.test/NA1?lang=fr"

    def test_closes_owned_client(self, settings):
        async def scenario():
            async with SalesforceStatusFetcher(settings) as fetcher:
                client = fetcher._client
            return client

        assert asyncio.run(scenario()).is_closed

    def test_keeps_external_client_open(self, settings):
        async def scenario():
            client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
            async with SalesforceStatusFetcher(settings, client=client):
                pass
            still_open = not client.is_closed
            await client.aclose()
            return still_open

        assert asyncio.run(scenario())


class TestBuildAsyncClient:
    def test_default_headers_and_no_timeout(self, settings):
        client = build_async_client(settings)
        assert client.headers["User-Agent"] == settings.user_agent
        assert client.headers["Accept"] == "application/json"
        assert client.timeout.read is None
        assert client.follow_redirects is True

    def test_configured_timeout(self):
        client = build_async_client(AppSettings(http_timeout_seconds=3))
        assert client.timeout.connect == 3
        assert client.timeout.read == 3

    def test_extra_headers(self, settings):
        client = build_async_client(settings, extra_headers={"X-Trace": "1"})
        assert client.headers["X-Trace"] == "1"
