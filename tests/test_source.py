"""Tests for the external tender source client."""

import httpx
import pytest

from tendersync.core.config.models import SourceConfig
from tendersync.core.errors import FetchError, MalformedResponseError
from tendersync.core.source.envelope import extract_records
from tendersync.core.source.http_source import TenderSource

from conftest import SOURCE_URL, make_tender


class TestExtractRecords:
    """Test suite for envelope extraction."""

    def test_results_key(self):
        assert extract_records({"results": [1, 2]}) == [1, 2]

    def test_data_key(self):
        assert extract_records({"data": [{"tenderId": 1}]}) == [{"tenderId": 1}]

    def test_results_preferred_over_data(self):
        """results wins when both are arrays."""
        assert extract_records({"results": ["r"], "data": ["d"]}) == ["r"]

    def test_falls_back_to_data_when_results_not_array(self):
        assert extract_records({"results": None, "data": ["d"]}) == ["d"]

    def test_empty_array_is_valid(self):
        assert extract_records({"results": []}) == []

    @pytest.mark.parametrize("body", [{}, {"results": "x"}, [1, 2], None, "text"])
    def test_malformed(self, body):
        """Anything without an array under results/data is malformed."""
        with pytest.raises(MalformedResponseError) as exc_info:
            extract_records(body)

        assert "neither results nor data array found" in str(exc_info.value)
        assert isinstance(exc_info.value, FetchError)


class TestTenderSource:
    """Test suite for TenderSource."""

    @pytest.mark.asyncio
    async def test_fetch_records_sends_params_and_headers(self, source_stub, tender_source):
        """One GET with the query parameters and no-cache headers."""
        source_stub.respond_records([make_tender(1), make_tender(2)])

        records = await tender_source.fetch_records({"PageSize": "10", "TenderCategory": "2"})

        assert [r["tenderId"] for r in records] == [1, 2]
        assert len(source_stub.requests) == 1

        request = source_stub.requests[0]
        assert request.method == "GET"
        assert str(request.url).startswith(SOURCE_URL)
        assert source_stub.last_params == {"PageSize": "10", "TenderCategory": "2"}
        assert request.headers["Cache-Control"] == "no-cache"
        assert request.headers["Pragma"] == "no-cache"
        assert request.headers["Accept"] == "application/json"

    @pytest.mark.asyncio
    async def test_non_2xx_raises_with_truncated_body(self, source_stub, tender_source):
        """Error statuses carry the code and at most 500 body characters."""
        source_stub.respond_text("x" * 2000, status_code=503)

        with pytest.raises(FetchError) as exc_info:
            await tender_source.fetch({"PageSize": "50"})

        error = exc_info.value
        assert error.status_code == 503
        assert str(error) == f"API responded with status 503: {'x' * 500}"

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self, source_stub, tender_source):
        """Undecodable bodies raise FetchError with a raw preview."""
        source_stub.respond_text("<html>maintenance</html>")

        with pytest.raises(FetchError) as exc_info:
            await tender_source.fetch()

        message = str(exc_info.value)
        assert message.startswith("Failed to parse API response as JSON:")
        assert "Raw response: <html>maintenance</html>" in message

    @pytest.mark.asyncio
    async def test_timeout_raises_fetch_error(self, source_stub, tender_source):
        """Transport timeouts map to FetchError."""

        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        source_stub.handler = handler

        with pytest.raises(FetchError) as exc_info:
            await tender_source.fetch()

        assert "timed out after 5s" in str(exc_info.value)
        assert isinstance(exc_info.value.cause, httpx.TimeoutException)

    @pytest.mark.asyncio
    async def test_transport_error_raises_fetch_error(self, source_stub, tender_source):
        """Connection failures map to FetchError."""

        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        source_stub.handler = handler

        with pytest.raises(FetchError) as exc_info:
            await tender_source.fetch()

        assert str(exc_info.value).startswith("Transport error:")

    @pytest.mark.asyncio
    async def test_malformed_envelope(self, source_stub, tender_source):
        """Decoded bodies without a record array raise MalformedResponseError."""
        source_stub.respond_json({"items": []})

        with pytest.raises(MalformedResponseError):
            await tender_source.fetch_records()

    @pytest.mark.asyncio
    async def test_injected_client_left_open(self, source_stub):
        """close() does not touch a caller-owned client."""
        client = source_stub.client()
        source = TenderSource(url=SOURCE_URL, client=client)

        await source.close()

        assert not client.is_closed
        await client.aclose()

    @pytest.mark.asyncio
    async def test_owned_client_closed(self):
        """A source closes the client it created."""
        source = TenderSource.from_config(SourceConfig(url=SOURCE_URL, timeout_seconds=3))
        client = await source._ensure_client()

        async with source:
            pass

        assert client.is_closed
        assert source.timeout == 3

    def test_extra_headers_from_config(self):
        """Configured headers are merged into the defaults."""
        source = TenderSource.from_config(
            SourceConfig(headers={"X-Api-Key": "secret"}, user_agent="agent/1.0")
        )

        assert source.default_headers["X-Api-Key"] == "secret"
        assert source.default_headers["User-Agent"] == "agent/1.0"
