# tests/storage/test_elasticsearch.py
"""Tests for ElasticsearchHttpStorage using httpx.MockTransport."""

import httpx
import pytest
from structlog.testing import capture_logs

from tracelinks.storage.elasticsearch import ElasticsearchHttpStorage


def _storage(handler, **kwargs) -> ElasticsearchHttpStorage:  # type: ignore[no-untyped-def]
    return ElasticsearchHttpStorage(["http://es:9200"], transport=httpx.MockTransport(handler), **kwargs)


class TestCheck:
    def test_healthy_on_2xx(self) -> None:
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.path)
            return httpx.Response(200, json={"version": {"number": "7.17.0"}})

        result = _storage(handler).check()

        assert result.ok is True
        assert result.message == ""
        assert seen == ["/"]

    def test_http_error_status_fails(self) -> None:
        result = _storage(lambda request: httpx.Response(503)).check()

        assert result.ok is False
        assert isinstance(result.error, httpx.HTTPStatusError)
        assert "503" in result.message

    def test_connection_error_fails_without_raising(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        result = _storage(handler).check()

        assert result.ok is False
        assert isinstance(result.error, httpx.ConnectError)
        assert "connection refused" in result.message


class TestConfiguration:
    def test_requires_a_host(self) -> None:
        with pytest.raises(ValueError, match="At least one"):
            ElasticsearchHttpStorage([])

    def test_first_host_is_base_url(self) -> None:
        storage = ElasticsearchHttpStorage(["http://a:9200", "http://b:9200"], index="test_zipkin")

        assert str(storage.client.base_url).rstrip("/") == "http://a:9200"
        assert storage.index == "test_zipkin"
        storage.close()

    def test_close_is_idempotent(self) -> None:
        storage = _storage(lambda request: httpx.Response(200))

        storage.close()
        storage.close()

        assert storage.client.is_closed


class TestDebugLogging:
    def test_debug_logs_request_and_response_bodies(self) -> None:
        storage = _storage(lambda request: httpx.Response(200, text='{"status":"green"}'), debug=True)

        with capture_logs() as logs:
            storage.check()

        events = {entry["event"]: entry for entry in logs}
        assert events["Elasticsearch request"]["method"] == "GET"
        assert events["Elasticsearch response"]["status_code"] == 200
        assert events["Elasticsearch response"]["body"] == '{"status":"green"}'

    def test_no_body_logging_by_default(self) -> None:
        storage = _storage(lambda request: httpx.Response(200))

        with capture_logs() as logs:
            storage.check()

        assert not [entry for entry in logs if entry["event"].startswith("Elasticsearch re")]
