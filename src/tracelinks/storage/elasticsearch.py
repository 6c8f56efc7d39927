# src/tracelinks/storage/elasticsearch.py
"""Elasticsearch HTTP storage handle.

Only the parts the dependencies job and its test fixtures need are
here: where the cluster is, which index prefix to use, and whether the
cluster is reachable. Reading spans and writing links are the job of the
storage layer that owns the wire protocol.
"""

from __future__ import annotations

from collections.abc import Sequence

import httpx
import structlog

from tracelinks.contracts import CheckResult

logger = structlog.get_logger(__name__)


class ElasticsearchHttpStorage:
    """httpx-backed handle to an Elasticsearch cluster.

    Thread Safety:
        httpx.Client is thread-safe; one storage may be shared by every
        test in a session.

    Example:
        storage = ElasticsearchHttpStorage(["http://localhost:9200"], index="zipkin")
        if not storage.check().ok:
            ...
        storage.close()
    """

    def __init__(
        self,
        hosts: Sequence[str],
        *,
        index: str = "zipkin",
        flush_on_writes: bool = False,
        debug: bool = False,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the storage handle.

        Args:
            hosts: Base URLs of cluster nodes; the first one is used
            index: Index name prefix
            flush_on_writes: Refresh the index after each write so reads
                see it immediately (tests)
            debug: Log every request and response body
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests use MockTransport)
        """
        if not hosts:
            raise ValueError("At least one Elasticsearch host is required")
        self.hosts = tuple(hosts)
        self.index = index
        self.flush_on_writes = flush_on_writes
        self.debug = debug
        event_hooks = {"request": [_log_request], "response": [_log_response]} if debug else None
        self._client = httpx.Client(
            base_url=self.hosts[0],
            timeout=timeout,
            transport=transport,
            event_hooks=event_hooks,
        )
        self._closed = False

    @property
    def client(self) -> httpx.Client:
        return self._client

    def check(self) -> CheckResult:
        """Probe the cluster root endpoint.

        Returns:
            CheckResult.healthy() on a 2xx answer, otherwise a failed
            result carrying the connection or HTTP error. Never raises for
            connectivity problems.
        """
        try:
            response = self._client.get("/")
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.debug("Elasticsearch health check failed", host=self.hosts[0], error=str(e))
            return CheckResult.failed(e)
        return CheckResult.healthy()

    def close(self) -> None:
        """Close the underlying HTTP client. Idempotent."""
        if self._closed:
            return
        self._closed = True
        self._client.close()

    def __repr__(self) -> str:
        return f"ElasticsearchHttpStorage(hosts={list(self.hosts)!r}, index={self.index!r})"


def _log_request(request: httpx.Request) -> None:
    body = request.content.decode("utf-8", errors="replace") if request.content else ""
    logger.debug("Elasticsearch request", method=request.method, url=str(request.url), body=body)


def _log_response(response: httpx.Response) -> None:
    # Event hooks run before the body is read
    response.read()
    logger.debug(
        "Elasticsearch response",
        method=response.request.method,
        url=str(response.request.url),
        status_code=response.status_code,
        body=response.text,
    )
