"""
HTTP transport shared by the control, data and inference clients.

Wraps an ``httpx.Client`` with header providers, transport-level retries and
mapping of unexpected HTTP statuses onto ``PineconeApiError``.
"""

import time
from typing import Any, Dict, List, Optional, Sequence

import httpx
import structlog

from pinecone_sdk.core.exceptions import (
    PineconeApiError,
    PineconeConnectionError,
    PineconeTimeoutError,
)
from pinecone_sdk.core.models import RequestEnvelope
from pinecone_sdk.utils.headers import API_VERSION_HEADER, HeaderProvider
from pinecone_sdk.utils.reliability import with_retry

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-Id"


def handle_error_response_body(response: httpx.Response, error_prefix: str = "") -> PineconeApiError:
    """
    Build a ``PineconeApiError`` from a failed response.

    Understands both the control-plane shape
    ``{"error": {"code", "message", "details"}, "status": n}`` and the
    data-plane shape ``{"code", "message", "details"}``. The prefix is only
    applied when a message could be extracted.
    """
    body = response.text
    message = ""
    error_code = ""
    details: Optional[str] = None

    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and payload.get("status"):
            message = str(error.get("message") or "")
            error_code = str(error.get("code") or "")
            if error.get("details") is not None:
                details = str(error["details"])
        elif "message" in payload:
            message = str(payload.get("message") or "")
            if payload.get("code") is not None:
                error_code = str(payload["code"])
            if payload.get("details"):
                details = str(payload["details"])

    if message:
        message = error_prefix + message

    try:
        path = response.request.url.path
    except RuntimeError:
        path = None

    logger.warning(
        "Pinecone API error",
        status_code=response.status_code,
        error_code=error_code or None,
        path=path,
        response_text=body[:500],
    )
    return PineconeApiError(
        status_code=response.status_code,
        message=message,
        error_code=error_code,
        body=body,
        details=details,
    )


class HttpTransport:
    """
    Sends requests to one Pinecone host.

    A caller-supplied ``http_client`` is used as-is and not closed by
    ``close()``; header providers are stamped on every request either way.
    """

    def __init__(
        self,
        base_url: str,
        header_providers: Sequence[HeaderProvider] = (),
        http_client: Optional[httpx.Client] = None,
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_backoff_min: float = 0.5,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.header_providers: List[HeaderProvider] = list(header_providers)
        self.max_retries = max_retries
        self.retry_backoff_min = retry_backoff_min

        self._owns_client = http_client is None
        self.client = http_client or httpx.Client(
            timeout=httpx.Timeout(timeout), follow_redirects=True
        )

    def with_headers(self, extra: Sequence[HeaderProvider], base_url: Optional[str] = None) -> "HttpTransport":
        """A transport sharing this one's HTTP client, with more header providers."""
        transport = HttpTransport(
            base_url or self.base_url,
            header_providers=[*self.header_providers, *extra],
            http_client=self.client,
            timeout=self.timeout,
            max_retries=self.max_retries,
            retry_backoff_min=self.retry_backoff_min,
        )
        return transport

    def _apply_headers(self, request: httpx.Request) -> None:
        for provider in self.header_providers:
            provider.intercept(request)

    def _send(self, request: httpx.Request) -> httpx.Response:
        sender = with_retry(
            max_attempts=self.max_retries, backoff_min=self.retry_backoff_min
        )(self.client.send)
        try:
            return sender(request)
        except httpx.TimeoutException as e:
            logger.error("Pinecone request timed out", url=str(request.url), error=str(e))
            raise PineconeTimeoutError(
                f"request to {request.url} timed out: {e}", details={"url": str(request.url)}
            ) from e
        except (httpx.ConnectError, httpx.RemoteProtocolError) as e:
            logger.error("Pinecone host unreachable", url=str(request.url), error=str(e))
            raise PineconeConnectionError(
                f"could not reach {request.url}: {e}", details={"url": str(request.url)}
            ) from e

    def request(
        self,
        method: str,
        path: str,
        json: Optional[Any] = None,
        params: Optional[Any] = None,
        expected_status: int = 200,
        error_prefix: str = "",
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """
        Send one request and check its status.

        Raises:
            PineconeApiError: status differs from ``expected_status``
            PineconeTimeoutError, PineconeConnectionError: after retries run out
        """
        request = self.client.build_request(
            method, f"{self.base_url}{path}", json=json, params=params
        )
        self._apply_headers(request)
        if headers:
            request.headers.update(headers)

        logger.debug("Making Pinecone API request", method=method, path=path, has_data=json is not None)
        response = self._send(request)

        if response.status_code != expected_status:
            raise handle_error_response_body(response, error_prefix)
        return response

    def request_json(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        """Like ``request`` but returns the decoded body (``{}`` when empty)."""
        response = self.request(method, path, **kwargs)
        if not response.content:
            return {}
        return response.json()

    def send_envelope(
        self, envelope: RequestEnvelope, method: str = "POST", error_prefix: str = ""
    ) -> Dict[str, Any]:
        """
        Send a data-plane envelope.

        POST bodies carry ``envelope.body`` as JSON; GET calls turn it into
        query parameters.
        """
        log = logger.bind(
            request_id=envelope.request_id,
            operation=envelope.operation,
            namespace=envelope.namespace,
        )

        if method == "GET":
            kwargs: Dict[str, Any] = {"params": envelope.body.to_params()}
        else:
            kwargs = {"json": envelope.body.to_wire()}

        started = time.monotonic()
        data = self.request_json(
            method,
            envelope.path,
            error_prefix=error_prefix,
            headers={REQUEST_ID_HEADER: envelope.request_id, API_VERSION_HEADER: envelope.version},
            **kwargs,
        )
        log.debug(
            "data plane request completed",
            path=envelope.path,
            latency_ms=round((time.monotonic() - started) * 1000, 1),
        )
        return data

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def __repr__(self) -> str:
        return f"<HttpTransport base_url={self.base_url!r}>"
