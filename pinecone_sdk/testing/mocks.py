"""
HTTP doubles for exercising the SDK without a Pinecone backend.

``RecordingTransport`` plugs into ``httpx.Client(transport=...)``, remembers
every request and answers with a canned response.
"""

import json
from typing import Any, List, Mapping, Optional, Tuple

import httpx


class RecordingTransport(httpx.BaseTransport):
    """Records requests and returns one fixed response (or raises ``error``)."""

    def __init__(
        self,
        status_code: int = 200,
        json_body: Optional[Any] = None,
        error: Optional[Exception] = None,
    ):
        self.status_code = status_code
        self.json_body = json_body
        self.error = error
        self.requests: List[httpx.Request] = []

    @property
    def last_request(self) -> Optional[httpx.Request]:
        return self.requests[-1] if self.requests else None

    def last_json(self) -> Any:
        """Decoded JSON body of the most recent request."""
        if self.last_request is None or not self.last_request.content:
            return None
        return json.loads(self.last_request.content)

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)

        if self.error is not None:
            raise self.error

        if self.json_body is None:
            return httpx.Response(self.status_code, request=request)
        return httpx.Response(self.status_code, json=self.json_body, request=request)


def create_mock_client(
    json_body: Optional[Any] = None, status_code: int = 200
) -> Tuple[httpx.Client, RecordingTransport]:
    """An ``httpx.Client`` wired to a fresh ``RecordingTransport``."""
    transport = RecordingTransport(status_code=status_code, json_body=json_body)
    return httpx.Client(transport=transport), transport


def assert_headers(request: httpx.Request, expected: Mapping[str, str]) -> None:
    """Assert that ``request`` carries every header in ``expected`` with the same value."""
    for name, value in expected.items():
        actual = request.headers.get(name)
        assert actual == value, f"header {name!r}: expected {value!r}, got {actual!r}"
