"""
Tests for the HTTP transport and API error mapping.

Covers header application, status checks, error body parsing, retries on
transport failures and data-plane envelopes.
"""

import json

import httpx
import pytest

from pinecone_sdk.core.exceptions import (
    PineconeApiError,
    PineconeConnectionError,
    PineconeTimeoutError,
)
from pinecone_sdk.core.models import FetchRequest, QueryRequest, RequestEnvelope
from pinecone_sdk.data.transport import HttpTransport, handle_error_response_body
from pinecone_sdk.testing import RecordingTransport, create_mock_client
from pinecone_sdk.utils.headers import HeaderProvider


def _transport(recorder: RecordingTransport, max_retries: int = 3) -> HttpTransport:
    return HttpTransport(
        "https://index.example.io",
        header_providers=[HeaderProvider("Api-Key", "secret")],
        http_client=httpx.Client(transport=recorder),
        max_retries=max_retries,
        retry_backoff_min=0,
    )


class TestRequest:
    """Test plain requests."""

    def test_applies_header_providers(self):
        recorder = RecordingTransport(json_body={"ok": True})
        transport = _transport(recorder)

        data = transport.request_json("GET", "/indexes")

        assert data == {"ok": True}
        assert recorder.last_request.headers["Api-Key"] == "secret"
        assert str(recorder.last_request.url) == "https://index.example.io/indexes"

    def test_expected_status_other_than_200(self):
        recorder = RecordingTransport(status_code=202)
        transport = _transport(recorder)

        response = transport.request("DELETE", "/indexes/a", expected_status=202)

        assert response.status_code == 202
        assert transport.request_json("DELETE", "/indexes/a", expected_status=202) == {}

    def test_unexpected_status_raises(self):
        recorder = RecordingTransport(status_code=200, json_body={})
        transport = _transport(recorder)

        with pytest.raises(PineconeApiError) as exc_info:
            transport.request("POST", "/indexes", json={}, expected_status=201)

        assert exc_info.value.status_code == 200

    def test_http_errors_are_not_retried(self):
        recorder = RecordingTransport(status_code=503, json_body={"message": "unavailable"})
        transport = _transport(recorder)

        with pytest.raises(PineconeApiError):
            transport.request("GET", "/indexes")

        assert len(recorder.requests) == 1

    def test_base_url_trailing_slash_trimmed(self):
        recorder = RecordingTransport(json_body={})
        transport = HttpTransport("https://h.io/", http_client=httpx.Client(transport=recorder))

        transport.request("GET", "/models")

        assert str(recorder.last_request.url) == "https://h.io/models"


class TestRetries:
    """Test retry behavior for transport failures."""

    def test_connect_error_retried_then_wrapped(self):
        recorder = RecordingTransport(error=httpx.ConnectError("refused"))
        transport = _transport(recorder, max_retries=3)

        with pytest.raises(PineconeConnectionError, match="could not reach"):
            transport.request("GET", "/indexes")

        assert len(recorder.requests) == 3

    def test_timeout_wrapped(self):
        recorder = RecordingTransport(error=httpx.ReadTimeout("slow"))
        transport = _transport(recorder, max_retries=2)

        with pytest.raises(PineconeTimeoutError):
            transport.request("GET", "/indexes")

        assert len(recorder.requests) == 2

    def test_recovers_after_transient_failure(self):
        class FlakyTransport(httpx.BaseTransport):
            def __init__(self):
                self.calls = 0

            def handle_request(self, request):
                self.calls += 1
                if self.calls == 1:
                    raise httpx.ConnectError("first attempt fails")
                return httpx.Response(200, json={"indexes": []}, request=request)

        flaky = FlakyTransport()
        transport = HttpTransport(
            "https://h.io", http_client=httpx.Client(transport=flaky), retry_backoff_min=0
        )

        assert transport.request_json("GET", "/indexes") == {"indexes": []}
        assert flaky.calls == 2


class TestErrorBodies:
    """Test PineconeApiError construction from response bodies."""

    def test_control_plane_error_shape(self):
        response = httpx.Response(
            404,
            json={"error": {"code": "NOT_FOUND", "message": "Index movies not found"}, "status": 404},
        )

        err = handle_error_response_body(response, "failed to describe index: ")

        assert err.status_code == 404
        assert err.error_code == "NOT_FOUND"
        assert err.message == "failed to describe index: Index movies not found"
        payload = json.loads(str(err))
        assert payload["status_code"] == 404
        assert payload["message"] == "failed to describe index: Index movies not found"
        assert "body" in payload

    def test_data_plane_error_shape(self):
        response = httpx.Response(400, json={"code": 3, "message": "bad vector", "details": []})

        err = handle_error_response_body(response, "failed to upsert vectors: ")

        assert err.error_code == "3"
        assert err.message == "failed to upsert vectors: bad vector"
        assert err.error_details is None

    def test_unparseable_body_keeps_raw_text(self):
        response = httpx.Response(502, text="Bad Gateway")

        err = handle_error_response_body(response, "failed to list indexes: ")

        assert err.message == ""
        assert err.body == "Bad Gateway"
        assert json.loads(str(err)) == {"status_code": 502, "body": "Bad Gateway"}

    def test_details_kept(self):
        response = httpx.Response(
            400,
            json={"error": {"code": "INVALID_ARGUMENT", "message": "m", "details": "dimension"}, "status": 400},
        )

        err = handle_error_response_body(response)

        assert err.error_details == "dimension"
        assert err.message == "m"
        assert err.code == 400


class TestSendEnvelope:
    """Test data-plane envelopes."""

    def test_post_sends_camel_case_body_and_request_id(self):
        client, recorder = create_mock_client({"matches": []})
        transport = HttpTransport("https://idx.io", http_client=client)
        envelope = RequestEnvelope(
            path="/query",
            version="2025-04",
            namespace="ns",
            body=QueryRequest(namespace="ns", top_k=3, include_metadata=True, vector=[0.5]),
        )

        data = transport.send_envelope(envelope)

        assert data == {"matches": []}
        request = recorder.last_request
        assert request.method == "POST"
        assert request.headers["X-Request-Id"] == envelope.request_id
        assert request.headers["X-Pinecone-Api-Version"] == "2025-04"
        assert recorder.last_json() == {
            "namespace": "ns",
            "topK": 3,
            "includeValues": False,
            "includeMetadata": True,
            "vector": [0.5],
        }

    def test_get_sends_query_params(self):
        client, recorder = create_mock_client({"vectors": {}})
        transport = HttpTransport("https://idx.io", http_client=client)
        envelope = RequestEnvelope(
            path="/vectors/fetch",
            version="2025-04",
            namespace="ns",
            body=FetchRequest(ids=["a", "b"], namespace="ns"),
        )

        transport.send_envelope(envelope, method="GET")

        url = recorder.last_request.url
        assert url.path == "/vectors/fetch"
        assert url.params.get_list("ids") == ["a", "b"]
        assert url.params["namespace"] == "ns"
        assert recorder.last_request.content == b""

    def test_envelope_ids_are_unique(self):
        body = FetchRequest(ids=["a"])
        first = RequestEnvelope(path="/vectors/fetch", version="v", body=body)
        second = RequestEnvelope(path="/vectors/fetch", version="v", body=body)

        assert first.request_id != second.request_id
        assert first.operation == "Fetch"


class TestLifecycle:
    """Test client ownership."""

    def test_close_leaves_caller_client_open(self):
        client, _ = create_mock_client({})
        transport = HttpTransport("https://h.io", http_client=client)

        transport.close()

        assert not client.is_closed

    def test_close_owned_client(self):
        with HttpTransport("https://h.io") as transport:
            client = transport.client
        assert client.is_closed

    def test_with_headers_shares_client(self):
        client, recorder = create_mock_client({})
        parent = HttpTransport("https://h.io", [HeaderProvider("A", "1")], http_client=client)

        child = parent.with_headers([HeaderProvider("B", "2")], base_url="https://other.io")
        child.request("GET", "/x")

        assert child.client is parent.client
        assert recorder.last_request.headers["A"] == "1"
        assert recorder.last_request.headers["B"] == "2"
        assert recorder.last_request.url.host == "other.io"

    def test_with_headers_keeps_timeout(self):
        client, _ = create_mock_client({})
        parent = HttpTransport("https://h.io", http_client=client, timeout=5.0)

        child = parent.with_headers([])

        assert child.timeout == 5.0
