"""Test doubles for code built on the Pinecone SDK."""

from pinecone_sdk.testing.mocks import RecordingTransport, assert_headers, create_mock_client

__all__ = ["RecordingTransport", "assert_headers", "create_mock_client"]
