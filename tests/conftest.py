"""Configure pytest fixtures and environment for Pinecone SDK tests."""

import os

import pytest

from pinecone_sdk.core.config import reset_settings


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Run every test without Pinecone env vars, a stray .env file or cached settings."""
    for name in list(os.environ):
        if name.upper().startswith("PINECONE_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    reset_settings()
    yield
    reset_settings()
