"""
Configuration management for the Pinecone SDK.

Provides centralized, validated configuration from environment variables
with proper type checking and defaults.
"""

from __future__ import annotations

import json
from typing import Annotated, Dict, List, Optional

import structlog
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

logger = structlog.get_logger(__name__)

SDK_VERSION = "0.1.0"
PINECONE_API_VERSION = "2025-04"
DEFAULT_CONTROLLER_HOST = "https://api.pinecone.io"
DEFAULT_NAMESPACE = "__default__"

# Header names accepted as credentials instead of an API key
AUTH_HEADER_KEYS = ("api-key", "authorization", "access_token")


class PineconeSettings(BaseSettings):
    """Client settings read from the environment."""

    api_key: Optional[str] = Field(default=None, alias="PINECONE_API_KEY")
    controller_host: Optional[str] = Field(default=None, alias="PINECONE_CONTROLLER_HOST")
    additional_headers: Annotated[Dict[str, str], NoDecode] = Field(
        default_factory=dict, alias="PINECONE_ADDITIONAL_HEADERS"
    )
    api_version: str = Field(default=PINECONE_API_VERSION, alias="PINECONE_API_VERSION")

    # Transport settings
    request_timeout: float = Field(default=30.0, alias="PINECONE_REQUEST_TIMEOUT")
    max_retries: int = Field(default=3, ge=1, alias="PINECONE_MAX_RETRIES")

    debug: bool = Field(default=False, alias="PINECONE_DEBUG")

    @field_validator("additional_headers", mode="before")
    @classmethod
    def parse_additional_headers(cls, v):
        if v is None or v == "":
            return {}
        if isinstance(v, str):
            try:
                parsed = json.loads(v)
            except json.JSONDecodeError as e:
                logger.warning("failed to parse PINECONE_ADDITIONAL_HEADERS", error=str(e))
                return {}
            if not isinstance(parsed, dict):
                logger.warning(
                    "PINECONE_ADDITIONAL_HEADERS is not a JSON object",
                    value_type=type(parsed).__name__,
                )
                return {}
            return {str(k): str(val) for k, val in parsed.items()}
        return v

    @field_validator("debug", mode="before")
    @classmethod
    def parse_debug(cls, v):
        if isinstance(v, str):
            return v.lower() in ("1", "true", "yes")
        return bool(v)

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


# Global settings instance
settings: Optional[PineconeSettings] = None


def get_settings() -> PineconeSettings:
    """Get the global settings instance."""
    global settings
    if settings is None:
        settings = PineconeSettings()
    return settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global settings
    settings = None


def validate_required_settings(for_workflow: str = "control") -> List[str]:
    """
    Validate that required settings are present.

    Args:
        for_workflow: "control" needs an API key or an Authorization header
            in PINECONE_ADDITIONAL_HEADERS; "minimal" needs nothing.

    Returns:
        List of missing required settings
    """
    missing = []
    config = get_settings()

    if for_workflow == "control":
        has_auth_header = any(
            k.lower() in AUTH_HEADER_KEYS for k in config.additional_headers
        )
        if not config.api_key and not has_auth_header:
            missing.append("PINECONE_API_KEY")

    return missing


def _mask(value: Optional[str]) -> str:
    if not value:
        return "✗"
    if len(value) <= 8:
        return "****"
    return f"{value[:4]}...{value[-4:]}"


def print_configuration_summary():
    """Print a summary of the current configuration for debugging."""
    config = get_settings()
    print("=== Pinecone SDK Configuration Summary ===")
    print(f"SDK Version: {SDK_VERSION}")
    print(f"API Version: {config.api_version}")
    print(f"API Key: {_mask(config.api_key)}")
    print(f"Controller Host: {config.controller_host or DEFAULT_CONTROLLER_HOST}")
    print(f"Additional Headers: {', '.join(sorted(config.additional_headers)) or 'none'}")
    print(f"Request Timeout: {config.request_timeout}s")
    print(f"Max Retries: {config.max_retries}")
    print(f"Debug Mode: {config.debug}")
