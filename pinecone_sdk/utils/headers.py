"""
Header providers applied to every outgoing request.

A provider is a (name, value) pair whose ``intercept`` stamps the header onto
an ``httpx.Request``. Transports apply them to each request before sending.
"""

from typing import Dict, List, Mapping, Optional

import httpx
import structlog

from pinecone_sdk.core.config import AUTH_HEADER_KEYS, PineconeSettings, get_settings
from pinecone_sdk.utils.useragent import build_user_agent

logger = structlog.get_logger(__name__)

API_VERSION_HEADER = "X-Pinecone-Api-Version"


class HeaderProvider:
    """Sets one header on each request it intercepts."""

    def __init__(self, name: str, value: str):
        self.name = name
        self.value = value

    def intercept(self, request: httpx.Request) -> None:
        request.headers[self.name] = self.value

    def __call__(self, request: httpx.Request) -> None:
        self.intercept(request)

    def __repr__(self) -> str:
        return f"<HeaderProvider name={self.name!r}>"


def build_shared_header_providers(
    headers: Optional[Mapping[str, str]] = None,
    source_tag: str = "",
    settings: Optional[PineconeSettings] = None,
) -> List[HeaderProvider]:
    """
    Assemble the providers shared by the control, data and inference transports.

    Order: User-Agent, API version, PINECONE_ADDITIONAL_HEADERS, then
    ``headers``. Later providers win, so explicit headers override the
    environment.
    """
    settings = settings or get_settings()

    providers = [
        HeaderProvider("User-Agent", build_user_agent(source_tag)),
        HeaderProvider(API_VERSION_HEADER, settings.api_version),
    ]

    merged: Dict[str, str] = dict(settings.additional_headers)
    if headers:
        merged.update(headers)

    for name, value in merged.items():
        providers.append(HeaderProvider(name, value))

    logger.debug(
        "built header providers",
        header_names=[p.name for p in providers],
        from_environment=len(settings.additional_headers),
    )
    return providers


def extract_auth_header(headers: Optional[Mapping[str, str]]) -> Dict[str, str]:
    """Return the first authentication header found in ``headers``, or ``{}``."""
    for key, value in (headers or {}).items():
        if key.lower() in AUTH_HEADER_KEYS:
            return {key: value}
    return {}
