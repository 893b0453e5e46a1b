"""User-Agent construction for outgoing requests."""

import re

from pinecone_sdk.core.config import SDK_VERSION

APP_NAME = "python-client"

_DISALLOWED = re.compile(r"[^a-z0-9_ :]")


def build_user_agent(source_tag: str = "") -> str:
    """
    Build the User-Agent value, e.g. ``python-client/0.1.0; source_tag=my_app;``.

    The source tag is only appended when non-empty.
    """
    user_agent = f"{APP_NAME}/{SDK_VERSION}"
    if source_tag:
        user_agent += _build_source_tag_field(source_tag)
    return user_agent


def _build_source_tag_field(source_tag: str) -> str:
    # lowercase, restrict charset, then collapse whitespace runs into "_"
    tag = _DISALLOWED.sub("", source_tag.lower())
    tag = "_".join(tag.split())
    return f"; source_tag={tag};"
