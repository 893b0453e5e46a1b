"""Parameter checks and host normalization."""

from typing import Any, Iterable
from urllib.parse import urlparse

from pinecone_sdk.core.exceptions import ValidationError


def check_missing_fields(obj: Any, required_fields: Iterable[str]) -> None:
    """
    Raise if any of ``required_fields`` is absent or empty on ``obj``.

    Works for mappings and plain objects. Zero, empty strings, empty
    collections and None all count as missing.
    """
    for name in required_fields:
        if isinstance(obj, dict):
            if name not in obj:
                raise ValidationError(f"field {name} is not valid")
            value = obj[name]
        else:
            if not hasattr(obj, name):
                raise ValidationError(f"field {name} is not valid")
            value = getattr(obj, name)

        if value is None or value == 0 or (hasattr(value, "__len__") and len(value) == 0):
            raise ValidationError(f"missing required field: {name}", details={"field": name})


def ensure_url_scheme(url: str) -> str:
    """Prefix ``https://`` when ``url`` carries no scheme."""
    if "://" not in url:
        return f"https://{url}"
    parsed = urlparse(url)
    if not parsed.netloc:
        raise ValidationError(f"invalid URL: {url}")
    return url


def ensure_host_has_https(host: str) -> str:
    """Index hosts are always reached over TLS."""
    if host.startswith("http://"):
        return "https://" + host[len("http://") :]
    if not host.startswith("https://"):
        return "https://" + host
    return host
