"""
Pinecone control-plane client.

Manages indexes and collections, and hands out ``IndexConnection`` objects
for data-plane work against a specific index host.
"""

from typing import Any, Dict, List, Mapping, Optional, Union

import httpx
import structlog

from pinecone_sdk.core.config import (
    DEFAULT_CONTROLLER_HOST,
    DEFAULT_NAMESPACE,
    PineconeSettings,
    get_settings,
)
from pinecone_sdk.core.exceptions import ConfigurationError, PineconeApiError, ValidationError
from pinecone_sdk.core.models import (
    Cloud,
    Collection,
    DeletionProtection,
    Index,
    IndexMetric,
    VectorType,
)
from pinecone_sdk.data.index_connection import IndexConnection
from pinecone_sdk.data.inference import InferenceService
from pinecone_sdk.data.transport import HttpTransport
from pinecone_sdk.utils.headers import (
    API_VERSION_HEADER,
    HeaderProvider,
    build_shared_header_providers,
    extract_auth_header,
)
from pinecone_sdk.utils.validation import (
    check_missing_fields,
    ensure_host_has_https,
    ensure_url_scheme,
)

logger = structlog.get_logger(__name__)

API_KEY_HEADER = "Api-Key"


def _enum_value(value: Any) -> Any:
    return value.value if hasattr(value, "value") else value


class PineconeClient:
    """
    Entry point of the SDK.

    Example:
        client = PineconeClient(api_key="...")
        idx = client.describe_index("movies")
        conn = client.index(idx.host, namespace="2024")
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
        host: Optional[str] = None,
        http_client: Optional[httpx.Client] = None,
        source_tag: str = "",
        settings: Optional[PineconeSettings] = None,
    ):
        self.settings = settings or get_settings()
        self.source_tag = source_tag

        self.headers: Dict[str, str] = dict(headers or {})
        api_key = api_key or self.settings.api_key
        if api_key:
            self.headers[API_KEY_HEADER] = api_key

        # Explicit headers win over PINECONE_ADDITIONAL_HEADERS
        self._auth_header = extract_auth_header(self.headers) or extract_auth_header(
            self.settings.additional_headers
        )
        if not self._auth_header:
            raise ConfigurationError(
                "no API key provided, please pass an API key for authorization through "
                "api_key or the PINECONE_API_KEY environment variable",
                details={"missing": ["PINECONE_API_KEY"]},
            )

        self.host = ensure_url_scheme(
            host or self.settings.controller_host or DEFAULT_CONTROLLER_HOST
        )

        self._transport = HttpTransport(
            self.host,
            header_providers=build_shared_header_providers(
                self.headers, source_tag=source_tag, settings=self.settings
            ),
            http_client=http_client,
            timeout=self.settings.request_timeout,
            max_retries=self.settings.max_retries,
        )
        self.inference = InferenceService(self._transport)

        logger.info(
            "Pinecone client initialized",
            host=self.host,
            source_tag=source_tag or None,
            custom_http_client=http_client is not None,
        )

    @classmethod
    def from_headers(
        cls,
        headers: Mapping[str, str],
        host: Optional[str] = None,
        http_client: Optional[httpx.Client] = None,
        source_tag: str = "",
        settings: Optional[PineconeSettings] = None,
    ) -> "PineconeClient":
        """Build a client that authenticates through ``headers`` alone (e.g. a bearer token)."""
        settings = settings or get_settings()
        if settings.api_key:
            # An environment key must not shadow the caller's own auth header.
            settings = settings.model_copy(update={"api_key": None})
        return cls(
            headers=headers,
            host=host,
            http_client=http_client,
            source_tag=source_tag,
            settings=settings,
        )

    # Index connections

    def index(
        self,
        host: str,
        namespace: str = "",
        additional_headers: Optional[Mapping[str, str]] = None,
    ) -> IndexConnection:
        """
        Open a data-plane connection to an index.

        Args:
            host: Index host, as returned by ``describe_index``
            namespace: Target namespace; empty means ``__default__``
            additional_headers: Extra headers for this connection only

        Returns:
            IndexConnection sharing this client's HTTP connection pool
        """
        if not host:
            raise ValidationError("field Host is required to create an IndexConnection")

        merged: Dict[str, str] = dict(additional_headers or {})
        merged.update(self._auth_header)

        api_version = self.settings.api_version
        for name, value in merged.items():
            if name.lower() == API_VERSION_HEADER.lower():
                api_version = value

        transport = self._transport.with_headers(
            [HeaderProvider(name, value) for name, value in merged.items()],
            base_url=ensure_host_has_https(host),
        )
        return IndexConnection(
            transport, namespace=namespace or DEFAULT_NAMESPACE, api_version=api_version
        )

    # Indexes

    def list_indexes(self) -> List[Index]:
        data = self._transport.request_json(
            "GET", "/indexes", error_prefix="failed to list indexes: "
        )
        return [Index.model_validate(raw) for raw in data.get("indexes") or []]

    def describe_index(self, name: str) -> Index:
        if not name:
            raise ValidationError("an index name must be provided")
        data = self._transport.request_json(
            "GET", f"/indexes/{name}", error_prefix="failed to describe index: "
        )
        return Index.model_validate(data)

    def has_index(self, name: str) -> bool:
        """True when the index exists. Errors other than 404 propagate."""
        try:
            self.describe_index(name)
        except PineconeApiError as e:
            if e.status_code == 404:
                return False
            raise
        return True

    def create_serverless_index(
        self,
        name: str,
        cloud: Union[Cloud, str],
        region: str,
        dimension: Optional[int] = None,
        metric: Optional[Union[IndexMetric, str]] = None,
        vector_type: Optional[Union[VectorType, str]] = None,
        deletion_protection: Optional[Union[DeletionProtection, str]] = None,
        source_collection: Optional[str] = None,
        tags: Optional[Dict[str, str]] = None,
    ) -> Index:
        """
        Create a serverless index.

        Dense indexes need a ``dimension``. Sparse indexes must not set one and
        always use the dotproduct metric.
        """
        if not name or not cloud or not region:
            raise ValidationError(
                "fields name, cloud, and region must be included to create a serverless index"
            )

        vector_type = _enum_value(vector_type) or VectorType.DENSE.value
        metric = _enum_value(metric)
        if vector_type not in (VectorType.DENSE.value, VectorType.SPARSE.value):
            raise ValidationError(f"unsupported vector type: {vector_type}")

        if vector_type == VectorType.SPARSE.value:
            if dimension is not None:
                raise ValidationError("dimension should not be set when vector_type is 'sparse'")
            if metric is not None and metric != IndexMetric.DOTPRODUCT.value:
                raise ValidationError("metric should be 'dotproduct' when vector_type is 'sparse'")
            metric = IndexMetric.DOTPRODUCT.value
        elif dimension is None:
            raise ValidationError("dimension should be set when vector_type is 'dense'")

        serverless: Dict[str, Any] = {"cloud": _enum_value(cloud), "region": region}
        if source_collection:
            serverless["source_collection"] = source_collection

        payload = {
            "name": name,
            "dimension": dimension,
            "metric": metric,
            "vector_type": vector_type,
            "deletion_protection": _enum_value(deletion_protection),
            "tags": tags,
            "spec": {"serverless": serverless},
        }
        return self._create_index(payload)

    def create_pod_index(
        self,
        name: str,
        dimension: int,
        environment: str,
        pod_type: str,
        metric: Optional[Union[IndexMetric, str]] = None,
        replicas: int = 1,
        shards: int = 1,
        deletion_protection: Optional[Union[DeletionProtection, str]] = None,
        source_collection: Optional[str] = None,
        metadata_indexed: Optional[List[str]] = None,
        tags: Optional[Dict[str, str]] = None,
    ) -> Index:
        """
        Create a pod-based index.

        ``replicas`` and ``shards`` are raised to at least 1, and the index is
        provisioned with ``replicas * shards`` pods.
        """
        if not name or not dimension or dimension < 1 or not environment or not pod_type:
            raise ValidationError(
                "fields name, dimension, environment, and pod_type must be included "
                "to create a pod index"
            )

        replicas = max(replicas or 1, 1)
        shards = max(shards or 1, 1)

        pod: Dict[str, Any] = {
            "environment": environment,
            "pod_type": pod_type,
            "pods": replicas * shards,
            "replicas": replicas,
            "shards": shards,
        }
        if source_collection:
            pod["source_collection"] = source_collection
        if metadata_indexed is not None:
            pod["metadata_config"] = {"indexed": metadata_indexed}

        payload = {
            "name": name,
            "dimension": dimension,
            "metric": _enum_value(metric),
            "deletion_protection": _enum_value(deletion_protection),
            "tags": tags,
            "spec": {"pod": pod},
        }
        return self._create_index(payload)

    def _create_index(self, payload: Dict[str, Any]) -> Index:
        payload = {k: v for k, v in payload.items() if v is not None}
        data = self._transport.request_json(
            "POST",
            "/indexes",
            json=payload,
            expected_status=201,
            error_prefix="failed to create index: ",
        )
        index = Index.model_validate(data)
        logger.info("index created", name=index.name, kind=index.spec.kind if index.spec else None)
        return index

    def delete_index(self, name: str) -> None:
        if not name:
            raise ValidationError("an index name must be provided")
        self._transport.request(
            "DELETE", f"/indexes/{name}", expected_status=202, error_prefix="failed to delete index: "
        )
        logger.info("index deleted", name=name)

    def configure_index(
        self,
        name: str,
        pod_type: Optional[str] = None,
        replicas: Optional[int] = None,
        deletion_protection: Optional[Union[DeletionProtection, str]] = None,
        tags: Optional[Dict[str, str]] = None,
    ) -> Index:
        """
        Change pod size, replica count, deletion protection or tags.

        New tags are merged over the index's current tags.
        """
        if pod_type is None and replicas is None and deletion_protection is None and tags is None:
            raise ValidationError(
                "must specify pod_type, replicas, deletion_protection, or tags to configure an index"
            )

        payload: Dict[str, Any] = {}
        pod: Dict[str, Any] = {}
        if pod_type:
            pod["pod_type"] = pod_type
        if replicas is not None:
            pod["replicas"] = replicas
        if pod:
            payload["spec"] = {"pod": pod}
        if deletion_protection is not None:
            payload["deletion_protection"] = _enum_value(deletion_protection)

        if tags is not None:
            current = self.describe_index(name)
            merged = dict(current.tags or {})
            merged.update(tags)
            payload["tags"] = merged

        data = self._transport.request_json(
            "PATCH", f"/indexes/{name}", json=payload, error_prefix="failed to configure index: "
        )
        logger.info("index configured", name=name, fields=sorted(payload))
        return Index.model_validate(data)

    # Collections

    def list_collections(self) -> List[Collection]:
        data = self._transport.request_json(
            "GET", "/collections", error_prefix="failed to list collections: "
        )
        return [Collection.model_validate(raw) for raw in data.get("collections") or []]

    def describe_collection(self, name: str) -> Collection:
        if not name:
            raise ValidationError("a collection name must be provided")
        data = self._transport.request_json(
            "GET", f"/collections/{name}", error_prefix="failed to describe collection: "
        )
        return Collection.model_validate(data)

    def create_collection(self, name: str, source: str) -> Collection:
        """Snapshot the pod-based index ``source`` into a new collection."""
        check_missing_fields({"name": name, "source": source}, ["name", "source"])
        data = self._transport.request_json(
            "POST",
            "/collections",
            json={"name": name, "source": source},
            expected_status=201,
            error_prefix="failed to create collection: ",
        )
        logger.info("collection created", name=name, source=source)
        return Collection.model_validate(data)

    def delete_collection(self, name: str) -> None:
        if not name:
            raise ValidationError("a collection name must be provided")
        self._transport.request(
            "DELETE",
            f"/collections/{name}",
            expected_status=202,
            error_prefix="failed to delete collection: ",
        )
        logger.info("collection deleted", name=name)

    def close(self) -> None:
        self._transport.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def __repr__(self) -> str:
        return f"<PineconeClient host={self.host!r}>"
