"""
Data-plane client for a single Pinecone index.

Every operation builds a ``RequestEnvelope`` (request id, REST path, API
version, namespace, body) and hands it to the shared ``HttpTransport``.
"""

from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Union

import pydantic
import structlog

from pinecone_sdk.core.config import DEFAULT_NAMESPACE, PINECONE_API_VERSION
from pinecone_sdk.core.exceptions import ValidationError
from pinecone_sdk.core.models import (
    DeleteRequest,
    DescribeIndexStatsRequest,
    DescribeIndexStatsResponse,
    FetchRequest,
    FetchVectorsResponse,
    ListRequest,
    ListVectorsResponse,
    NdArray,
    QueryRequest,
    QueryVectorsResponse,
    RequestBody,
    RequestEnvelope,
    ScoredVector,
    SparseValues,
    UpdateRequest,
    UpsertRequest,
    Usage,
    Vector,
)
from pinecone_sdk.data.transport import HttpTransport
from pinecone_sdk.utils.ndarray import float_ndarray_to_arr

logger = structlog.get_logger(__name__)

UPSERT_PATH = "/vectors/upsert"
FETCH_PATH = "/vectors/fetch"
LIST_PATH = "/vectors/list"
UPDATE_PATH = "/vectors/update"
DELETE_PATH = "/vectors/delete"
QUERY_PATH = "/query"
DESCRIBE_INDEX_STATS_PATH = "/describe_index_stats"

SparseLike = Union[SparseValues, Mapping[str, Any]]
VectorLike = Union[Vector, Mapping[str, Any]]


def _as_sparse(sparse_values: Optional[SparseLike]) -> Optional[SparseValues]:
    if sparse_values is None or isinstance(sparse_values, SparseValues):
        return sparse_values
    try:
        return SparseValues.model_validate(sparse_values)
    except pydantic.ValidationError as e:
        raise ValidationError(f"invalid sparse values: {e}") from e


def _as_vector(vector: VectorLike) -> Vector:
    if isinstance(vector, Vector):
        return vector
    try:
        return Vector.model_validate(vector)
    except pydantic.ValidationError as e:
        raise ValidationError(f"invalid vector: {e}") from e


def _usage(data: Dict[str, Any]) -> Optional[Usage]:
    if not data.get("usage"):
        return None
    return Usage.model_validate(data["usage"])


class IndexConnection:
    """
    Performs data-plane operations against one index host and namespace.

    Obtain one through ``PineconeClient.index``. ``with_namespace`` returns a
    connection to another namespace that shares the same HTTP client.
    """

    def __init__(
        self,
        transport: HttpTransport,
        namespace: str = DEFAULT_NAMESPACE,
        api_version: str = PINECONE_API_VERSION,
        owns_transport: bool = False,
    ):
        self.transport = transport
        self._namespace = namespace
        self.api_version = api_version
        self._owns_transport = owns_transport

        logger.debug("index connection created", host=transport.base_url, namespace=namespace)

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def host(self) -> str:
        return self.transport.base_url

    def with_namespace(self, namespace: str) -> "IndexConnection":
        """Target another namespace of the same index, sharing the connection."""
        return IndexConnection(
            self.transport, namespace=namespace, api_version=self.api_version, owns_transport=False
        )

    def _envelope(self, path: str, body: RequestBody) -> RequestEnvelope:
        return RequestEnvelope(
            path=path, version=self.api_version, namespace=self._namespace, body=body
        )

    # Upsert

    def upsert_vectors(self, vectors: Sequence[VectorLike]) -> int:
        """
        Write vectors into the namespace, overwriting existing ids.

        Args:
            vectors: ``Vector`` objects or dicts with ``id``, ``values``,
                ``sparse_values`` and ``metadata``

        Returns:
            Number of vectors upserted
        """
        if not vectors:
            raise ValidationError("at least one vector must be provided to upsert")

        body = UpsertRequest(vectors=[_as_vector(v) for v in vectors], namespace=self._namespace)
        data = self.transport.send_envelope(
            self._envelope(UPSERT_PATH, body), error_prefix="failed to upsert vectors: "
        )

        upserted = int(data.get("upsertedCount", 0))
        logger.info("upserted vectors", count=upserted, namespace=self._namespace)
        return upserted

    def upsert_ndarray(
        self,
        ids: Sequence[str],
        array: NdArray,
        metadata: Optional[Sequence[Optional[Dict[str, Any]]]] = None,
    ) -> int:
        """Upsert one vector per row of a float32 ``NdArray``."""
        rows = float_ndarray_to_arr(array)
        if len(ids) != len(rows):
            raise ValidationError(
                f"got {len(ids)} ids for an array of {len(rows)} rows",
                details={"ids": len(ids), "rows": len(rows)},
            )
        if metadata is not None and len(metadata) != len(rows):
            raise ValidationError(f"got {len(metadata)} metadata entries for {len(rows)} rows")

        vectors = [
            Vector(id=vector_id, values=values, metadata=metadata[i] if metadata else None)
            for i, (vector_id, values) in enumerate(zip(ids, rows))
        ]
        return self.upsert_vectors(vectors)

    # Fetch and list

    def fetch_vectors(self, ids: Sequence[str]) -> FetchVectorsResponse:
        """Look up vectors by id. Missing ids are absent from the result."""
        if not ids:
            raise ValidationError("at least one id must be provided to fetch vectors")

        body = FetchRequest(ids=list(ids), namespace=self._namespace)
        data = self.transport.send_envelope(
            self._envelope(FETCH_PATH, body), method="GET", error_prefix="failed to fetch vectors: "
        )

        vectors = {
            vector_id: Vector.model_validate(raw)
            for vector_id, raw in (data.get("vectors") or {}).items()
        }
        return FetchVectorsResponse(vectors=vectors, usage=_usage(data), namespace=self._namespace)

    def list_vectors(
        self,
        prefix: Optional[str] = None,
        limit: Optional[int] = None,
        pagination_token: Optional[str] = None,
    ) -> ListVectorsResponse:
        """
        List one page of vector ids in the namespace (serverless indexes only).

        Args:
            prefix: Only ids starting with this prefix
            limit: Page size; the server default applies when omitted
            pagination_token: ``next_pagination_token`` from a previous page
        """
        if limit is not None and limit < 1:
            raise ValidationError("limit must be a positive integer")

        body = ListRequest(
            namespace=self._namespace, prefix=prefix, limit=limit, pagination_token=pagination_token
        )
        data = self.transport.send_envelope(
            self._envelope(LIST_PATH, body), method="GET", error_prefix="failed to list vectors: "
        )

        vector_ids = [v["id"] for v in (data.get("vectors") or []) if "id" in v]
        next_token = (data.get("pagination") or {}).get("next") or None
        return ListVectorsResponse(
            vector_ids=vector_ids,
            usage=_usage(data),
            next_pagination_token=next_token,
            namespace=self._namespace,
        )

    def iter_vector_ids(self, prefix: Optional[str] = None, limit: Optional[int] = None) -> Iterator[str]:
        """Yield every vector id, following pagination tokens."""
        token = None
        while True:
            page = self.list_vectors(prefix=prefix, limit=limit, pagination_token=token)
            yield from page.vector_ids
            token = page.next_pagination_token
            if not token:
                return

    # Query

    def query_by_vector_values(
        self,
        vector: Optional[Sequence[float]],
        top_k: int,
        metadata_filter: Optional[Dict[str, Any]] = None,
        include_values: bool = False,
        include_metadata: bool = False,
        sparse_values: Optional[SparseLike] = None,
    ) -> QueryVectorsResponse:
        """
        Find the ``top_k`` vectors most similar to a query vector.

        Hybrid queries (dense plus ``sparse_values``) need a dotproduct index.
        """
        if not vector and sparse_values is None:
            raise ValidationError("a dense vector or sparse values must be provided to query")

        return self._query(
            top_k,
            vector=list(vector) if vector else None,
            metadata_filter=metadata_filter,
            include_values=include_values,
            include_metadata=include_metadata,
            sparse_values=sparse_values,
        )

    def query_by_vector_id(
        self,
        vector_id: str,
        top_k: int,
        metadata_filter: Optional[Dict[str, Any]] = None,
        include_values: bool = False,
        include_metadata: bool = False,
        sparse_values: Optional[SparseLike] = None,
    ) -> QueryVectorsResponse:
        """Find the ``top_k`` vectors most similar to the stored vector ``vector_id``."""
        if not vector_id:
            raise ValidationError("a vector id must be provided to query by id")

        return self._query(
            top_k,
            vector_id=vector_id,
            metadata_filter=metadata_filter,
            include_values=include_values,
            include_metadata=include_metadata,
            sparse_values=sparse_values,
        )

    def _query(
        self,
        top_k: int,
        vector: Optional[List[float]] = None,
        vector_id: Optional[str] = None,
        metadata_filter: Optional[Dict[str, Any]] = None,
        include_values: bool = False,
        include_metadata: bool = False,
        sparse_values: Optional[SparseLike] = None,
    ) -> QueryVectorsResponse:
        if top_k < 1:
            raise ValidationError("top_k must be a positive integer", details={"top_k": top_k})

        body = QueryRequest(
            namespace=self._namespace,
            top_k=top_k,
            filter=metadata_filter,
            include_values=include_values,
            include_metadata=include_metadata,
            vector=vector,
            sparse_vector=_as_sparse(sparse_values),
            id=vector_id,
        )
        data = self.transport.send_envelope(
            self._envelope(QUERY_PATH, body), error_prefix="failed to query vectors: "
        )

        matches = [ScoredVector.from_match(m) for m in (data.get("matches") or [])]
        return QueryVectorsResponse(matches=matches, usage=_usage(data), namespace=self._namespace)

    # Update

    def update_vector(
        self,
        id: str,
        values: Optional[Sequence[float]] = None,
        sparse_values: Optional[SparseLike] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Update one vector. Values overwrite; metadata fields are merged in.
        """
        if not id or (values is None and sparse_values is None and metadata is None):
            raise ValidationError(
                "a vector ID plus at least one of values, sparse_values, or metadata "
                "must be provided to update a vector"
            )

        body = UpdateRequest(
            id=id,
            values=list(values) if values is not None else None,
            sparse_values=_as_sparse(sparse_values),
            set_metadata=metadata,
            namespace=self._namespace,
        )
        self.transport.send_envelope(
            self._envelope(UPDATE_PATH, body), error_prefix="failed to update vector: "
        )

    # Delete

    def delete_vectors_by_id(self, ids: Sequence[str]) -> None:
        if not ids:
            raise ValidationError("at least one id must be provided to delete vectors")
        self._delete(DeleteRequest(ids=list(ids), namespace=self._namespace))

    def delete_vectors_by_filter(self, metadata_filter: Dict[str, Any]) -> None:
        """Delete vectors matching a metadata filter (pod-based indexes only)."""
        if not metadata_filter:
            raise ValidationError("a metadata filter must be provided to delete by filter")
        self._delete(DeleteRequest(filter=metadata_filter, namespace=self._namespace))

    def delete_all_vectors_in_namespace(self) -> None:
        self._delete(DeleteRequest(delete_all=True, namespace=self._namespace))

    def _delete(self, body: DeleteRequest) -> None:
        self.transport.send_envelope(
            self._envelope(DELETE_PATH, body), error_prefix="failed to delete vectors: "
        )
        logger.info("deleted vectors", namespace=self._namespace, delete_all=bool(body.delete_all))

    # Stats

    def describe_index_stats(self) -> DescribeIndexStatsResponse:
        """Vector counts per namespace, dimension and fullness of the index."""
        return self.describe_index_stats_filtered(None)

    def describe_index_stats_filtered(
        self, metadata_filter: Optional[Dict[str, Any]]
    ) -> DescribeIndexStatsResponse:
        """Stats restricted to vectors matching ``metadata_filter`` (pod-based indexes only)."""
        body = DescribeIndexStatsRequest(filter=metadata_filter)
        data = self.transport.send_envelope(
            self._envelope(DESCRIBE_INDEX_STATS_PATH, body),
            error_prefix="failed to describe index stats: ",
        )
        return DescribeIndexStatsResponse.model_validate(data)

    def close(self) -> None:
        if self._owns_transport:
            self.transport.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def __repr__(self) -> str:
        return f"<IndexConnection host={self.host!r} namespace={self._namespace!r}>"
