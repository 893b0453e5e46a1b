"""
Data models and type definitions for the Pinecone SDK.

Control-plane payloads use snake_case on the wire, data-plane payloads use
camelCase. Every model accepts both spellings and exposes snake_case
attributes; ``to_wire()`` renders the service spelling.
"""

from __future__ import annotations

import uuid
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from pinecone_sdk.core.exceptions import ValidationError


class IndexMetric(str, Enum):
    """Distance metric used by similarity search against an index."""

    COSINE = "cosine"
    DOTPRODUCT = "dotproduct"
    EUCLIDEAN = "euclidean"


class IndexStatusState(str, Enum):
    """State of an index."""

    INITIALIZATION_FAILED = "InitializationFailed"
    INITIALIZING = "Initializing"
    READY = "Ready"
    SCALING_DOWN = "ScalingDown"
    SCALING_DOWN_POD_SIZE = "ScalingDownPodSize"
    SCALING_UP = "ScalingUp"
    SCALING_UP_POD_SIZE = "ScalingUpPodSize"
    TERMINATING = "Terminating"


class Cloud(str, Enum):
    """Cloud provider hosting a serverless index."""

    AWS = "aws"
    AZURE = "azure"
    GCP = "gcp"


class CollectionStatus(str, Enum):
    """Status of a collection."""

    INITIALIZING = "Initializing"
    READY = "Ready"
    TERMINATING = "Terminating"


class DeletionProtection(str, Enum):
    """Whether an index can be deleted."""

    ENABLED = "enabled"
    DISABLED = "disabled"


class VectorType(str, Enum):
    """Kind of vectors an index stores."""

    DENSE = "dense"
    SPARSE = "sparse"


# Base Models


class WireModel(BaseModel):
    """Base class for everything that crosses the wire."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", use_enum_values=True)

    def to_wire(self) -> Dict[str, Any]:
        """Render the payload the service expects."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


# Index and Collection Models


class IndexStatus(WireModel):
    ready: bool = False
    state: Optional[Union[IndexStatusState, str]] = None


class PodSpecMetadataConfig(WireModel):
    indexed: Optional[List[str]] = None


class PodSpec(WireModel):
    """Infrastructure of a pod-based index."""

    environment: str
    pod_type: str
    pod_count: int = Field(default=1, alias="pods")
    replicas: int = 1
    shard_count: int = Field(default=1, alias="shards")
    source_collection: Optional[str] = None
    metadata_config: Optional[PodSpecMetadataConfig] = None


class ServerlessSpec(WireModel):
    """Infrastructure of a serverless index."""

    cloud: Union[Cloud, str]
    region: str
    source_collection: Optional[str] = None


class IndexSpec(WireModel):
    """Either a pod or a serverless spec."""

    pod: Optional[PodSpec] = None
    serverless: Optional[ServerlessSpec] = None

    @property
    def kind(self) -> str:
        if self.serverless is not None:
            return "serverless"
        if self.pod is not None:
            return "pod"
        return "unknown"


class Index(WireModel):
    """An index as described by the control plane."""

    name: str
    dimension: Optional[int] = None
    host: str = ""
    metric: Union[IndexMetric, str] = IndexMetric.COSINE
    vector_type: Union[VectorType, str] = VectorType.DENSE
    deletion_protection: Optional[Union[DeletionProtection, str]] = None
    spec: Optional[IndexSpec] = None
    status: Optional[IndexStatus] = None
    tags: Optional[Dict[str, str]] = None

    @property
    def ready(self) -> bool:
        return bool(self.status and self.status.ready)


class Collection(WireModel):
    """A static copy of a pod-based index."""

    name: str
    size: Optional[int] = None
    status: Union[CollectionStatus, str] = CollectionStatus.INITIALIZING
    dimension: Optional[int] = None
    vector_count: Optional[int] = None
    environment: str = ""


# Vector Models


class SparseValues(WireModel):
    """Sparse vector: parallel lists of indices and values."""

    indices: List[int] = Field(default_factory=list)
    values: List[float] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_lengths(self):
        if len(self.indices) != len(self.values):
            raise ValueError(
                f"sparse indices and values must have the same length "
                f"({len(self.indices)} != {len(self.values)})"
            )
        return self


class Vector(WireModel):
    """A dense and/or sparse vector with optional metadata."""

    id: str = Field(..., min_length=1)
    values: Optional[List[float]] = None
    sparse_values: Optional[SparseValues] = Field(default=None, alias="sparseValues")
    metadata: Optional[Dict[str, Any]] = None


class ScoredVector(WireModel):
    """A vector with its similarity score against a query."""

    vector: Vector
    score: float

    @classmethod
    def from_match(cls, match: Dict[str, Any]) -> "ScoredVector":
        """Build from a flat query match (``id``, ``score``, ``values``...)."""
        return cls(
            vector=Vector.model_validate({k: v for k, v in match.items() if k != "score"}),
            score=match.get("score", 0.0),
        )


class Usage(WireModel):
    read_units: int = Field(default=0, alias="readUnits")


class NamespaceSummary(WireModel):
    vector_count: int = Field(default=0, alias="vectorCount")


class NdArray(BaseModel):
    """
    Flat little-endian buffer plus shape and dtype.

    ``shape`` is ``[cols]`` for a single row and ``[rows, cols]`` otherwise.
    In JSON the buffer is base64-encoded.
    """

    model_config = ConfigDict(ser_json_bytes="base64", val_json_bytes="base64")

    buffer: bytes = b""
    shape: List[int] = Field(default_factory=list)
    dtype: str = "float32"

    @property
    def rows(self) -> int:
        if not self.shape:
            return 0
        return 1 if len(self.shape) == 1 else self.shape[0]

    @property
    def cols(self) -> int:
        if not self.shape:
            return 0
        return self.shape[0] if len(self.shape) == 1 else self.shape[1]


# Data-plane responses


class FetchVectorsResponse(WireModel):
    vectors: Dict[str, Vector] = Field(default_factory=dict)
    usage: Optional[Usage] = None
    namespace: str = ""

    def to_ndarray(self, ids: Optional[List[str]] = None) -> NdArray:
        """Pack the dense values of the fetched vectors, in ``ids`` order."""
        from pinecone_sdk.utils.ndarray import float_arr_to_ndarray

        order = ids if ids is not None else sorted(self.vectors)
        rows = []
        for vector_id in order:
            vector = self.vectors.get(vector_id)
            if vector is None or vector.values is None:
                raise ValidationError(
                    f"no dense values fetched for vector '{vector_id}'", details={"id": vector_id}
                )
            rows.append(vector.values)
        return float_arr_to_ndarray(rows)


class ListVectorsResponse(WireModel):
    vector_ids: List[str] = Field(default_factory=list)
    usage: Optional[Usage] = None
    next_pagination_token: Optional[str] = None
    namespace: str = ""


class QueryVectorsResponse(WireModel):
    matches: List[ScoredVector] = Field(default_factory=list)
    usage: Optional[Usage] = None
    namespace: str = ""


class DescribeIndexStatsResponse(WireModel):
    dimension: Optional[int] = None
    index_fullness: float = Field(default=0.0, alias="indexFullness")
    total_vector_count: int = Field(default=0, alias="totalVectorCount")
    namespaces: Dict[str, NamespaceSummary] = Field(default_factory=dict)


# Data-plane request bodies


class UpsertRequest(WireModel):
    vectors: List[Vector]
    namespace: str = ""


class DeleteRequest(WireModel):
    ids: Optional[List[str]] = None
    delete_all: Optional[bool] = Field(default=None, alias="deleteAll")
    namespace: str = ""
    filter: Optional[Dict[str, Any]] = None


class FetchRequest(WireModel):
    ids: List[str]
    namespace: str = ""

    def to_params(self) -> List[tuple]:
        return [("ids", i) for i in self.ids] + [("namespace", self.namespace)]


class QueryRequest(WireModel):
    namespace: str = ""
    top_k: int = Field(..., ge=1, alias="topK")
    filter: Optional[Dict[str, Any]] = None
    include_values: bool = Field(default=False, alias="includeValues")
    include_metadata: bool = Field(default=False, alias="includeMetadata")
    vector: Optional[List[float]] = None
    sparse_vector: Optional[SparseValues] = Field(default=None, alias="sparseVector")
    id: Optional[str] = None


class UpdateRequest(WireModel):
    id: str
    values: Optional[List[float]] = None
    sparse_values: Optional[SparseValues] = Field(default=None, alias="sparseValues")
    set_metadata: Optional[Dict[str, Any]] = Field(default=None, alias="setMetadata")
    namespace: str = ""


class ListRequest(WireModel):
    namespace: str = ""
    prefix: Optional[str] = None
    limit: Optional[int] = Field(default=None, ge=1)
    pagination_token: Optional[str] = Field(default=None, alias="paginationToken")

    def to_params(self) -> Dict[str, Any]:
        return self.to_wire()


class DescribeIndexStatsRequest(WireModel):
    filter: Optional[Dict[str, Any]] = None


RequestBody = Union[
    UpsertRequest,
    DeleteRequest,
    FetchRequest,
    QueryRequest,
    UpdateRequest,
    ListRequest,
    DescribeIndexStatsRequest,
]


class RequestEnvelope(BaseModel):
    """One data-plane call: id, REST path, API version, namespace and body."""

    request_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    path: str
    version: str
    namespace: str = ""
    body: RequestBody

    @property
    def operation(self) -> str:
        return type(self.body).__name__.replace("Request", "")


# Inference Models


class Embedding(WireModel):
    values: Optional[List[float]] = None
    sparse_values: Optional[List[float]] = None
    sparse_indices: Optional[List[int]] = None
    vector_type: Optional[str] = None


class EmbedUsage(WireModel):
    total_tokens: Optional[int] = None


class EmbedResponse(WireModel):
    model: str
    data: List[Embedding] = Field(default_factory=list)
    usage: EmbedUsage = Field(default_factory=EmbedUsage)
    vector_type: Optional[str] = None


class RankedDocument(WireModel):
    index: int
    score: float
    document: Optional[Dict[str, Any]] = None


class RerankUsage(WireModel):
    rerank_units: Optional[int] = None


class RerankResponse(WireModel):
    model: str
    data: List[RankedDocument] = Field(default_factory=list)
    usage: RerankUsage = Field(default_factory=RerankUsage)


class ModelInfo(WireModel):
    """A hosted embedding or reranking model."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    model: str
    short_description: str = ""
    type: str = ""
    vector_type: Optional[str] = None
    default_dimension: Optional[int] = None
    max_sequence_length: Optional[int] = None
    max_batch_size: Optional[int] = None
    provider_name: Optional[str] = None
    supported_dimensions: Optional[List[int]] = None
    supported_metrics: Optional[List[str]] = None
