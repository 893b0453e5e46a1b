"""
Python client for the Pinecone vector database.

    from pinecone_sdk import PineconeClient

    client = PineconeClient(api_key="...")
    conn = client.index(client.describe_index("movies").host)
    conn.query_by_vector_values([0.1, 0.2, 0.3], top_k=5)
"""

from pinecone_sdk.core.config import SDK_VERSION, PineconeSettings, get_settings
from pinecone_sdk.core.exceptions import (
    ConfigurationError,
    PineconeApiError,
    PineconeConnectionError,
    PineconeSDKError,
    PineconeTimeoutError,
    PineconeTransportError,
    ValidationError,
)
from pinecone_sdk.core.models import (
    Cloud,
    Collection,
    DeletionProtection,
    Index,
    IndexMetric,
    NdArray,
    SparseValues,
    Vector,
    VectorType,
)
from pinecone_sdk.data.control_client import PineconeClient
from pinecone_sdk.data.index_connection import IndexConnection
from pinecone_sdk.data.inference import InferenceService

__version__ = SDK_VERSION

__all__ = [
    "Cloud",
    "Collection",
    "ConfigurationError",
    "DeletionProtection",
    "Index",
    "IndexConnection",
    "IndexMetric",
    "InferenceService",
    "NdArray",
    "PineconeApiError",
    "PineconeClient",
    "PineconeConnectionError",
    "PineconeSDKError",
    "PineconeSettings",
    "PineconeTimeoutError",
    "PineconeTransportError",
    "SparseValues",
    "ValidationError",
    "Vector",
    "VectorType",
    "get_settings",
    "__version__",
]
