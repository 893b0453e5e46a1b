"""Hosted inference: embeddings, reranking and the model catalog."""

from typing import Any, Dict, List, Optional, Sequence, Union

import structlog

from pinecone_sdk.core.exceptions import ValidationError
from pinecone_sdk.core.models import EmbedResponse, ModelInfo, RerankResponse
from pinecone_sdk.data.transport import HttpTransport

logger = structlog.get_logger(__name__)

Document = Union[str, Dict[str, Any]]


class InferenceService:
    """Calls the inference endpoints on the control host."""

    def __init__(self, transport: HttpTransport):
        self.transport = transport

    def embed(
        self,
        model: str,
        text_inputs: Sequence[str],
        parameters: Optional[Dict[str, Any]] = None,
    ) -> EmbedResponse:
        """
        Generate embeddings for a batch of texts.

        Args:
            model: Hosted model name, e.g. ``multilingual-e5-large``
            text_inputs: Texts to embed, at least one
            parameters: Model parameters such as ``input_type`` and ``truncate``
        """
        if not model:
            raise ValidationError("a model name must be provided to embed")
        if not text_inputs:
            raise ValidationError("at least one text input must be provided to embed")

        payload: Dict[str, Any] = {"model": model, "inputs": [{"text": t} for t in text_inputs]}
        if parameters:
            payload["parameters"] = parameters

        data = self.transport.request_json("POST", "/embed", json=payload, error_prefix="failed to embed: ")
        response = EmbedResponse.model_validate(data)
        logger.debug(
            "embeddings generated",
            model=model,
            inputs=len(text_inputs),
            total_tokens=response.usage.total_tokens,
        )
        return response

    def rerank(
        self,
        model: str,
        query: str,
        documents: Sequence[Document],
        rank_fields: Optional[List[str]] = None,
        return_documents: Optional[bool] = None,
        top_n: Optional[int] = None,
        parameters: Optional[Dict[str, Any]] = None,
    ) -> RerankResponse:
        """
        Order ``documents`` by relevance to ``query``.

        Plain strings are sent as ``{"text": ...}`` documents. ``rank_fields``
        names the document fields to score on (``["text"]`` server side when
        omitted).
        """
        if not model or not query:
            raise ValidationError("a model and a query must be provided to rerank")
        if not documents:
            raise ValidationError("at least one document must be provided to rerank")
        if top_n is not None and top_n < 1:
            raise ValidationError("top_n must be a positive integer")

        payload: Dict[str, Any] = {
            "model": model,
            "query": query,
            "documents": [{"text": d} if isinstance(d, str) else d for d in documents],
        }
        optional = {
            "rank_fields": rank_fields,
            "return_documents": return_documents,
            "top_n": top_n,
            "parameters": parameters,
        }
        payload.update({k: v for k, v in optional.items() if v is not None})

        data = self.transport.request_json(
            "POST", "/rerank", json=payload, error_prefix="failed to rerank: "
        )
        return RerankResponse.model_validate(data)

    def describe_model(self, name: str) -> ModelInfo:
        if not name:
            raise ValidationError("a model name must be provided")
        data = self.transport.request_json(
            "GET", f"/models/{name}", error_prefix="failed to describe model: "
        )
        return ModelInfo.model_validate(data)

    def list_models(self, type: Optional[str] = None, vector_type: Optional[str] = None) -> List[ModelInfo]:
        """List hosted models, optionally filtered by ``embed``/``rerank`` and vector type."""
        params = {k: v for k, v in {"type": type, "vector_type": vector_type}.items() if v}
        data = self.transport.request_json(
            "GET", "/models", params=params or None, error_prefix="failed to list models: "
        )
        return [ModelInfo.model_validate(raw) for raw in data.get("models") or []]
