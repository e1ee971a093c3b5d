"""
Remote (API-backed) embedding providers.

Both SDKs are imported lazily so that the local provider never pays for them.
Request limits are declared on the class; batching happens during ingestion.
"""

from typing import Any, List, Optional, Sequence

from argus.logging_config import logger
from .base import EmbeddingProvider, EmbeddingVector
from .config import GOOGLE_EMBEDDINGS_CONFIG, OPENAI_EMBEDDINGS_CONFIG


class OpenAIEmbeddings(EmbeddingProvider):
    """
    Primary cloud provider (OpenAI embeddings API).

    The API limits the total tokens across all texts of one request, so this
    provider enforces a token budget and ingestion batches conservatively.
    """

    name = "openai"
    max_tokens_per_request = OPENAI_EMBEDDINGS_CONFIG["max_tokens_per_request"]
    max_texts_per_request = OPENAI_EMBEDDINGS_CONFIG["max_texts_per_request"]

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        max_retries: Optional[int] = None,
        client: Any = None,
    ):
        self.model = model or OPENAI_EMBEDDINGS_CONFIG["model"]
        if client is None:
            from openai import OpenAI

            client = OpenAI(
                api_key=api_key,
                max_retries=max_retries if max_retries is not None else OPENAI_EMBEDDINGS_CONFIG["max_retries"],
            )
        self.client = client

    def embed_documents(self, texts: Sequence[str]) -> List[EmbeddingVector]:
        if not texts:
            return []
        # The API rejects empty strings
        inputs = [text if text else " " for text in texts]
        response = self.client.embeddings.create(model=self.model, input=inputs)
        data = sorted(response.data, key=lambda item: item.index)
        logger.debug(f"OpenAI embedded {len(data)} texts with '{self.model}'")
        return [list(item.embedding) for item in data]

    def embed_query(self, text: str) -> EmbeddingVector:
        return self.embed_documents([text])[0]


class GoogleEmbeddings(EmbeddingProvider):
    """
    Secondary cloud provider (Google Generative AI embeddings).

    Limited by texts per request rather than by total tokens.
    """

    name = "google"
    max_texts_per_request = GOOGLE_EMBEDDINGS_CONFIG["max_texts_per_request"]

    def __init__(self, api_key: str, model: Optional[str] = None, client: Any = None):
        self.model = model or GOOGLE_EMBEDDINGS_CONFIG["model"]
        if client is None:
            import google.generativeai as genai

            genai.configure(api_key=api_key)
            client = genai
        self.client = client

    def _embed(self, content: Any, task_type: str) -> Any:
        result = self.client.embed_content(model=self.model, content=content, task_type=task_type)
        return result["embedding"]

    def embed_documents(self, texts: Sequence[str]) -> List[EmbeddingVector]:
        if not texts:
            return []
        embeddings = self._embed(list(texts), task_type="retrieval_document")
        logger.debug(f"Google embedded {len(embeddings)} texts with '{self.model}'")
        return [list(vector) for vector in embeddings]

    def embed_query(self, text: str) -> EmbeddingVector:
        return list(self._embed(text, task_type="retrieval_query"))
