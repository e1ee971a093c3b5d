"""
Embedding providers: local TF-IDF and remote API-backed models.
"""

from .base import EmbeddingProvider, EmbeddingVector
from .local import LocalEmbeddings
from .remote import GoogleEmbeddings, OpenAIEmbeddings
from .factory import EmbeddingsConfig, EmbeddingsProviderName, create_embeddings

__all__ = [
    "EmbeddingProvider",
    "EmbeddingVector",
    "LocalEmbeddings",
    "OpenAIEmbeddings",
    "GoogleEmbeddings",
    "EmbeddingsConfig",
    "EmbeddingsProviderName",
    "create_embeddings",
]
