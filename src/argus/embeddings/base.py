"""
Embedding provider contract shared by the local and remote strategies.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

EmbeddingVector = List[float]


class EmbeddingProvider(ABC):
    """
    Converts text into fixed-dimension vectors.

    Subclasses declare their request limits so ingestion can batch documents
    before calling `embed_documents`. `None` means the provider has no such limit.
    """

    name: str = "base"
    max_tokens_per_request: Optional[int] = None
    max_texts_per_request: Optional[int] = None

    @abstractmethod
    def embed_documents(self, texts: Sequence[str]) -> List[EmbeddingVector]:
        """Embed a batch of texts, returning one vector per input in the same order."""

    @abstractmethod
    def embed_query(self, text: str) -> EmbeddingVector:
        """Embed a single query string."""

    @property
    def enforces_token_budget(self) -> bool:
        return self.max_tokens_per_request is not None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
