from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from argus.logging_config import logger

from ..schemas import Document


@dataclass
class VectorDocument:
    embedding: np.ndarray
    document: Document


class InMemoryVectorStore:
    """
    Minimal in-memory vector store with brute-force cosine comparison.

    Written during builds (`add_vectors`), read-only during queries.
    """

    def __init__(self, documents: Optional[List[VectorDocument]] = None):
        self.documents: List[VectorDocument] = list(documents or [])
        self._matrix: Optional[np.ndarray] = None

    def add_vectors(self, documents: Sequence[Document], vectors: Sequence[Sequence[float]]) -> None:
        if len(documents) != len(vectors):
            raise ValueError(f"Got {len(vectors)} vectors for {len(documents)} documents")

        for doc, vector in zip(documents, vectors):
            embedding = np.asarray(vector, dtype=np.float64)
            if self.documents and embedding.shape != self.documents[0].embedding.shape:
                raise ValueError(
                    f"Embedding for '{doc.path}' has shape {embedding.shape}, "
                    f"expected {self.documents[0].embedding.shape}"
                )
            self.documents.append(VectorDocument(embedding=embedding, document=doc))
        self._matrix = None

    @property
    def matrix(self) -> np.ndarray:
        if self._matrix is None:
            if self.documents:
                self._matrix = np.stack([doc.embedding for doc in self.documents])
            else:
                self._matrix = np.empty((0, 0))
        return self._matrix

    def similarity_search_with_score(self, query_embedding: Sequence[float], k: int = 4) -> List[Tuple[Document, float]]:
        """
        Return up to k (document, cosine distance) pairs, closest first.

        Zero vectors (no vocabulary overlap) get similarity 0, i.e. distance 1.
        Equal distances keep insertion order.
        """
        if self.matrix.size == 0 or k <= 0:
            logger.debug("Vector store is empty.")
            return []

        query = np.asarray(query_embedding, dtype=np.float64)
        norms = np.linalg.norm(self.matrix, axis=1) * np.linalg.norm(query)
        dots = self.matrix @ query
        similarities = np.divide(dots, norms, out=np.zeros_like(dots), where=norms > 0)
        distances = 1.0 - similarities

        top_indices = np.argsort(distances, kind="stable")[:k]
        return [(self.documents[int(idx)].document, float(distances[idx])) for idx in top_indices]

    def clear(self) -> None:
        self.documents = []
        self._matrix = None

    def __len__(self) -> int:
        return len(self.documents)
