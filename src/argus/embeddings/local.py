"""
Local TF-IDF embeddings.

Free, offline, and deterministic for a given corpus order. The vocabulary is
built once from the first corpus passed to `embed_documents` and then frozen:
later documents with unseen terms simply contribute zero weight for them.

Lower quality than neural embeddings (no synonyms, no context), but good
enough for keyword-heavy code search without an API key.
"""

import math
import re
from collections import Counter
from typing import Dict, List, Sequence

import numpy as np

from argus.logging_config import logger
from .config import LOCAL_EMBEDDINGS_CONFIG
from .base import EmbeddingProvider, EmbeddingVector

NON_WORD_RE = re.compile(r"[^\w\s]")


class LocalEmbeddings(EmbeddingProvider):
    name = "local"

    def __init__(self, dimensions: int = None, min_token_length: int = None):
        self.dimensions = dimensions or LOCAL_EMBEDDINGS_CONFIG["dimensions"]
        self.min_token_length = min_token_length or LOCAL_EMBEDDINGS_CONFIG["min_token_length"]
        self.vocabulary: Dict[str, int] = {}
        self.idf: Dict[str, float] = {}

    def tokenize(self, text: str) -> List[str]:
        """
        Lower-case, replace punctuation with spaces, split on whitespace and
        drop tokens shorter than `min_token_length`.
        """
        cleaned = NON_WORD_RE.sub(" ", text.lower())
        return [token for token in cleaned.split() if len(token) >= self.min_token_length]

    @property
    def vocabulary_built(self) -> bool:
        return bool(self.vocabulary)

    def build_vocabulary(self, documents: Sequence[str]) -> None:
        """
        Build the vocabulary (top-N terms by document frequency) and IDF table.

        Terms are indexed in descending document-frequency order; ties keep the
        order in which the terms were first seen. IDF is kept for every term in
        the corpus, not only the vocabulary.
        """
        doc_freq: Dict[str, int] = {}
        total_docs = len(documents)

        for doc in documents:
            # dict.fromkeys keeps first-seen order while de-duplicating
            for token in dict.fromkeys(self.tokenize(doc)):
                doc_freq[token] = doc_freq.get(token, 0) + 1

        # sorted() is stable, so equal frequencies stay in first-seen order
        ranked = sorted(doc_freq.items(), key=lambda item: item[1], reverse=True)
        self.vocabulary = {term: index for index, (term, _) in enumerate(ranked[: self.dimensions])}
        self.idf = {term: math.log(total_docs / freq) for term, freq in doc_freq.items()}

        logger.debug(
            f"Built TF-IDF vocabulary: {len(self.vocabulary)} terms "
            f"({len(doc_freq)} unique) from {total_docs} documents"
        )

    def text_to_vector(self, text: str) -> EmbeddingVector:
        vector = np.zeros(self.dimensions, dtype=np.float64)
        tokens = self.tokenize(text)
        if not tokens:
            return vector.tolist()

        total_tokens = len(tokens)
        for token, count in Counter(tokens).items():
            index = self.vocabulary.get(token)
            if index is not None:
                vector[index] = (count / total_tokens) * self.idf.get(token, 0.0)

        magnitude = float(np.linalg.norm(vector))
        if magnitude > 0:
            vector = vector / magnitude
        return vector.tolist()

    def embed_documents(self, texts: Sequence[str]) -> List[EmbeddingVector]:
        if not self.vocabulary_built:
            self.build_vocabulary(texts)
        return [self.text_to_vector(text) for text in texts]

    def embed_query(self, text: str) -> EmbeddingVector:
        return self.text_to_vector(text)
