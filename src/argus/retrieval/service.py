"""
Vector search service: owns the index lifecycle and answers top-K queries.

Lifecycle:
    UNINITIALIZED --initialize()--> INITIALIZING --> READY
    READY --clear()--> UNINITIALIZED

A failed build (BatchEmbeddingError) rolls back to UNINITIALIZED.
"""

import threading
import time
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from argus.logging_config import logger

from ..embeddings.base import EmbeddingProvider
from ..embeddings.factory import EmbeddingsConfig, create_embeddings
from ..exceptions import CorpusMismatchError, IndexStateError, NotInitializedError
from ..schemas import DependencyGraph, IndexStats, SearchConfig, SearchResult
from ..tracing import trace
from .cache import ContentCache
from .config import SEARCH_DEFAULTS
from .content import ContentResolver
from .fusion import fuse_with_graph
from .ingestion import ProgressCallback, embed_batches, filter_files, load_documents, plan_batches
from .vector_store import InMemoryVectorStore

CorpusIdentity = Tuple[str, Tuple[str, ...]]


class IndexState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"


class VectorSearchService:
    """
    RAG-style semantic file search over an in-memory index.

    Args:
        project_root: Base directory for relative file paths
        dependency_graph: Optional pre-built graph used to expand results
        embeddings: An EmbeddingProvider, an EmbeddingsConfig, or None for local TF-IDF
        progress_callback: Receives IngestionProgress events during initialize()
        cache_size: Maximum number of cached file contents

    Build and query must be serialized by the caller; concurrent queries
    against a ready index are safe.
    """

    def __init__(
        self,
        project_root: Union[str, Path],
        dependency_graph: Optional[DependencyGraph] = None,
        embeddings: Union[EmbeddingProvider, EmbeddingsConfig, None] = None,
        progress_callback: Optional[ProgressCallback] = None,
        cache_size: Optional[int] = None,
    ):
        self.project_root = Path(project_root)
        self.dependency_graph = dependency_graph
        if isinstance(embeddings, EmbeddingProvider):
            self.embeddings = embeddings
        else:
            self.embeddings = create_embeddings(embeddings)
        self.progress_callback = progress_callback

        self.cache = ContentCache(cache_size)
        self.resolver = ContentResolver(self.project_root, self.cache)
        self.vector_store: Optional[InMemoryVectorStore] = None
        self.state = IndexState.UNINITIALIZED
        self._corpus: Optional[CorpusIdentity] = None
        self._state_lock = threading.Lock()

    @property
    def is_ready(self) -> bool:
        return self.state == IndexState.READY

    def _corpus_identity(self, file_paths: Sequence[str]) -> CorpusIdentity:
        return (str(self.project_root.resolve()), tuple(file_paths))

    @trace
    def initialize(self, file_paths: Sequence[str], config: Optional[SearchConfig] = None) -> None:
        """
        Build the index from `file_paths`. Must be called before searching.

        Calling it again for the same corpus while ready is a no-op; a
        different corpus requires clear() first.

        Raises:
            CorpusMismatchError: the index is ready for a different corpus
            BatchEmbeddingError: an embedding request failed (index rolled back)
        """
        config = config or SearchConfig()
        identity = self._corpus_identity(file_paths)

        with self._state_lock:
            if self.state == IndexState.READY:
                if identity == self._corpus:
                    logger.debug("Vector store already initialized, skipping")
                    return
                raise CorpusMismatchError(
                    "Vector store is already initialized for a different corpus. Call clear() first."
                )
            if self.state == IndexState.INITIALIZING:
                raise IndexStateError("Vector store initialization already in progress")
            self.state = IndexState.INITIALIZING

        try:
            self._build(file_paths, config)
        except BaseException:
            self.clear()
            raise

        with self._state_lock:
            self._corpus = identity
            self.state = IndexState.READY

    def _build(self, file_paths: Sequence[str], config: SearchConfig) -> None:
        logger.info(f"Initializing vector store with {len(file_paths)} files...")
        start_time = time.perf_counter()

        filtered = filter_files(file_paths, config.exclude_patterns, config.include_extensions)
        logger.info(f"Filtered to {len(filtered)} files (excluded {len(file_paths) - len(filtered)})")

        loaded = load_documents(
            filtered,
            self.project_root,
            config.max_file_size,
            cache=self.cache,
            progress_callback=self.progress_callback,
        )

        store = InMemoryVectorStore()
        if not loaded.documents:
            logger.warning("No documents loaded - vector store will be empty")
            logger.warning(f"Attempted: {loaded.attempted}, Loaded: 0, Skipped: {loaded.skipped}")
            self.vector_store = store
            return

        logger.info(f"Loaded {len(loaded.documents)} documents ({loaded.loaded} files, {loaded.skipped} skipped)")
        logger.info(f"Creating embeddings for {len(loaded.documents)} documents...")

        batches = plan_batches(loaded.documents, self.embeddings)
        embed_batches(batches, self.embeddings, store, progress_callback=self.progress_callback)
        self.vector_store = store

        duration = time.perf_counter() - start_time
        logger.info(f"Vector store initialized in {duration:.1f}s with {len(store)} documents")

    def search_files(self, query: str, config: Optional[SearchConfig] = None) -> List[SearchResult]:
        """
        Search files by semantic similarity, optionally expanded through the
        dependency graph. Results are sorted by descending relevance.

        Raises:
            NotInitializedError: initialize() has not completed
        """
        if self.state != IndexState.READY or self.vector_store is None:
            raise NotInitializedError()

        config = config or SearchConfig()
        top_k = config.top_k
        threshold = config.similarity_threshold

        logger.debug(f"Searching for: \"{query[:100]}\" (top_k={top_k})")

        results = self.primary_search(query, top_k, threshold, config.max_file_size)

        if self.dependency_graph is not None and results:
            return fuse_with_graph(
                results,
                self.dependency_graph,
                self.resolver,
                top_k=top_k,
                max_file_size=config.max_file_size,
                max_related=config.max_related,
            )

        logger.info(f"Found {len(results)} files with similarity >= {threshold}")
        return results

    def primary_search(self, query: str, top_k: int, threshold: float, max_file_size: int) -> List[SearchResult]:
        """
        Pure similarity search: request top_k * 2 candidates, drop those below
        `threshold`, resolve content, stop at top_k results.
        """
        query_vector = self.embeddings.embed_query(query)
        candidates = self.vector_store.similarity_search_with_score(
            query_vector, top_k * SEARCH_DEFAULTS["candidate_multiplier"]
        )

        results: List[SearchResult] = []
        for document, distance in candidates:
            similarity = 1 - distance
            if similarity < threshold:
                continue

            result = self.resolver.to_result(document.path, similarity, max_file_size)
            if result is None:
                continue
            results.append(result)

            if len(results) >= top_k:
                break
        return results

    def clear(self) -> None:
        """Drop the index and the content cache."""
        with self._state_lock:
            self.vector_store = None
            self.cache.clear()
            self._corpus = None
            self.state = IndexState.UNINITIALIZED

    def get_stats(self) -> IndexStats:
        return IndexStats(
            state=self.state.value,
            initialized=self.is_ready,
            document_count=len(self.vector_store) if self.vector_store is not None else 0,
            cache_size=len(self.cache),
            provider=self.embeddings.name,
        )
