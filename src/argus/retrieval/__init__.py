"""
Retrieval: ingestion, vector index, graph fusion and hybrid strategies.
"""

from .cache import ContentCache
from .docs_store import DocumentationStore
from .fusion import fuse_with_graph, score_related_files
from .hybrid import HybridRetrievalConfig, HybridRetriever, RetrievalStrategy, detect_query_type
from .ingestion import estimate_tokens, filter_files, load_documents, plan_batches
from .service import IndexState, VectorSearchService
from .vector_store import InMemoryVectorStore

__all__ = [
    "ContentCache",
    "DocumentationStore",
    "fuse_with_graph",
    "score_related_files",
    "HybridRetrievalConfig",
    "HybridRetriever",
    "RetrievalStrategy",
    "detect_query_type",
    "estimate_tokens",
    "filter_files",
    "load_documents",
    "plan_batches",
    "IndexState",
    "VectorSearchService",
    "InMemoryVectorStore",
]
