"""
Argus - Hybrid Code Retrieval

Semantic file search over a code base, expanded through its dependency graph.
"""

__version__ = "0.3.0"

# Core exports
from argus.embeddings import EmbeddingsConfig, create_embeddings
from argus.exceptions import ArgusError
from argus.retrieval import DocumentationStore, HybridRetriever, VectorSearchService
from argus.schemas import DependencyGraph, SearchConfig, SearchResult

__all__ = [
    "__version__",
    "EmbeddingsConfig",
    "create_embeddings",
    "ArgusError",
    "DocumentationStore",
    "HybridRetriever",
    "VectorSearchService",
    "DependencyGraph",
    "SearchConfig",
    "SearchResult",
]
