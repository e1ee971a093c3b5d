"""
Hybrid retrieval combining vector search and dependency-graph traversal.

Strategies:
    vector  - pure semantic similarity
    graph   - keyword match against graph node / module names
    hybrid  - similarity blended with graph centrality (default)
    smart   - picks one of the above from the wording of the query

Example:
    Query: "authentication logic"
    - vector finds auth-related files by content
    - graph adds the files that import or are imported by them
"""

import re
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel

from argus.logging_config import logger

from ..schemas import (
    DependencyGraph,
    FileRelationships,
    GraphStats,
    HybridFileResult,
    RetrieverStats,
    SearchConfig,
)
from .config import HYBRID_CONFIG, QUERY_DETECTION, SEARCH_DEFAULTS
from .fusion import find_module
from .service import VectorSearchService

NON_WORD_RE = re.compile(r"[^\w\s]")


class RetrievalStrategy(str, Enum):
    VECTOR_ONLY = "vector"
    GRAPH_ONLY = "graph"
    HYBRID = "hybrid"
    SMART = "smart"


class HybridRetrievalConfig(BaseModel):
    strategy: RetrievalStrategy = RetrievalStrategy.HYBRID
    top_k: int = HYBRID_CONFIG["top_k"]
    vector_weight: float = HYBRID_CONFIG["vector_weight"]
    graph_weight: float = HYBRID_CONFIG["graph_weight"]
    include_related_files: bool = True
    max_depth: int = 0  # > 0 adds neighbours of each hit at a propagated score
    similarity_threshold: Optional[float] = None
    max_file_size: int = SEARCH_DEFAULTS["max_file_size"]


def detect_query_type(query: str) -> RetrievalStrategy:
    """
    Choose a strategy from query wording: structural words favour the graph,
    concept words favour vectors, mixed or neither gives hybrid.
    """
    lowered = query.lower()
    has_graph = any(keyword in lowered for keyword in QUERY_DETECTION["graph_keywords"])
    has_vector = any(keyword in lowered for keyword in QUERY_DETECTION["vector_keywords"])

    if has_graph and not has_vector:
        return RetrievalStrategy.GRAPH_ONLY
    if has_vector and not has_graph:
        return RetrievalStrategy.VECTOR_ONLY
    return RetrievalStrategy.HYBRID


def extract_keywords(query: str, min_length: int = None) -> List[str]:
    min_length = min_length or HYBRID_CONFIG["min_keyword_length"]
    return [word for word in NON_WORD_RE.sub(" ", query.lower()).split() if len(word) >= min_length]


def calculate_graph_score(relationships: Optional[FileRelationships]) -> float:
    """
    Centrality in [0, 1]. Being imported counts most, then importing, then module cohesion.
    """
    if relationships is None:
        return 0.0
    score = (
        len(relationships.imported_by) * 0.5
        + len(relationships.imports) * 0.3
        + len(relationships.same_module) * 0.2
    )
    return min(score / HYBRID_CONFIG["centrality_cap"], 1.0)


class HybridRetriever:
    """
    Retrieve files using a chosen strategy over a ready VectorSearchService.
    """

    def __init__(self, vector_service: VectorSearchService, dependency_graph: Optional[DependencyGraph] = None):
        self.vector_service = vector_service
        self.dependency_graph = dependency_graph

    def retrieve(self, query: str, config: Optional[HybridRetrievalConfig] = None) -> List[HybridFileResult]:
        config = config or HybridRetrievalConfig()
        logger.debug(f"Retrieving with strategy: {config.strategy.value}, query: \"{query[:50]}\"")

        strategy = config.strategy
        if strategy == RetrievalStrategy.SMART:
            strategy = detect_query_type(query)
            logger.debug(f"Smart strategy resolved to '{strategy.value}'")

        if strategy == RetrievalStrategy.VECTOR_ONLY:
            return self.retrieve_vector_only(query, config)
        if strategy == RetrievalStrategy.GRAPH_ONLY:
            return self.retrieve_graph_only(query, config)
        return self.retrieve_hybrid(query, config)

    def retrieve_vector_only(self, query: str, config: HybridRetrievalConfig) -> List[HybridFileResult]:
        search_config = SearchConfig(top_k=config.top_k, max_file_size=config.max_file_size)
        if config.similarity_threshold is not None:
            search_config.similarity_threshold = config.similarity_threshold

        results = self.vector_service.search_files(query, search_config)
        return [
            HybridFileResult(**result.model_dump(), match_reasons=["Semantic similarity"], rank=rank)
            for rank, result in enumerate(results, start=1)
        ]

    def retrieve_graph_only(self, query: str, config: HybridRetrievalConfig) -> List[HybridFileResult]:
        if self.dependency_graph is None:
            logger.warning("No dependency graph available, falling back to vector search")
            return self.retrieve_vector_only(query, config)

        matched = self.find_files_in_graph(extract_keywords(query))
        results: List[HybridFileResult] = []
        for idx, file_path in enumerate(matched[: config.top_k]):
            score = 1 - idx / len(matched)
            result = self.vector_service.resolver.to_result(file_path, score, config.max_file_size)
            if result is None:
                continue
            results.append(
                HybridFileResult(
                    **result.model_dump(),
                    match_reasons=["Dependency graph match"],
                    relationships=self.get_file_relationships(file_path),
                    rank=len(results) + 1,
                )
            )
        return results

    def retrieve_hybrid(self, query: str, config: HybridRetrievalConfig) -> List[HybridFileResult]:
        logger.debug(f"Using hybrid retrieval (vector: {config.vector_weight}, graph: {config.graph_weight})")

        threshold = config.similarity_threshold or HYBRID_CONFIG["similarity_threshold"]
        vector_results = self.vector_service.search_files(
            query,
            SearchConfig(top_k=config.top_k * 2, similarity_threshold=threshold, max_file_size=config.max_file_size),
        )
        logger.debug(f"Vector search returned {len(vector_results)} results")

        scored: Dict[str, HybridFileResult] = {
            result.path: HybridFileResult(**result.model_dump(), match_reasons=["Vector similarity"])
            for result in vector_results
        }

        if self.dependency_graph is not None and config.include_related_files:
            for file_path in list(scored.keys()):
                current = scored[file_path]
                relationships = self.get_file_relationships(file_path)
                current.relationships = relationships

                graph_score = calculate_graph_score(relationships)
                combined = current.relevance_score * config.vector_weight + graph_score * config.graph_weight
                current.relevance_score = combined
                current.match_reasons.append(f"Graph score: {graph_score:.2f}")

                if config.max_depth > 0:
                    self._add_neighbours(scored, file_path, relationships, combined, config)

        ranked = sorted(scored.values(), key=lambda r: r.relevance_score, reverse=True)[: config.top_k]
        for rank, result in enumerate(ranked, start=1):
            result.rank = rank

        logger.info(f"Hybrid retrieval returned {len(ranked)} results")
        return ranked

    def _add_neighbours(
        self,
        scored: Dict[str, HybridFileResult],
        parent_path: str,
        relationships: FileRelationships,
        parent_score: float,
        config: HybridRetrievalConfig,
    ) -> None:
        neighbours = (
            relationships.imports[: HYBRID_CONFIG["max_related_imports"]]
            + relationships.imported_by[: HYBRID_CONFIG["max_related_importers"]]
            + relationships.same_module[: HYBRID_CONFIG["max_related_same_module"]]
        )
        parent_name = parent_path.split("/")[-1]
        for related_path in neighbours:
            if related_path in scored:
                continue
            result = self.vector_service.resolver.to_result(
                related_path, parent_score * HYBRID_CONFIG["propagated_score_ratio"], config.max_file_size
            )
            if result is None:
                continue
            scored[related_path] = HybridFileResult(
                **result.model_dump(),
                match_reasons=[f"Related to {parent_name}"],
                relationships=self.get_file_relationships(related_path),
            )

    def get_file_relationships(self, file_path: str) -> FileRelationships:
        if self.dependency_graph is None:
            return FileRelationships()

        imports = [
            edge.resolved_path
            for edge in self.dependency_graph.imports
            if edge.source == file_path and edge.resolved_path
        ]
        imported_by = [edge.source for edge in self.dependency_graph.imports if edge.resolved_path == file_path]
        module = find_module(self.dependency_graph, file_path)
        same_module = [f for f in module.files if f != file_path] if module else []

        return FileRelationships(
            imports=list(dict.fromkeys(imports)),
            imported_by=list(dict.fromkeys(imported_by)),
            same_module=list(dict.fromkeys(same_module)),
        )

    def find_files_in_graph(self, keywords: List[str]) -> List[str]:
        """
        File nodes and module members whose names contain any keyword, in discovery order.
        """
        if self.dependency_graph is None or not keywords:
            return []

        matched: Dict[str, None] = {}
        for node in self.dependency_graph.graph.nodes:
            if node.type == "file" and any(keyword in node.name.lower() for keyword in keywords):
                matched[node.id] = None

        for module in self.dependency_graph.modules:
            if any(keyword in module.name.lower() for keyword in keywords):
                for file_path in module.files:
                    matched[file_path] = None

        return list(matched)

    def get_stats(self) -> RetrieverStats:
        graph = self.dependency_graph
        return RetrieverStats(
            has_vector_store=self.vector_service is not None,
            has_dependency_graph=graph is not None,
            graph_stats=GraphStats(
                total_nodes=len(graph.graph.nodes),
                total_edges=len(graph.graph.edges),
                modules=len(graph.modules),
            ) if graph is not None else None,
        )
