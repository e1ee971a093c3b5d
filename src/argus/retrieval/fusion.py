"""
Graph-aware relevance fusion.

Expands a similarity-ranked result set with files that are structurally close
to it in the dependency graph (imports, importers, same module). Related files
get a purely structural score; it is not blended with cosine similarity.
"""

from typing import Dict, List, Optional, Sequence

from argus.logging_config import logger

from ..schemas import DependencyGraph, ModuleInfo, SearchResult
from .config import FUSION_WEIGHTS, SEARCH_DEFAULTS
from .content import ContentResolver


def find_module(graph: DependencyGraph, file_path: str) -> Optional[ModuleInfo]:
    """Return the first module whose file list contains `file_path`."""
    return next((module for module in graph.modules if file_path in module.files), None)


def score_related_files(
    primary_paths: Sequence[str],
    graph: DependencyGraph,
    weights: Dict[str, float] = None,
) -> Dict[str, float]:
    """
    Accumulate structural relevance for files related to the primary paths.

    For each primary path:
      +imports     for every file it imports locally (via the resolved path)
      +imported_by for every file that imports it
      +same_module for every other file of its module

    Contributions add up across rules and across primary paths. Primary
    paths themselves are never scored. Iteration order of the returned dict
    is first-contribution order.
    """
    weights = weights or FUSION_WEIGHTS
    primary = set(primary_paths)
    related: Dict[str, float] = {}

    def boost(path: str, amount: float) -> None:
        if path in primary:
            return
        related[path] = related.get(path, 0.0) + amount

    for file_path in primary_paths:
        for edge in graph.imports:
            if edge.source == file_path and edge.type == "local" and edge.resolved_path:
                boost(edge.resolved_path, weights["imports"])

        for edge in graph.imports:
            if edge.resolved_path == file_path:
                boost(edge.source, weights["imported_by"])

        module = find_module(graph, file_path)
        if module:
            for module_file in module.files:
                if module_file != file_path:
                    boost(module_file, weights["same_module"])

    return related


def find_related_files(
    primary_paths: Sequence[str],
    graph: DependencyGraph,
    resolver: ContentResolver,
    max_file_size: int,
    max_related: Optional[int] = None,
) -> List[SearchResult]:
    """
    Resolve the content of every related file, dropping unreadable ones.

    Returns results sorted by structural score (highest first), optionally
    capped at `max_related`.
    """
    related_results: List[SearchResult] = []
    for file_path, score in score_related_files(primary_paths, graph).items():
        result = resolver.to_result(file_path, score, max_file_size)
        if result is None:
            logger.debug(f"Failed to read related file: {file_path}")
            continue
        related_results.append(result)

    related_results.sort(key=lambda r: r.relevance_score, reverse=True)
    if max_related is not None:
        related_results = related_results[:max_related]
    return related_results


def merge_results(
    primary: Sequence[SearchResult],
    related: Sequence[SearchResult],
    limit: int,
) -> List[SearchResult]:
    """
    Merge by path (primary results win), sort by descending relevance and cut to `limit`.

    The sort is stable: on equal scores primary results come first, then
    related results in their own order.
    """
    merged: Dict[str, SearchResult] = {result.path: result for result in primary}
    for result in related:
        merged.setdefault(result.path, result)

    combined = sorted(merged.values(), key=lambda r: r.relevance_score, reverse=True)
    return combined[:limit]


def fuse_with_graph(
    primary: Sequence[SearchResult],
    graph: Optional[DependencyGraph],
    resolver: ContentResolver,
    top_k: int,
    max_file_size: int,
    max_related: Optional[int] = None,
) -> List[SearchResult]:
    """
    Expand and re-rank primary results using the dependency graph.

    Related files are capped at `max_related`, or at min(top_k, 5) when it is
    None. Without a graph (or without primary results) the primary list is
    returned unchanged.
    """
    if graph is None or not primary:
        return list(primary)

    if max_related is None:
        max_related = min(top_k, SEARCH_DEFAULTS["max_related"])

    related = find_related_files(
        [result.path for result in primary],
        graph,
        resolver,
        max_file_size,
        max_related=max_related,
    )
    logger.debug(f"Enhanced with {len(related)} related files from dependency graph")
    return merge_results(primary, related, limit=top_k * 2)
