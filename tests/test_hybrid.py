"""
Tests for hybrid retrieval strategies (vector, graph, hybrid, smart).
"""

import math

import pytest

from argus.retrieval import HybridRetrievalConfig, HybridRetriever, RetrievalStrategy, VectorSearchService
from argus.retrieval.hybrid import calculate_graph_score, detect_query_type, extract_keywords
from argus.schemas import DependencyGraph, FileRelationships

# cosine between the auth.py document and the query "authentication password"
AUTH_SIMILARITY = 4 / math.sqrt(28)

GRAPH = {
    "imports": [
        {"source": "auth.py", "target": "./db", "type": "local", "resolvedPath": "db.py"},
        {"source": "ui.py", "target": "./auth", "type": "local", "resolvedPath": "auth.py"},
    ],
    "modules": [{"name": "security", "path": "", "files": ["auth.py", "helpers.py"]}],
    "graph": {
        "nodes": [
            {"id": "auth.py", "type": "file", "name": "auth.py"},
            {"id": "db.py", "type": "file", "name": "db.py"},
            {"id": "ui.py", "type": "file", "name": "ui.py"},
            {"id": "helpers.py", "type": "file", "name": "helpers.py"},
        ],
        "edges": [
            {"from": "auth.py", "to": "db.py", "type": "import"},
            {"from": "ui.py", "to": "auth.py", "type": "import"},
        ],
    },
}


@pytest.fixture
def graph():
    return DependencyGraph.model_validate(GRAPH)


@pytest.fixture
def vector_service(temp_project, sample_paths):
    service = VectorSearchService(temp_project)
    service.initialize(sample_paths)
    return service


@pytest.fixture
def retriever(vector_service, graph):
    return HybridRetriever(vector_service, graph)


@pytest.mark.fast
class TestHelpers:

    @pytest.mark.parametrize(
        "query,expected",
        [
            ("what imports the database layer", RetrievalStrategy.GRAPH_ONLY),
            ("authentication logic", RetrievalStrategy.VECTOR_ONLY),
            ("which module has the validation", RetrievalStrategy.HYBRID),
            ("hello world", RetrievalStrategy.HYBRID),
        ],
    )
    def test_detect_query_type(self, query, expected):
        assert detect_query_type(query) == expected

    def test_extract_keywords(self):
        assert extract_keywords("Who uses the auth.py module?") == ["uses", "auth", "module"]

    def test_graph_score(self):
        relationships = FileRelationships(imports=["c"], imported_by=["a", "b"], same_module=["d"])
        assert calculate_graph_score(relationships) == pytest.approx(0.15)
        assert calculate_graph_score(None) == 0.0

    def test_graph_score_is_capped(self):
        relationships = FileRelationships(imported_by=[f"f{i}" for i in range(50)])
        assert calculate_graph_score(relationships) == 1.0


@pytest.mark.fast
class TestRelationships:

    def test_file_relationships(self, retriever):
        rel = retriever.get_file_relationships("auth.py")
        assert rel.imports == ["db.py"]
        assert rel.imported_by == ["ui.py"]
        assert rel.same_module == ["helpers.py"]

    def test_find_files_in_graph(self, retriever):
        assert retriever.find_files_in_graph(["helpers"]) == ["helpers.py"]
        assert retriever.find_files_in_graph(["security"]) == ["auth.py", "helpers.py"]
        assert retriever.find_files_in_graph([]) == []

    def test_stats(self, retriever, vector_service):
        stats = retriever.get_stats()
        assert stats.has_dependency_graph
        assert stats.graph_stats.total_nodes == 4
        assert stats.graph_stats.total_edges == 2
        assert stats.graph_stats.modules == 1

        assert HybridRetriever(vector_service).get_stats().graph_stats is None


@pytest.mark.integration
class TestStrategies:

    def test_vector_only(self, retriever):
        config = HybridRetrievalConfig(strategy=RetrievalStrategy.VECTOR_ONLY, top_k=1)
        [result] = retriever.retrieve("authentication password", config)

        assert result.path == "auth.py"
        assert result.rank == 1
        assert result.match_reasons == ["Semantic similarity"]

    def test_graph_only(self, retriever):
        config = HybridRetrievalConfig(strategy=RetrievalStrategy.GRAPH_ONLY)
        results = retriever.retrieve("which files belong to security", config)

        assert [r.path for r in results] == ["auth.py", "helpers.py"]
        assert [r.relevance_score for r in results] == [1.0, 0.5]
        assert results[0].match_reasons == ["Dependency graph match"]
        assert results[0].relationships.imports == ["db.py"]

    def test_graph_only_without_graph_falls_back_to_vector(self, vector_service):
        retriever = HybridRetriever(vector_service)
        config = HybridRetrievalConfig(strategy=RetrievalStrategy.GRAPH_ONLY)
        results = retriever.retrieve("authentication password", config)

        assert results[0].match_reasons == ["Semantic similarity"]

    def test_hybrid_blends_similarity_and_centrality(self, retriever):
        # the vector service has no graph of its own, so only auth.py matches
        [result] = retriever.retrieve("authentication password")

        graph_score = (0.5 + 0.3 + 0.2) / 10
        assert result.path == "auth.py"
        assert result.relevance_score == pytest.approx(AUTH_SIMILARITY * 0.6 + graph_score * 0.4)
        assert result.match_reasons == ["Vector similarity", "Graph score: 0.10"]
        assert result.rank == 1

    def test_hybrid_max_depth_adds_neighbours(self, retriever):
        config = HybridRetrievalConfig(max_depth=1)
        results = retriever.retrieve("authentication password", config)

        paths = [r.path for r in results]
        assert paths[0] == "auth.py"
        assert set(paths) == {"auth.py", "db.py", "ui.py", "helpers.py"}
        assert [r.rank for r in results] == list(range(1, len(results) + 1))
        scores = [r.relevance_score for r in results]
        assert scores == sorted(scores, reverse=True)

    def test_hybrid_neighbours_get_propagated_score(self, retriever):
        config = HybridRetrievalConfig(max_depth=1)
        by_path = {r.path: r for r in retriever.retrieve("authentication password", config)}

        parent = by_path["auth.py"].relevance_score
        assert by_path["db.py"].relevance_score == pytest.approx(parent * 0.3)
        assert by_path["db.py"].match_reasons == ["Related to auth.py"]

    def test_smart_routes_concept_queries_to_vector(self, retriever):
        config = HybridRetrievalConfig(strategy=RetrievalStrategy.SMART)
        results = retriever.retrieve("authentication", config)

        assert results[0].path == "auth.py"
        assert results[0].match_reasons == ["Semantic similarity"]
