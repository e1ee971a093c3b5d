"""
Tests for dependency-graph relevance fusion.
"""

import pytest

from argus.retrieval.cache import ContentCache
from argus.retrieval.content import ContentResolver
from argus.retrieval.fusion import fuse_with_graph, merge_results, score_related_files
from argus.schemas import DependencyGraph, SearchResult

pytestmark = pytest.mark.fast


GRAPH_JSON = {
    "imports": [
        {"source": "x.py", "target": "./y", "type": "local", "resolvedPath": "y.py"},
        {"source": "z.py", "target": "./x", "type": "local", "resolvedPath": "x.py"},
        {"source": "x.py", "target": "requests", "type": "external"},
    ],
    "modules": [{"name": "core", "files": ["x.py", "w.py"]}],
}


@pytest.fixture
def graph():
    return DependencyGraph.model_validate(GRAPH_JSON)


@pytest.fixture
def resolver(temp_dir):
    for name in ("x.py", "y.py", "z.py", "w.py"):
        (temp_dir / name).write_text(f"content of {name}")
    return ContentResolver(temp_dir, ContentCache())


def result(path, score):
    return SearchResult(path=path, content="", truncated=False, size=0, relevance_score=score)


def test_graph_json_aliases(graph):
    assert graph.imports[0].resolved_path == "y.py"
    assert graph.imports[2].resolved_path is None


def test_score_related_files(graph):
    scores = score_related_files(["x.py"], graph)

    assert scores == {"y.py": pytest.approx(0.4), "z.py": pytest.approx(0.3), "w.py": pytest.approx(0.2)}


def test_primary_paths_are_never_scored(graph):
    scores = score_related_files(["x.py", "z.py"], graph)

    # z.py is primary itself, so it is never scored; x.py neither
    assert "x.py" not in scores and "z.py" not in scores
    assert scores["y.py"] == pytest.approx(0.4)


def test_scores_accumulate_across_rules():
    graph = DependencyGraph.model_validate(
        {
            "imports": [{"source": "x.py", "target": "./y", "type": "local", "resolvedPath": "y.py"}],
            "modules": [{"name": "core", "files": ["x.py", "y.py"]}],
        }
    )
    # imported by x.py (0.4) and in the same module (0.2)
    assert score_related_files(["x.py"], graph) == {"y.py": pytest.approx(0.6)}


def test_scores_accumulate_across_several_primaries():
    graph = DependencyGraph.model_validate(
        {
            "imports": [
                {"source": "a.py", "target": "./y", "type": "local", "resolvedPath": "y.py"},
                {"source": "b.py", "target": "./y", "type": "local", "resolvedPath": "y.py"},
            ],
            "modules": [],
        }
    )
    assert score_related_files(["a.py", "b.py"], graph) == {"y.py": pytest.approx(0.8)}


def test_fuse_adds_imported_and_importing_files(graph, resolver):
    fused = fuse_with_graph([result("x.py", 0.9)], graph, resolver, top_k=5, max_file_size=1000)

    by_path = {r.path: r for r in fused}
    assert by_path["y.py"].relevance_score >= 0.4
    assert by_path["z.py"].relevance_score >= 0.3
    assert by_path["y.py"].content == "content of y.py"
    assert [r.path for r in fused].count("x.py") == 1
    assert [r.path for r in fused] == ["x.py", "y.py", "z.py", "w.py"]


def test_fuse_limits_to_twice_top_k(graph, resolver):
    fused = fuse_with_graph([result("x.py", 0.9)], graph, resolver, top_k=1, max_file_size=1000)
    assert [r.path for r in fused] == ["x.py", "y.py"]


def test_fuse_drops_unreadable_related_files(graph, resolver, temp_dir):
    (temp_dir / "y.py").unlink()
    fused = fuse_with_graph([result("x.py", 0.9)], graph, resolver, top_k=5, max_file_size=1000)
    assert "y.py" not in [r.path for r in fused]


def test_max_related_caps_expansion(graph, resolver):
    fused = fuse_with_graph([result("x.py", 0.9)], graph, resolver, top_k=5, max_file_size=1000, max_related=1)
    assert [r.path for r in fused] == ["x.py", "y.py"]


def test_without_graph_primary_is_unchanged(resolver):
    primary = [result("x.py", 0.9), result("y.py", 0.6)]
    assert fuse_with_graph(primary, None, resolver, top_k=5, max_file_size=1000) == primary


def test_merge_primary_wins_on_duplicate_path():
    merged = merge_results([result("a.py", 0.5)], [result("a.py", 0.9), result("b.py", 0.5)], limit=10)

    assert [(r.path, r.relevance_score) for r in merged] == [("a.py", 0.5), ("b.py", 0.5)]


def test_related_files_capped_at_five_by_default(temp_dir):
    targets = [f"dep{i}.py" for i in range(8)]
    graph = DependencyGraph.model_validate(
        {
            "imports": [
                {"source": "x.py", "target": f"./{name[:-3]}", "type": "local", "resolvedPath": name}
                for name in targets
            ],
            "modules": [],
        }
    )
    for name in ["x.py"] + targets:
        (temp_dir / name).write_text(f"content of {name}")
    resolver = ContentResolver(temp_dir, ContentCache())

    fused = fuse_with_graph([result("x.py", 0.9)], graph, resolver, top_k=10, max_file_size=1000)

    assert [r.path for r in fused] == ["x.py"] + targets[:5]

    # an explicit max_related overrides the default cap
    fused = fuse_with_graph([result("x.py", 0.9)], graph, resolver, top_k=10, max_file_size=1000, max_related=8)
    assert len(fused) == 9
