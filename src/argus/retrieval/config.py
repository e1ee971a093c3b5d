"""
Configuration for ingestion, vector search, and graph relevance fusion.
"""

# Substrings identifying test files (matched case-insensitively against the path)
TEST_PATTERNS = [
    ".test.", ".spec.", "__tests__",  # TypeScript / JavaScript
    "_test.dart",  # Dart
    "/test/",
    "test_", "_test.py", "conftest.py", "/tests/",  # Python
    "Test.java", "IT.java",  # Java
    "_test.go",  # Go
    "Test.cs", "Tests.cs", "Spec.cs", "Specs.cs",  # C#
]

COMMON_EXCLUDE_PATTERNS = ["node_modules", "dist", "build", "out", "bin", "obj", "vendor", "target"]

# Substring patterns dropped during ingestion when the caller supplies none
DEFAULT_EXCLUDE_PATTERNS = COMMON_EXCLUDE_PATTERNS + [p for p in TEST_PATTERNS if p not in COMMON_EXCLUDE_PATTERNS]

SEARCH_DEFAULTS = {
    "top_k": 5,
    "max_file_size": 100_000,  # characters per document (files > 2x are skipped)
    "similarity_threshold": 0.5,
    "candidate_multiplier": 2,  # raw candidates requested per wanted result
    "max_related": 5,  # graph-expanded files per query, further capped at top_k
}

INGESTION_CONFIG = {
    "progress_interval": 50,  # emit a loading progress event every N files
}

CACHE_CONFIG = {
    "max_entries": 50,
}

# Remote providers with a total-token budget per request
BATCHING_CONFIG = {
    "min_documents": 10,  # batching only kicks in above this corpus size
    "chars_per_token": 4,
    "max_tokens_per_document": 1500,
    "truncation_safety": 0.9,  # keep 90% of the per-document token cap
    "max_documents_per_batch": 5,
}

# Relevance contributed to a related file per primary result
FUSION_WEIGHTS = {
    "imports": 0.4,  # primary imports the file
    "imported_by": 0.3,  # file imports the primary
    "same_module": 0.2,
}

HYBRID_CONFIG = {
    "top_k": 10,
    "vector_weight": 0.6,
    "graph_weight": 0.4,
    "similarity_threshold": 0.3,
    "propagated_score_ratio": 0.3,  # related files get 30% of their parent's score
    "max_related_imports": 3,
    "max_related_importers": 3,
    "max_related_same_module": 2,
    "centrality_cap": 10,
    "min_keyword_length": 4,
}

# Query type detection heuristics for the "smart" strategy
QUERY_DETECTION = {
    "graph_keywords": [
        "import", "depend", "call", "extend", "implement",
        "inherit", "module", "related to", "connected", "uses",
    ],
    "vector_keywords": [
        "authentication", "security", "validation", "processing",
        "handling", "logic", "implementation", "algorithm",
    ],
}

DOCS_STORE_CONFIG = {
    "extension": ".md",
    "max_file_size": 1_000_000,
    "top_k": 5,
}
