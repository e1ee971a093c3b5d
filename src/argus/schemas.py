from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Literal


class DocumentMetadata(BaseModel):
    """
    File-level metadata attached to every indexed document.
    """
    model_config = ConfigDict(frozen=True)

    filename: str
    extension: str
    directory: str


class Document(BaseModel):
    """
    A loaded corpus file, ready to be embedded.

    `content` may be truncated (see `truncated`); `size` is the on-disk size in bytes.
    """
    model_config = ConfigDict(frozen=True)

    path: str
    content: str
    size: int
    truncated: bool = False
    metadata: DocumentMetadata


class SearchResult(BaseModel):
    """
    Represents a file returned by a similarity or graph-expanded search.
    """
    path: str
    content: str
    truncated: bool
    size: int
    relevance_score: float


class SearchConfig(BaseModel):
    """
    Per-call tunables for building and querying the vector index.
    """
    top_k: int = Field(default=5, ge=1)
    max_file_size: int = Field(default=100_000, ge=1)  # characters kept per document
    include_extensions: Optional[List[str]] = None  # e.g. [".py", ".md"]
    exclude_patterns: Optional[List[str]] = None  # None -> built-in defaults
    similarity_threshold: float = 0.5
    max_related: Optional[int] = None  # cap on graph-expanded files, None = min(top_k, 5)


# Dependency graph (produced by an external analyzer, consumed read-only)

class ImportEdge(BaseModel):
    """
    One import statement: `source` imports `target`.
    """
    model_config = ConfigDict(populate_by_name=True)

    source: str
    target: str
    imports: List[str] = Field(default_factory=list)
    type: Literal["local", "external", "framework"] = "local"
    resolved_path: Optional[str] = Field(default=None, alias="resolvedPath")


class ModuleInfo(BaseModel):
    """
    A logical module grouping a set of files.
    """
    name: str
    path: str = ""
    files: List[str] = Field(default_factory=list)
    dependencies: List[str] = Field(default_factory=list)
    exports: List[str] = Field(default_factory=list)


class GraphNode(BaseModel):
    id: str
    type: Literal["file", "module", "external"] = "file"
    name: str


class GraphEdge(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(alias="from")
    to: str
    type: Literal["import", "require"] = "import"


class GraphData(BaseModel):
    nodes: List[GraphNode] = Field(default_factory=list)
    edges: List[GraphEdge] = Field(default_factory=list)


class DependencyGraph(BaseModel):
    """
    Import edges and module groupings describing which files reference which.
    """
    imports: List[ImportEdge] = Field(default_factory=list)
    modules: List[ModuleInfo] = Field(default_factory=list)
    graph: GraphData = Field(default_factory=GraphData)


# Ingestion / lifecycle reporting

class IngestionProgress(BaseModel):
    """
    Structured progress event emitted while the index is being built.
    """
    stage: Literal["loading", "embedding"]
    processed: int
    total: int
    loaded: int = 0
    skipped: int = 0
    percentage: float = 0.0


class IndexStats(BaseModel):
    """
    Snapshot of a vector index.
    """
    state: Literal["uninitialized", "initializing", "ready"]
    initialized: bool
    document_count: int
    cache_size: int
    provider: str


# Hybrid retrieval

class FileRelationships(BaseModel):
    imports: List[str] = Field(default_factory=list)
    imported_by: List[str] = Field(default_factory=list)
    same_module: List[str] = Field(default_factory=list)


class HybridFileResult(SearchResult):
    """
    A search result annotated with why it matched and where it sits in the graph.
    """
    match_reasons: List[str] = Field(default_factory=list)
    relationships: Optional[FileRelationships] = None
    rank: int = 0


class DocHit(BaseModel):
    """
    A documentation page returned by the documentation store.
    """
    content: str
    file: str
    score: float


class GraphStats(BaseModel):
    total_nodes: int
    total_edges: int
    modules: int


class RetrieverStats(BaseModel):
    has_vector_store: bool
    has_dependency_graph: bool
    graph_stats: Optional[GraphStats] = None
