"""
Markdown documentation store: RAG over a directory of generated docs using
free local embeddings.
"""

from pathlib import Path
from typing import Dict, List, Optional, Union

from argus.logging_config import logger

from ..embeddings.factory import EmbeddingsConfig, EmbeddingsProviderName
from ..exceptions import ArgusError
from ..schemas import DocHit, SearchConfig
from .config import DOCS_STORE_CONFIG
from .service import VectorSearchService


class DocumentationStore:
    """
    Answers questions against the `*.md` files directly inside a docs directory.

    Build failures are logged and leave the store not ready; queries against a
    store that is not ready return no hits.
    """

    def __init__(self):
        self._service: Optional[VectorSearchService] = None
        self._documents: Dict[str, str] = {}
        self._docs_path: Optional[Path] = None

    def initialize(self, docs_path: Union[str, Path]) -> bool:
        """
        Index the markdown files in `docs_path`. A no-op if already ready for that path.

        Returns:
            True if the store is ready afterwards
        """
        docs_path = Path(docs_path)
        if self.is_ready() and self._docs_path == docs_path:
            return True

        logger.info("Initializing documentation vector store...")
        try:
            md_files = sorted(
                entry.name
                for entry in docs_path.iterdir()
                if entry.is_file() and entry.suffix == DOCS_STORE_CONFIG["extension"]
            )
            if not md_files:
                logger.warning(f"No markdown files found in documentation path: {docs_path}")
                return False

            documents = {
                name: (docs_path / name).read_text(encoding="utf-8", errors="ignore") for name in md_files
            }

            service = VectorSearchService(
                docs_path, embeddings=EmbeddingsConfig(provider=EmbeddingsProviderName.LOCAL)
            )
            service.initialize(
                md_files,
                SearchConfig(
                    max_file_size=DOCS_STORE_CONFIG["max_file_size"],
                    include_extensions=[DOCS_STORE_CONFIG["extension"]],
                    exclude_patterns=[],
                ),
            )
        except (OSError, ArgusError) as e:
            logger.warning(f"Failed to initialize documentation store: {e}")
            self.reset()
            return False

        self._service = service
        self._documents = documents
        self._docs_path = docs_path
        logger.info(f"Documentation store initialized with {len(documents)} files")
        return True

    def query(self, question: str, top_k: int = None) -> List[DocHit]:
        if not self.is_ready():
            return []

        top_k = top_k or DOCS_STORE_CONFIG["top_k"]
        results = self._service.search_files(question, SearchConfig(top_k=top_k))
        return [
            DocHit(
                content=self._documents.get(result.path, ""),
                file=Path(result.path).name,
                score=result.relevance_score,
            )
            for result in results
        ]

    def reload(self, docs_path: Union[str, Path]) -> bool:
        self.reset()
        return self.initialize(docs_path)

    def reset(self) -> None:
        if self._service is not None:
            self._service.clear()
        self._service = None
        self._documents = {}
        self._docs_path = None

    def is_ready(self) -> bool:
        return self._service is not None and self._service.is_ready
