"""
Cache-first file content resolution shared by search, fusion and hybrid retrieval.
"""

from pathlib import Path
from typing import Optional

from argus.logging_config import logger

from ..schemas import SearchResult
from .cache import ContentCache
from .ingestion import resolve_path


class ContentResolver:
    """
    Reads files relative to a project root, preferring the content cache.
    """

    def __init__(self, project_root: Path, cache: ContentCache):
        self.project_root = Path(project_root)
        self.cache = cache

    def read(self, file_path: str) -> Optional[str]:
        """
        Return the full content of `file_path`, or None if it cannot be read.

        Disk reads are written back to the cache.
        """
        content = self.cache.get(file_path)
        if content is not None:
            return content

        try:
            content = resolve_path(self.project_root, file_path).read_text(encoding="utf-8", errors="ignore")
        except (OSError, UnicodeError) as e:
            logger.debug(f"Failed to read file: {file_path} ({e})")
            return None

        self.cache.put(file_path, content)
        return content

    def to_result(self, file_path: str, relevance_score: float, max_file_size: int) -> Optional[SearchResult]:
        """
        Build a SearchResult with content truncated to `max_file_size` characters.
        """
        content = self.read(file_path)
        if content is None:
            return None

        truncated = len(content) > max_file_size
        return SearchResult(
            path=file_path,
            content=content[:max_file_size] if truncated else content,
            truncated=truncated,
            size=len(content),
            relevance_score=relevance_score,
        )
