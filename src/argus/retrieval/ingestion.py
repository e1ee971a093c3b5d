"""
Ingestion pipeline: filter candidate files, load them into Documents, and
plan embedding batches that respect the active provider's request limits.
"""

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

from argus.logging_config import logger

from ..embeddings.base import EmbeddingProvider
from ..exceptions import BatchEmbeddingError
from ..schemas import Document, DocumentMetadata, IngestionProgress
from .cache import ContentCache
from .config import BATCHING_CONFIG, DEFAULT_EXCLUDE_PATTERNS, INGESTION_CONFIG, TEST_PATTERNS
from .vector_store import InMemoryVectorStore

ProgressCallback = Callable[[IngestionProgress], None]


@dataclass
class LoadResult:
    """Outcome of loading a filtered file list."""
    documents: List[Document] = field(default_factory=list)
    attempted: int = 0
    loaded: int = 0
    skipped: int = 0


def is_test_file(file_path: str, test_patterns: Sequence[str] = None) -> bool:
    """
    Check whether a path looks like a test file (case-insensitive substring match).
    """
    patterns = TEST_PATTERNS if test_patterns is None else test_patterns
    lowered = file_path.lower()
    return any(pattern.lower() in lowered for pattern in patterns)


def filter_files(
    file_paths: Iterable[str],
    exclude_patterns: Optional[Sequence[str]] = None,
    include_extensions: Optional[Sequence[str]] = None,
) -> List[str]:
    """
    Apply the ingestion filters, in order:

    1. drop paths containing any exclude pattern (plain substring match)
    2. drop test files, unless an extension allowlist was supplied
    3. with an allowlist, keep only files whose extension is listed

    Args:
        file_paths: Candidate paths (relative to the project root or absolute)
        exclude_patterns: Substrings to exclude (None -> built-in defaults)
        include_extensions: Extension allowlist such as [".py", ".md"]

    Returns:
        The surviving paths, in input order
    """
    excludes = DEFAULT_EXCLUDE_PATTERNS if exclude_patterns is None else list(exclude_patterns)
    # An empty allowlist still counts as "supplied" for the test-file rule
    allowlist_supplied = include_extensions is not None

    kept: List[str] = []
    for file_path in file_paths:
        if any(pattern in file_path for pattern in excludes):
            continue

        if not allowlist_supplied and is_test_file(file_path):
            continue

        if include_extensions:
            if Path(file_path).suffix not in include_extensions:
                continue

        kept.append(file_path)
    return kept


def resolve_path(project_root: Path, file_path: str) -> Path:
    path = Path(file_path)
    return path if path.is_absolute() else Path(project_root) / path


def build_metadata(file_path: str) -> DocumentMetadata:
    path = Path(file_path)
    return DocumentMetadata(
        filename=path.name,
        extension=path.suffix,
        directory=str(path.parent),
    )


def _loading_event(processed: int, total: int, loaded: int, skipped: int) -> IngestionProgress:
    percentage = round(processed / total * 100, 1) if total else 100.0
    return IngestionProgress(
        stage="loading",
        processed=processed,
        total=total,
        loaded=loaded,
        skipped=skipped,
        percentage=percentage,
    )


def load_documents(
    file_paths: Sequence[str],
    project_root: Path,
    max_file_size: int,
    cache: Optional[ContentCache] = None,
    progress_callback: Optional[ProgressCallback] = None,
    progress_interval: int = None,
) -> LoadResult:
    """
    Read each file into a Document.

    Files larger than twice `max_file_size` bytes are skipped without being
    read. Content longer than `max_file_size` characters is truncated and the
    document flagged. The untruncated text goes into `cache`. Unreadable files
    are skipped and counted; they never abort the load.
    """
    interval = progress_interval or INGESTION_CONFIG["progress_interval"]
    result = LoadResult(attempted=len(file_paths))
    total = len(file_paths)

    for position, file_path in enumerate(file_paths, start=1):
        full_path = resolve_path(project_root, file_path)
        try:
            size = full_path.stat().st_size
            if size > max_file_size * 2:
                result.skipped += 1
                logger.debug(f"Skipped (too large): {file_path} ({size} bytes)")
            else:
                content = full_path.read_text(encoding="utf-8", errors="ignore")
                truncated = len(content) > max_file_size
                result.documents.append(
                    Document(
                        path=file_path,
                        content=content[:max_file_size] if truncated else content,
                        size=size,
                        truncated=truncated,
                        metadata=build_metadata(file_path),
                    )
                )
                if cache is not None:
                    cache.put(file_path, content)
                result.loaded += 1
        except (OSError, UnicodeError) as e:
            result.skipped += 1
            logger.debug(f"Failed to load file: {file_path} ({e})")

        if progress_callback and (position % interval == 0 or position == total):
            progress_callback(_loading_event(position, total, result.loaded, result.skipped))

    return result


def estimate_tokens(text: str, chars_per_token: int = None) -> int:
    """
    Rough token estimate: ~4 characters per token, rounded up.
    """
    if chars_per_token is None:
        chars_per_token = BATCHING_CONFIG["chars_per_token"]
    return math.ceil(len(text) / chars_per_token)


def truncate_for_batching(
    documents: Sequence[Document],
    max_tokens_per_document: int = None,
) -> List[Document]:
    """
    Cut every document whose estimated tokens exceed the per-document cap down
    to 90% of that cap (in characters), flagging it as truncated.
    """
    cap = max_tokens_per_document or BATCHING_CONFIG["max_tokens_per_document"]
    max_chars = math.floor(cap * BATCHING_CONFIG["chars_per_token"] * BATCHING_CONFIG["truncation_safety"])

    processed: List[Document] = []
    truncated_count = 0
    for doc in documents:
        doc_tokens = estimate_tokens(doc.content)
        if doc_tokens > cap:
            processed.append(doc.model_copy(update={"content": doc.content[:max_chars], "truncated": True}))
            truncated_count += 1
            logger.debug(
                f"Truncating {doc.path}: {doc_tokens} tokens -> {estimate_tokens(doc.content[:max_chars])} tokens"
            )
        else:
            processed.append(doc)

    if truncated_count:
        logger.info(f"Truncated {truncated_count} documents to fit {cap} token limit")
    return processed


def split_batches(documents: Sequence[Document], batch_size: int) -> List[List[Document]]:
    return [list(documents[i : i + batch_size]) for i in range(0, len(documents), batch_size)]


def plan_batches(documents: Sequence[Document], provider: EmbeddingProvider) -> List[List[Document]]:
    """
    Decide how documents are grouped into embedding requests.

    - token-budgeted providers with more than `min_documents` documents:
      per-document truncation, then small fixed-size batches
    - providers limited only by texts per request: chunks of that size
    - otherwise a single batch
    """
    if not documents:
        return []

    if provider.enforces_token_budget and len(documents) > BATCHING_CONFIG["min_documents"]:
        logger.info(f"Using batched embedding for {provider.name} ({provider.max_tokens_per_request} token budget per request)")
        bounded = truncate_for_batching(documents)
        batch_size = BATCHING_CONFIG["max_documents_per_batch"]
        if provider.max_texts_per_request:
            batch_size = min(batch_size, provider.max_texts_per_request)
        batches = split_batches(bounded, batch_size)
        logger.info(f"Split {len(bounded)} documents into {len(batches)} batches (max {batch_size} docs/batch)")
        return batches

    if provider.max_texts_per_request and len(documents) > provider.max_texts_per_request:
        return split_batches(documents, provider.max_texts_per_request)

    return [list(documents)]


def embed_batches(
    batches: Sequence[Sequence[Document]],
    provider: EmbeddingProvider,
    store: InMemoryVectorStore,
    progress_callback: Optional[ProgressCallback] = None,
) -> InMemoryVectorStore:
    """
    Embed batches strictly one after another, appending each to `store`.

    Any provider failure aborts the whole run with BatchEmbeddingError.
    """
    total_batches = len(batches)
    total_docs = sum(len(batch) for batch in batches)
    embedded = 0

    for number, batch in enumerate(batches, start=1):
        batch_tokens = sum(estimate_tokens(doc.content) for doc in batch)
        logger.debug(f"Processing batch {number}/{total_batches}: {len(batch)} documents (~{batch_tokens:,} tokens total)")
        try:
            vectors = provider.embed_documents([doc.content for doc in batch])
        except Exception as e:
            logger.error(f"Failed to process batch {number}/{total_batches}: {e}")
            raise BatchEmbeddingError(number, total_batches, e) from e

        if len(vectors) != len(batch):
            error = ValueError(f"provider returned {len(vectors)} vectors for {len(batch)} documents")
            logger.error(f"Failed to process batch {number}/{total_batches}: {error}")
            raise BatchEmbeddingError(number, total_batches, error)

        store.add_vectors(batch, vectors)
        embedded += len(batch)

        if progress_callback:
            progress_callback(
                IngestionProgress(
                    stage="embedding",
                    processed=embedded,
                    total=total_docs,
                    loaded=embedded,
                    percentage=round(embedded / total_docs * 100, 1) if total_docs else 100.0,
                )
            )

    return store
