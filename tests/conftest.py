"""
Pytest configuration for the Argus test suite.

This conftest.py provides:
- Machine-mode logging (suppresses console output)
- Temp directories and a small sample project
- Fake embedding providers for exercising batching and failures offline
"""

import os
import shutil
import tempfile
from pathlib import Path
from typing import List, Sequence

import pytest

# Must be set before argus configures logging on import
os.environ.setdefault("ARGUS_MACHINE_MODE", "1")

from argus.embeddings.base import EmbeddingProvider
from argus.logging_config import setup_logging


# ============================================================================
# GLOBAL CONFIGURATION
# ============================================================================

def pytest_configure(config):
    """Keep test output free of console logging."""
    os.environ.setdefault("ARGUS_MACHINE_MODE", "1")


# ============================================================================
# LOGGING FIXTURES
# ============================================================================

@pytest.fixture(autouse=True)
def setup_test_logging():
    """
    Machine mode by default - suppress console logs for clean test output.
    """
    setup_logging(level="DEBUG", suppress_console=True)


# ============================================================================
# TEMPORARY DIRECTORY FIXTURES
# ============================================================================

@pytest.fixture
def temp_dir():
    """Create a temporary directory that's cleaned up after the test."""
    tmp = Path(tempfile.mkdtemp(prefix="argus_"))
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


SAMPLE_FILES = {
    "auth.py": "authentication login password session token authentication login password",
    "db.py": "database query connection cursor transaction database query",
    "ui.py": "render button layout widget canvas render button",
    "helpers.py": "format string padding indent helper format",
}


@pytest.fixture
def temp_project(temp_dir):
    """
    Create a temporary project with four small files of disjoint vocabulary.

    Returns:
        Path to the project root. File paths are relative to it.
    """
    for name, content in SAMPLE_FILES.items():
        (temp_dir / name).write_text(content, encoding="utf-8")
    yield temp_dir


@pytest.fixture
def sample_paths():
    return list(SAMPLE_FILES.keys())


# ============================================================================
# FAKE PROVIDERS
# ============================================================================

class FakeProvider(EmbeddingProvider):
    """
    Deterministic provider recording every request it receives.
    """

    name = "fake"

    def __init__(self, dimensions: int = 4, fail_on_call: int = None, **limits):
        self.dimensions = dimensions
        self.fail_on_call = fail_on_call
        self.calls: List[List[str]] = []
        self.max_tokens_per_request = limits.get("max_tokens_per_request")
        self.max_texts_per_request = limits.get("max_texts_per_request")

    def _vector(self, text: str) -> List[float]:
        vector = [0.0] * self.dimensions
        vector[len(text) % self.dimensions] = 1.0
        return vector

    def embed_documents(self, texts: Sequence[str]) -> List[List[float]]:
        self.calls.append(list(texts))
        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            raise RuntimeError("rate limited")
        return [self._vector(text) for text in texts]

    def embed_query(self, text: str) -> List[float]:
        return self._vector(text)


@pytest.fixture
def fake_provider_cls():
    return FakeProvider
