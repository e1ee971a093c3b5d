# Custom exceptions for Argus

from typing import List, Optional


class ArgusError(Exception):
    """Base exception for all application-specific errors."""
    pass


class ConfigError(ArgusError):
    """Raised for configuration-related problems."""
    pass


class EmbeddingProviderError(ArgusError):
    """Raised when an embedding provider cannot be constructed."""
    pass


class MissingCredentialError(EmbeddingProviderError):
    """Raised when a remote embedding provider is selected without an API key."""
    def __init__(self, provider: str, env_vars: Optional[List[str]] = None):
        self.provider = provider
        self.env_vars = env_vars or []
        message = f"{provider} embeddings require an API key"
        if self.env_vars:
            message += f" (set embeddings.api_key in config or one of: {', '.join(self.env_vars)})"
        super().__init__(message)


class UnsupportedProviderError(EmbeddingProviderError):
    """Raised for embedding providers that are unknown or not available yet."""
    def __init__(self, provider: str, requirement: str = ""):
        self.provider = provider
        self.requirement = requirement
        message = f"Unsupported embeddings provider: {provider}"
        if requirement:
            message += f". {requirement}"
        super().__init__(message)


class NotInitializedError(ArgusError):
    """Raised when the vector index is queried before initialize() completed."""
    def __init__(self, message: str = "Vector store not initialized. Call initialize() before searching."):
        super().__init__(message)


class IndexStateError(ArgusError):
    """Raised when a lifecycle operation is not valid in the index's current state."""
    pass


class CorpusMismatchError(IndexStateError):
    """Raised when initialize() targets a different corpus than the ready index."""
    pass


class BatchEmbeddingError(ArgusError):
    """Raised when an embedding request for a batch of documents fails."""
    def __init__(self, batch_number: int, total_batches: int, cause: Exception):
        self.batch_number = batch_number
        self.total_batches = total_batches
        self.cause = cause
        super().__init__(
            f"Failed to process batch {batch_number}/{total_batches}: {type(cause).__name__}: {cause}"
        )
