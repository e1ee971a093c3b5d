"""
Embedding provider selection.

The set of providers is closed: every `EmbeddingsProviderName` member maps to
exactly one builder, or is explicitly listed as unavailable. Callers never
get a silent fallback to another provider.
"""

import os
from enum import Enum
from typing import Callable, Dict, Optional

from pydantic import BaseModel, field_validator

from argus.exceptions import MissingCredentialError, UnsupportedProviderError
from argus.logging_config import logger
from .base import EmbeddingProvider
from .config import (
    GOOGLE_EMBEDDINGS_CONFIG,
    LOCAL_EMBEDDINGS_CONFIG,
    OPENAI_EMBEDDINGS_CONFIG,
    UNAVAILABLE_PROVIDERS,
)
from .local import LocalEmbeddings
from .remote import GoogleEmbeddings, OpenAIEmbeddings


class EmbeddingsProviderName(str, Enum):
    LOCAL = "local"
    OPENAI = "openai"
    GOOGLE = "google"
    COHERE = "cohere"
    VOYAGE = "voyage"
    HUGGINGFACE = "huggingface"


class EmbeddingsConfig(BaseModel):
    """
    Which provider to use and how to reach it.
    """
    provider: EmbeddingsProviderName = EmbeddingsProviderName.LOCAL
    api_key: Optional[str] = None
    model: Optional[str] = None
    dimensions: int = LOCAL_EMBEDDINGS_CONFIG["dimensions"]

    @field_validator("provider", mode="before")
    @classmethod
    def _known_provider(cls, value):
        if isinstance(value, str) and value.lower() not in {p.value for p in EmbeddingsProviderName}:
            raise UnsupportedProviderError(value)
        return value.lower() if isinstance(value, str) else value


def resolve_api_key(config: EmbeddingsConfig, env_vars) -> Optional[str]:
    """
    Explicit key first, then the provider's environment variables in order.
    """
    if config.api_key:
        return config.api_key
    for var in env_vars:
        value = os.getenv(var)
        if value:
            return value
    return None


def _build_local(config: EmbeddingsConfig) -> EmbeddingProvider:
    logger.info("Using local TF-IDF embeddings (free, offline)")
    return LocalEmbeddings(dimensions=config.dimensions)


def _build_openai(config: EmbeddingsConfig) -> EmbeddingProvider:
    env_vars = OPENAI_EMBEDDINGS_CONFIG["env_vars"]
    api_key = resolve_api_key(config, env_vars)
    if not api_key:
        raise MissingCredentialError("OpenAI", env_vars)
    logger.info(f"Using OpenAI embeddings ({config.model or OPENAI_EMBEDDINGS_CONFIG['model']})")
    return OpenAIEmbeddings(api_key=api_key, model=config.model)


def _build_google(config: EmbeddingsConfig) -> EmbeddingProvider:
    env_vars = GOOGLE_EMBEDDINGS_CONFIG["env_vars"]
    api_key = resolve_api_key(config, env_vars)
    if not api_key:
        raise MissingCredentialError("Google", env_vars)
    logger.info(f"Using Google embeddings ({config.model or GOOGLE_EMBEDDINGS_CONFIG['model']})")
    return GoogleEmbeddings(api_key=api_key, model=config.model)


PROVIDER_BUILDERS: Dict[EmbeddingsProviderName, Callable[[EmbeddingsConfig], EmbeddingProvider]] = {
    EmbeddingsProviderName.LOCAL: _build_local,
    EmbeddingsProviderName.OPENAI: _build_openai,
    EmbeddingsProviderName.GOOGLE: _build_google,
}


def create_embeddings(config: Optional[EmbeddingsConfig] = None) -> EmbeddingProvider:
    """
    Build the embedding provider named by `config` (local TF-IDF by default).

    Raises:
        MissingCredentialError: a remote provider was selected without an API key
        UnsupportedProviderError: the provider is known but not available
    """
    config = config or EmbeddingsConfig()
    provider = config.provider

    builder = PROVIDER_BUILDERS.get(provider)
    if builder is None:
        requirement = UNAVAILABLE_PROVIDERS.get(provider.value, "")
        logger.warning(f"Embeddings provider '{provider.value}' is not available")
        raise UnsupportedProviderError(provider.value, requirement)

    return builder(config)
