"""
Defaults for the embedding providers.
"""

LOCAL_EMBEDDINGS_CONFIG = {
    "dimensions": 128,  # smaller vectors for the local model
    "min_token_length": 3,
}

OPENAI_EMBEDDINGS_CONFIG = {
    "model": "text-embedding-3-small",
    "max_retries": 3,
    # The API caps a request at 8192 tokens in total; keep a safety margin
    "max_tokens_per_request": 7000,
    "max_texts_per_request": 2048,
    "env_vars": ["OPENAI_EMBEDDINGS_KEY", "OPENAI_API_KEY"],
}

GOOGLE_EMBEDDINGS_CONFIG = {
    "model": "models/text-embedding-004",
    "max_texts_per_request": 100,
    "env_vars": ["GOOGLE_EMBEDDINGS_KEY", "GOOGLE_API_KEY"],
}

# Providers that are known but need packages this distribution does not ship
UNAVAILABLE_PROVIDERS = {
    "cohere": "Cohere embeddings are not implemented yet; they require the 'cohere' package.",
    "voyage": "Voyage AI embeddings are not implemented yet; they require the 'voyageai' package.",
    "huggingface": "HuggingFace embeddings are not implemented yet; they require the 'sentence-transformers' package.",
}
