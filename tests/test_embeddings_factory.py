"""
Tests for embedding provider selection and the remote providers (with fake clients).
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from argus.embeddings import (
    EmbeddingsConfig,
    EmbeddingsProviderName,
    GoogleEmbeddings,
    LocalEmbeddings,
    OpenAIEmbeddings,
    create_embeddings,
)
from argus.embeddings.factory import resolve_api_key
from argus.exceptions import MissingCredentialError, UnsupportedProviderError

pytestmark = pytest.mark.fast

CREDENTIAL_VARS = ["OPENAI_EMBEDDINGS_KEY", "OPENAI_API_KEY", "GOOGLE_EMBEDDINGS_KEY", "GOOGLE_API_KEY"]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in CREDENTIAL_VARS:
        monkeypatch.delenv(var, raising=False)


class TestFactory:

    def test_default_is_local(self):
        provider = create_embeddings()
        assert isinstance(provider, LocalEmbeddings)
        assert provider.dimensions == 128

    def test_local_dimensions(self):
        provider = create_embeddings(EmbeddingsConfig(provider="local", dimensions=32))
        assert provider.dimensions == 32

    @pytest.mark.parametrize("provider,var", [("openai", "OPENAI_API_KEY"), ("google", "GOOGLE_API_KEY")])
    def test_missing_credentials(self, provider, var):
        with pytest.raises(MissingCredentialError) as exc_info:
            create_embeddings(EmbeddingsConfig(provider=provider))
        assert var in str(exc_info.value)

    def test_unknown_provider_name(self):
        with pytest.raises(UnsupportedProviderError):
            EmbeddingsConfig(provider="word2vec")

    @pytest.mark.parametrize("provider", ["cohere", "voyage", "huggingface"])
    def test_unavailable_provider(self, provider):
        with pytest.raises(UnsupportedProviderError) as exc_info:
            create_embeddings(EmbeddingsConfig(provider=provider))
        assert exc_info.value.provider == provider
        assert exc_info.value.requirement

    def test_provider_name_is_case_insensitive(self):
        assert EmbeddingsConfig(provider="LOCAL").provider == EmbeddingsProviderName.LOCAL

    def test_api_key_resolution_order(self, monkeypatch):
        env_vars = ["OPENAI_EMBEDDINGS_KEY", "OPENAI_API_KEY"]
        monkeypatch.setenv("OPENAI_API_KEY", "general")
        assert resolve_api_key(EmbeddingsConfig(provider="openai"), env_vars) == "general"

        monkeypatch.setenv("OPENAI_EMBEDDINGS_KEY", "dedicated")
        assert resolve_api_key(EmbeddingsConfig(provider="openai"), env_vars) == "dedicated"
        assert resolve_api_key(EmbeddingsConfig(provider="openai", api_key="explicit"), env_vars) == "explicit"


class TestOpenAIEmbeddings:

    def make_client(self, dims=3):
        client = MagicMock()

        def create(model, input):
            data = [SimpleNamespace(index=i, embedding=[float(i)] * dims) for i in range(len(input))]
            return SimpleNamespace(data=list(reversed(data)))

        client.embeddings.create.side_effect = create
        return client

    def test_embed_documents_restores_input_order(self):
        client = self.make_client()
        provider = OpenAIEmbeddings(api_key="k", client=client)

        vectors = provider.embed_documents(["a", "", "c"])

        assert vectors == [[0.0] * 3, [1.0] * 3, [2.0] * 3]
        client.embeddings.create.assert_called_once_with(model="text-embedding-3-small", input=["a", " ", "c"])

    def test_embed_query(self):
        provider = OpenAIEmbeddings(api_key="k", model="text-embedding-3-large", client=self.make_client())
        assert provider.embed_query("hello") == [0.0] * 3
        assert provider.model == "text-embedding-3-large"

    def test_declares_token_budget(self):
        provider = OpenAIEmbeddings(api_key="k", client=MagicMock())
        assert provider.enforces_token_budget
        assert provider.max_tokens_per_request == 7000


class TestGoogleEmbeddings:

    def test_task_types(self):
        client = MagicMock()
        client.embed_content.side_effect = lambda model, content, task_type: {
            "embedding": [[0.5, 0.5]] * len(content) if isinstance(content, list) else [1.0, 0.0]
        }
        provider = GoogleEmbeddings(api_key="k", client=client)

        assert provider.embed_documents(["a", "b"]) == [[0.5, 0.5], [0.5, 0.5]]
        assert provider.embed_query("q") == [1.0, 0.0]

        task_types = [call.kwargs["task_type"] for call in client.embed_content.call_args_list]
        assert task_types == ["retrieval_document", "retrieval_query"]
        assert not provider.enforces_token_budget
        assert provider.max_texts_per_request == 100
