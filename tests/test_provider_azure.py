"""Tests for shellhow/providers/azure.py — Azure OpenAI provider."""

import httpx
import pytest

from shellhow.providers.azure import DEFAULT_API_VERSION, AzureOpenAIProvider
from tests.conftest import completion_body


@pytest.fixture
def provider(configured_store):
    return AzureOpenAIProvider(configured_store)


class TestAzureRequests:

    async def test_deployment_url_and_headers(self, provider, upstream):
        result = await provider.generate("show disk usage")
        assert result.content == "ls -la"

        request = upstream.requests[-1]
        assert request.url.path == "/openai/deployments/cmd-deploy/chat/completions"
        assert request.url.host == "myres.openai.azure.com"
        assert request.url.params["api-version"] == DEFAULT_API_VERSION
        assert request.headers["api-key"] == "azure-key-123"
        assert "Authorization" not in request.headers
        assert upstream.last_json["model"] == "cmd-deploy"

    async def test_configured_api_version(self, store, write_config, upstream):
        write_config({"providers": {"azure": {
            "apiKey": "k",
            "baseUrl": "https://other.openai.azure.com/",
            "model": "dep",
            "apiVersion": "2024-10-21",
        }}})
        await AzureOpenAIProvider(store).explain("ls")
        request = upstream.requests[-1]
        assert request.url.params["api-version"] == "2024-10-21"
        assert request.url.path == "/openai/deployments/dep/chat/completions"

    async def test_model_override_selects_deployment(self, provider, upstream):
        await provider.generate("x", model="gpt-4o-prod")
        assert upstream.requests[-1].url.path == "/openai/deployments/gpt-4o-prod/chat/completions"

    async def test_usage(self, provider, upstream):
        upstream.handler = lambda request: httpx.Response(200, json=completion_body(
            "du -sh .", usage={"prompt_tokens": 10, "completion_tokens": 4, "total_tokens": 14},
        ))
        result = await provider.generate("x")
        assert result.usage.total_tokens == 14

    async def test_deployment_not_found(self, provider, upstream):
        upstream.handler = lambda request: httpx.Response(
            404, json={"error": {"code": "DeploymentNotFound", "message": "The API deployment does not exist."}},
        )
        result = await provider.generate("x")
        assert result.content is None
        assert result.error == "HTTP 404: The API deployment does not exist."


class TestAzureRequiredFields:

    @pytest.mark.parametrize("missing,label", [
        ("apiKey", "API key"),
        ("baseUrl", "endpoint (baseUrl)"),
        ("model", "deployment name (model)"),
    ])
    async def test_missing_field(self, store, write_config, upstream, missing, label):
        block = {"apiKey": "k", "baseUrl": "https://r.openai.azure.com", "model": "dep"}
        del block[missing]
        write_config({"providers": {"azure": block}})

        result = await AzureOpenAIProvider(store).generate("x")
        assert result.content is None
        assert label in result.error
        assert "ai-shell configure" in result.error
        assert upstream.requests == []

    async def test_nothing_configured(self, store, upstream):
        result = await AzureOpenAIProvider(store).explain("ls")
        assert result.error == (
            "Azure OpenAI API key, endpoint (baseUrl), deployment name (model) not configured. "
            "Run `ai-shell configure`."
        )

    def test_fallback_model(self, store):
        assert AzureOpenAIProvider(store).resolve_model() == "gpt-4o"
