"""Shared fixtures for the ai-shell test suite."""

import json

import httpx
import pytest

from shellhow.config.settings import get_settings
from shellhow.config.store import ConfigStore
from shellhow.providers.base import LLMProvider


@pytest.fixture(autouse=True)
def isolated_config_dir(tmp_path, monkeypatch):
    """Point the config directory at a temp dir so tests never touch ~/.ai-shell-js."""
    config_dir = tmp_path / "ai-shell"
    monkeypatch.setenv("AI_SHELL_CONFIG_DIR", str(config_dir))
    get_settings.cache_clear()
    yield config_dir
    get_settings.cache_clear()


@pytest.fixture
def override_settings(monkeypatch):
    """Factory fixture: set env vars and clear settings cache.

    Usage:
        override_settings(LOG_LEVEL="DEBUG", REQUEST_TIMEOUT="5")
    """
    def _override(**kwargs):
        for key, value in kwargs.items():
            monkeypatch.setenv(f"AI_SHELL_{key.upper()}", str(value))
        get_settings.cache_clear()

    yield _override

    get_settings.cache_clear()


@pytest.fixture
def store(isolated_config_dir) -> ConfigStore:
    return ConfigStore(isolated_config_dir)


@pytest.fixture
def write_config(store):
    """Write a raw config document (dict or str) to the store's path."""
    def _write(document):
        path = store.get_config_file_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        text = document if isinstance(document, str) else json.dumps(document)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def configured_store(store, write_config):
    """Store with every provider fully configured."""
    write_config({
        "defaultProvider": "openai",
        "providers": {
            "openai": {"apiKey": "sk-openai-test-key", "model": "gpt-4o-mini"},
            "azure": {
                "apiKey": "azure-key-123",
                "baseUrl": "https://myres.openai.azure.com",
                "model": "cmd-deploy",
            },
            "local": {"baseUrl": "http://localhost:1234/v1"},
        },
    })
    return store


def completion_body(content: str | None = "ls -la", usage: dict | None = None) -> dict:
    """OpenAI-style chat completion response body."""
    body = {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "choices": [{
            "index": 0,
            "message": {"role": "assistant", "content": content},
            "finish_reason": "stop",
        }],
    }
    if usage is not None:
        body["usage"] = usage
    return body


@pytest.fixture
def upstream(monkeypatch):
    """Route every provider's HTTP client through an httpx.MockTransport.

    Set ``upstream.handler`` to a callable(request) -> httpx.Response (or
    raise an httpx error). Captured requests land in ``upstream.requests``.
    """

    class Upstream:
        def __init__(self):
            self.requests: list[httpx.Request] = []
            self.handler = lambda request: httpx.Response(200, json=completion_body())

        def _dispatch(self, request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return self.handler(request)

        @property
        def last_json(self) -> dict:
            return json.loads(self.requests[-1].content)

    fake = Upstream()

    def _build_client(self, config):
        return httpx.AsyncClient(transport=httpx.MockTransport(fake._dispatch))

    monkeypatch.setattr(LLMProvider, "_build_client", _build_client)
    return fake
