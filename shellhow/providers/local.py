"""Local provider — any OpenAI-compatible server (LM Studio, Ollama, llama.cpp)."""

from shellhow.config.models import ProviderConfig, ProviderId
from shellhow.providers.base import LLMProvider, ProviderConfigError


class LocalProvider(LLMProvider):
    """Talks to a locally hosted ``/chat/completions`` endpoint.

    Local servers usually ignore auth; a bearer header is only sent when
    an API key is configured.
    """

    provider_id = ProviderId.LOCAL
    fallback_model = "local-model"

    def _check_required(self, config: ProviderConfig) -> None:
        if not config.base_url:
            raise ProviderConfigError(
                "Base URL for the local LLM is not configured. Run `ai-shell configure`."
            )

    def _endpoint(self, model: str) -> tuple[str, dict]:
        return f"{self.active_config.base_url.rstrip('/')}/chat/completions", {}

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.active_config.api_key:
            headers["Authorization"] = f"Bearer {self.active_config.api_key}"
        return headers
