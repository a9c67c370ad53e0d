"""OpenAI provider implementation."""

from shellhow.config.models import ProviderConfig, ProviderId
from shellhow.providers.base import LLMProvider, ProviderConfigError

OPENAI_BASE_URL = "https://api.openai.com/v1"


class OpenAIProvider(LLMProvider):
    """Sends requests to the OpenAI chat completions API."""

    provider_id = ProviderId.OPENAI
    fallback_model = "gpt-3.5-turbo"

    def _check_required(self, config: ProviderConfig) -> None:
        if not config.api_key:
            raise ProviderConfigError(
                "API key for OpenAI is not configured. Run `ai-shell configure`."
            )

    def _endpoint(self, model: str) -> tuple[str, dict]:
        base_url = self.active_config.base_url or OPENAI_BASE_URL
        return f"{base_url.rstrip('/')}/chat/completions", {}

    def _headers(self) -> dict:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.active_config.api_key}",
        }
