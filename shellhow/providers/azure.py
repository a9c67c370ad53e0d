"""Azure OpenAI provider — deployment-scoped chat completions."""

from shellhow.config.models import ProviderConfig, ProviderId
from shellhow.providers.base import LLMProvider, ProviderConfigError

DEFAULT_API_VERSION = "2025-03-01-preview"


class AzureOpenAIProvider(LLMProvider):
    """Sends requests to an Azure OpenAI resource.

    ``base_url`` is the resource endpoint (https://<name>.openai.azure.com)
    and ``model`` is the deployment name. A per-call model override selects
    a different deployment on the same resource.
    """

    provider_id = ProviderId.AZURE
    fallback_model = "gpt-4o"

    def _check_required(self, config: ProviderConfig) -> None:
        missing = [
            label
            for label, value in (
                ("API key", config.api_key),
                ("endpoint (baseUrl)", config.base_url),
                ("deployment name (model)", config.model),
            )
            if not value
        ]
        if missing:
            raise ProviderConfigError(
                f"Azure OpenAI {', '.join(missing)} not configured. Run `ai-shell configure`."
            )

    def _endpoint(self, model: str) -> tuple[str, dict]:
        endpoint = self.active_config.base_url.rstrip("/")
        api_version = self.active_config.api_version or DEFAULT_API_VERSION
        return (
            f"{endpoint}/openai/deployments/{model}/chat/completions",
            {"api-version": api_version},
        )

    def _headers(self) -> dict:
        return {
            "Content-Type": "application/json",
            "api-key": self.active_config.api_key,
        }
