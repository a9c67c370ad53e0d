"""Provider factory — builds provider clients and caches the active one."""

from dataclasses import dataclass

from shellhow.config.models import ProviderId, resolve_provider_id
from shellhow.config.store import ConfigStore
from shellhow.logging.audit import get_logger
from shellhow.providers.azure import AzureOpenAIProvider
from shellhow.providers.base import LLMProvider
from shellhow.providers.local import LocalProvider
from shellhow.providers.openai import OpenAIProvider

PROVIDER_CLASSES: dict[ProviderId, type[LLMProvider]] = {
    ProviderId.OPENAI: OpenAIProvider,
    ProviderId.AZURE: AzureOpenAIProvider,
    ProviderId.LOCAL: LocalProvider,
}

logger = get_logger("providers")


@dataclass
class ProviderCache:
    """Single slot holding the active provider client."""

    provider: LLMProvider | None = None


class ProviderFactory:
    """Resolves and caches provider clients.

    An explicit provider name always builds a fresh client, even when it
    names the cached provider. Without one, the cached client is reused.
    """

    def __init__(self, store: ConfigStore, cache: ProviderCache | None = None):
        self.store = store
        self.cache = cache if cache is not None else ProviderCache()

    def create(self, provider_id: ProviderId | str) -> LLMProvider:
        """Construct an uninitialized client; unknown ids fall back to OpenAI."""
        provider_cls = PROVIDER_CLASSES.get(ProviderId.parse(provider_id))
        if provider_cls is None:
            logger.warning(
                "Unsupported provider, falling back to openai",
                extra={"audit_data": {"provider": str(provider_id)}},
            )
            provider_cls = OpenAIProvider
        return provider_cls(self.store)

    async def get_provider(self, explicit_name: str | None = None) -> LLMProvider:
        if self.cache.provider is not None and not explicit_name:
            return self.cache.provider

        provider_id = resolve_provider_id(explicit_name, self.store.load_config())
        provider = self.create(provider_id)
        previous, self.cache.provider = self.cache.provider, provider
        if previous is not None:
            await previous.close()
        return provider

    async def reset(self) -> None:
        """Close and drop the cached client."""
        previous, self.cache.provider = self.cache.provider, None
        if previous is not None:
            await previous.close()
