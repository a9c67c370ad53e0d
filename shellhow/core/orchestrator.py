"""Request orchestration: generate/explain with uniform outcome classification.

Outcomes:
    success: the provider returned usable content
    empty: the call worked but yielded nothing usable (blank text, or
            for generate, text starting with the "Error:" marker)
    error: configuration or transport failure reported by the provider
"""

from dataclasses import dataclass
from enum import Enum

from shellhow.config.models import ProviderId
from shellhow.config.store import ConfigStore
from shellhow.logging.audit import get_logger
from shellhow.providers.base import LLMResponse, LLMUsage
from shellhow.providers.registry import ProviderCache, ProviderFactory

FAILURE_MARKER = "error:"

logger = get_logger("core")


class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    EMPTY = "empty"
    ERROR = "error"


@dataclass
class CommandOutcome:
    status: OutcomeStatus
    provider: str
    content: str | None = None
    error: str | None = None
    usage: LLMUsage | None = None

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.SUCCESS


def classify(response: LLMResponse, provider: str, failure_marker: str | None = None) -> CommandOutcome:
    if response.error:
        status = OutcomeStatus.ERROR
    elif not response.content:
        status = OutcomeStatus.EMPTY
    elif failure_marker and response.content.lower().startswith(failure_marker):
        status = OutcomeStatus.EMPTY
    else:
        status = OutcomeStatus.SUCCESS
    return CommandOutcome(
        status=status,
        provider=provider,
        content=response.content,
        error=response.error,
        usage=response.usage,
    )


class Orchestrator:
    """Facade over the provider factory used by the CLI."""

    def __init__(self, factory: ProviderFactory):
        self.factory = factory

    @classmethod
    def from_store(cls, store: ConfigStore, cache: ProviderCache | None = None) -> "Orchestrator":
        return cls(ProviderFactory(store, cache))

    async def explain_command(
        self, command: str, provider: str | None = None, model: str | None = None
    ) -> CommandOutcome:
        client = await self.factory.get_provider(provider)
        response = await client.explain(command, model)
        outcome = classify(response, client.provider_id.value)
        self._log_outcome("explain", outcome)
        return outcome

    async def generate_command(
        self, prompt: str, provider: str | None = None, model: str | None = None
    ) -> CommandOutcome:
        client = await self.factory.get_provider(provider)
        response = await client.generate(prompt, model)
        outcome = classify(response, client.provider_id.value, failure_marker=FAILURE_MARKER)
        self._log_outcome("generate", outcome)
        return outcome

    async def set_default_provider(self, provider_id: ProviderId | str) -> bool:
        saved = self.factory.store.set_default_provider(provider_id)
        await self.factory.reset()
        return saved

    async def update_provider_settings(self, provider_id: ProviderId | str, **updates: str | None) -> bool:
        """Persist provider fields; the next call rebuilds the client."""
        saved = self.factory.store.update_provider_config(provider_id, **updates)
        await self.factory.reset()
        return saved

    async def aclose(self) -> None:
        await self.factory.reset()

    @staticmethod
    def _log_outcome(operation: str, outcome: CommandOutcome) -> None:
        if outcome.status is OutcomeStatus.SUCCESS:
            return
        logger.info(
            "Request produced no usable result",
            extra={"audit_data": {
                "operation": operation,
                "provider": outcome.provider,
                "status": outcome.status.value,
            }},
        )
