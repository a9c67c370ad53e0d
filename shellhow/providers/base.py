"""Abstract base for LLM providers.

Every provider talks to an OpenAI-compatible chat completions endpoint
and normalizes the reply into an LLMResponse. Failures never escape
generate()/explain(); they come back as LLMResponse.error.
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass

import httpx

from shellhow.config.models import ProviderConfig, ProviderId
from shellhow.config.settings import get_settings
from shellhow.config.store import ConfigStore
from shellhow.logging.audit import RequestTimer, generate_request_id, get_logger, request_id_var

GENERATE_SYSTEM_PROMPT = (
    "You are a command-line expert. Turn the user's natural language request into a "
    "single shell command. Return only the command itself, with no additional "
    "explanation or markdown. If you cannot generate a command, return "
    '"Error: Cannot generate command.".'
)
EXPLAIN_SYSTEM_PROMPT = (
    "You are a command-line expert. Explain the following shell command clearly and "
    "concisely. Focus on its main function and important parameters."
)

logger = get_logger("providers")


class ShellHowError(Exception):
    """Base error for this package."""


class ProviderConfigError(ShellHowError):
    """Required provider settings are missing."""


@dataclass
class LLMUsage:
    prompt_tokens: int | None = None
    completion_tokens: int | None = None
    total_tokens: int | None = None


@dataclass
class LLMResponse:
    content: str | None
    error: str | None = None
    usage: LLMUsage | None = None


class LLMProvider(ABC):
    """Base class for provider implementations.

    Lifecycle: constructed -> initialized. ensure_initialized() reads the
    provider's config block once and builds the HTTP client; later calls
    reuse it until the provider is replaced by the factory.
    """

    provider_id: ProviderId
    fallback_model: str

    def __init__(self, store: ConfigStore):
        self._store = store
        self._init_lock = asyncio.Lock()
        self.active_config: ProviderConfig | None = None
        self.default_model: str | None = None
        self._client: httpx.AsyncClient | None = None

    @property
    def initialized(self) -> bool:
        return self._client is not None and self.active_config is not None

    async def ensure_initialized(self) -> None:
        """Idempotent one-time setup. Raises ProviderConfigError."""
        if self.initialized:
            return
        async with self._init_lock:
            if self.initialized:
                return
            config = self._store.load_config().provider(self.provider_id)
            self._check_required(config)
            self.active_config = config
            self.default_model = config.model
            self._client = self._build_client(config)
            logger.debug("Provider initialized", extra={"audit_data": {"provider": self.provider_id.value}})

    @abstractmethod
    def _check_required(self, config: ProviderConfig) -> None:
        """Raise ProviderConfigError if a mandatory field is missing."""
        ...

    @abstractmethod
    def _endpoint(self, model: str) -> tuple[str, dict]:
        """Return (url, query params) for a chat completion with *model*."""
        ...

    @abstractmethod
    def _headers(self) -> dict:
        ...

    def _build_client(self, config: ProviderConfig) -> httpx.AsyncClient:
        settings = get_settings()
        return httpx.AsyncClient(
            timeout=httpx.Timeout(settings.request_timeout, connect=settings.connect_timeout)
        )

    def resolve_model(self, override: str | None = None) -> str:
        """Per-call override > configured model > built-in fallback."""
        return override or self.default_model or self.fallback_model

    async def generate(self, prompt: str, model: str | None = None) -> LLMResponse:
        """Ask for a single shell command implementing *prompt*."""
        return await self._complete("generate", GENERATE_SYSTEM_PROMPT, prompt, model)

    async def explain(self, command: str, model: str | None = None) -> LLMResponse:
        """Ask for a concise explanation of *command*."""
        return await self._complete(
            "explain", EXPLAIN_SYSTEM_PROMPT, f"Explain the following command: {command}", model
        )

    async def _complete(self, operation: str, system: str, user: str, model: str | None) -> LLMResponse:
        token = request_id_var.set(generate_request_id())
        try:
            return await self._request(operation, system, user, model)
        finally:
            request_id_var.reset(token)

    async def _request(self, operation: str, system: str, user: str, model: str | None) -> LLMResponse:
        try:
            await self.ensure_initialized()
        except ProviderConfigError as e:
            logger.warning(
                "Provider not configured",
                extra={"audit_data": {"provider": self.provider_id.value, "operation": operation}},
            )
            return LLMResponse(content=None, error=str(e))

        model_name = self.resolve_model(model)
        url, params = self._endpoint(model_name)
        body = {
            "model": model_name,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
        }
        audit = {"provider": self.provider_id.value, "model": model_name, "operation": operation}

        with RequestTimer() as timer:
            try:
                response = await self._client.post(url, json=body, headers=self._headers(), params=params)
                response.raise_for_status()
                data = response.json()
            except httpx.HTTPStatusError as e:
                error = f"HTTP {e.response.status_code}: {_error_detail(e.response)}"
            except httpx.HTTPError as e:
                error = f"{type(e).__name__}: {e}" if str(e) else type(e).__name__
            except ValueError as e:
                error = f"Invalid response body: {e}"
            else:
                error = None

        if error is not None:
            logger.warning(
                "LLM request failed",
                extra={"audit_data": {**audit, "latency_ms": timer.elapsed_ms, "error": error}},
            )
            return LLMResponse(content=None, error=error)

        result = _parse_completion(data)
        logger.info(
            "LLM request completed",
            extra={"audit_data": {
                **audit,
                "latency_ms": timer.elapsed_ms,
                "total_tokens": result.usage.total_tokens if result.usage else None,
            }},
        )
        return result

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
        self._client = None
        self.active_config = None
        self.default_model = None


def _parse_completion(data) -> LLMResponse:
    """Extract the first choice's text and token usage.

    Fields of an unexpected type are treated as absent, so an odd reply
    degrades to empty content instead of raising.
    """
    if not isinstance(data, dict):
        return LLMResponse(content=None, error="Invalid response body: expected a JSON object")

    content = ""
    choices = data.get("choices")
    if isinstance(choices, list) and choices and isinstance(choices[0], dict):
        message = choices[0].get("message")
        if isinstance(message, dict) and isinstance(message.get("content"), str):
            content = message["content"]

    usage = None
    raw_usage = data.get("usage")
    if isinstance(raw_usage, dict):
        usage = LLMUsage(
            prompt_tokens=_token_count(raw_usage, "prompt_tokens"),
            completion_tokens=_token_count(raw_usage, "completion_tokens"),
            total_tokens=_token_count(raw_usage, "total_tokens"),
        )
    return LLMResponse(content=content, usage=usage)


def _token_count(usage: dict, key: str) -> int | None:
    value = usage.get(key)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def _error_detail(response: httpx.Response) -> str:
    """Pull the upstream error message out of an error response."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return error["message"]
        if isinstance(error, str):
            return error
    return response.reason_phrase
