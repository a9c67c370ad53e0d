"""Provider configuration models and the persisted AppConfig schema.

The on-disk document uses camelCase keys:

    {
      "defaultProvider": "openai",
      "providers": {
        "openai": {"apiKey": "...", "model": "gpt-4o"},
        "azure": {"apiKey": "...", "baseUrl": "https://...", "model": "deploy"},
        "local": {"baseUrl": "http://localhost:1234/v1"}
      }
    }

Validation never raises; it returns a ValidationResult.
"""

import copy
from dataclasses import dataclass, field, fields
from enum import Enum
from urllib.parse import urlsplit


class ProviderId(str, Enum):
    OPENAI = "openai"
    AZURE = "azure"
    LOCAL = "local"

    @classmethod
    def parse(cls, value: str) -> "ProviderId | None":
        try:
            return cls(value)
        except ValueError:
            return None


# attribute name -> JSON key; every field is an optional string
PROVIDER_FIELDS: dict[str, str] = {
    "api_key": "apiKey",
    "base_url": "baseUrl",
    "model": "model",
    "api_version": "apiVersion",
}

URL_FIELDS = frozenset({"base_url"})


@dataclass
class ProviderConfig:
    api_key: str | None = None
    base_url: str | None = None
    model: str | None = None
    api_version: str | None = None

    def merged(self, override: "ProviderConfig") -> "ProviderConfig":
        """Field-by-field merge: set fields of *override* win."""
        values = {}
        for f in fields(self):
            new = getattr(override, f.name)
            values[f.name] = new if new is not None else getattr(self, f.name)
        return ProviderConfig(**values)

    def to_dict(self) -> dict:
        return {
            json_key: getattr(self, attr)
            for attr, json_key in PROVIDER_FIELDS.items()
            if getattr(self, attr) is not None
        }


@dataclass
class AppConfig:
    default_provider: ProviderId = ProviderId.OPENAI
    providers: dict[ProviderId, ProviderConfig] = field(default_factory=dict)

    def provider(self, provider_id: ProviderId) -> ProviderConfig:
        """Config block for one provider (empty block when absent)."""
        return self.providers.get(provider_id) or ProviderConfig()

    def to_dict(self) -> dict:
        return {
            "defaultProvider": self.default_provider.value,
            "providers": {
                pid.value: block.to_dict()
                for pid, block in self.providers.items()
            },
        }


DEFAULT_CONFIG = AppConfig(
    default_provider=ProviderId.OPENAI,
    providers={
        ProviderId.OPENAI: ProviderConfig(model="gpt-3.5-turbo"),
        ProviderId.AZURE: ProviderConfig(),
        ProviderId.LOCAL: ProviderConfig(base_url="http://localhost:1234/v1", model="local-model"),
    },
)


def default_config() -> AppConfig:
    """Fresh copy of DEFAULT_CONFIG (callers may mutate it)."""
    return copy.deepcopy(DEFAULT_CONFIG)


@dataclass
class ValidationResult:
    ok: bool
    config: AppConfig | None = None
    errors: list[str] = field(default_factory=list)


def is_valid_url(value: str) -> bool:
    parts = urlsplit(value)
    return parts.scheme in ("http", "https") and bool(parts.netloc)


def parse_provider_config(data, path: str, errors: list[str]) -> ProviderConfig | None:
    """Parse one provider block, appending problems to *errors*."""
    if not isinstance(data, dict):
        errors.append(f"{path}: expected an object")
        return None

    values = {}
    for attr, json_key in PROVIDER_FIELDS.items():
        value = data.get(json_key)
        if value is None:
            continue
        if not isinstance(value, str):
            errors.append(f"{path}.{json_key}: expected a string")
            continue
        if attr in URL_FIELDS and not is_valid_url(value):
            errors.append(f"{path}.{json_key}: invalid url")
            continue
        values[attr] = value
    # Unknown keys are dropped
    return ProviderConfig(**values)


def validate_app_config(data) -> ValidationResult:
    """Parse and validate a decoded config document."""
    errors: list[str] = []
    if not isinstance(data, dict):
        return ValidationResult(ok=False, errors=["config: expected an object"])

    raw_default = data.get("defaultProvider", ProviderId.OPENAI.value)
    default_provider = ProviderId.parse(raw_default) if isinstance(raw_default, str) else None
    if default_provider is None:
        allowed = ", ".join(p.value for p in ProviderId)
        errors.append(f"defaultProvider: expected one of {allowed}, got {raw_default!r}")

    raw_providers = data.get("providers")
    providers: dict[ProviderId, ProviderConfig] = {}
    if not isinstance(raw_providers, dict):
        errors.append("providers: expected an object")
    else:
        for pid in ProviderId:
            if raw_providers.get(pid.value) is None:
                continue
            block = parse_provider_config(raw_providers[pid.value], f"providers.{pid.value}", errors)
            if block is not None:
                providers[pid] = block

    if errors:
        return ValidationResult(ok=False, errors=errors)
    return ValidationResult(
        ok=True,
        config=AppConfig(default_provider=default_provider, providers=providers),
    )


def merge_over_defaults(loaded: AppConfig) -> AppConfig:
    """Overlay a loaded config on the defaults, field by field per provider."""
    merged = default_config()
    merged.default_provider = loaded.default_provider
    for pid in ProviderId:
        merged.providers[pid] = merged.provider(pid).merged(loaded.provider(pid))
    return merged


def resolve_provider_id(explicit: str | None, config: AppConfig) -> "ProviderId | str":
    """Explicit name wins, else the configured default.

    Unrecognized explicit names are returned as-is so the factory can
    decide how to degrade.
    """
    if explicit:
        return ProviderId.parse(explicit) or explicit
    return config.default_provider
