"""JSON file-backed store for the provider configuration."""

import json
import os
import tempfile
from pathlib import Path

from shellhow.config.models import (
    PROVIDER_FIELDS,
    AppConfig,
    ProviderConfig,
    ProviderId,
    default_config,
    merge_over_defaults,
    validate_app_config,
)
from shellhow.config.settings import get_settings
from shellhow.logging.audit import get_logger

CONFIG_FILE_NAME = "config.json"

logger = get_logger("config")


class ConfigStore:
    """Reads and writes <config_dir>/config.json.

    Loading never fails: a missing, unreadable or invalid file is replaced
    by the default configuration on disk.
    """

    def __init__(self, config_dir: str | Path | None = None):
        if config_dir is None:
            config_dir = get_settings().config_path
        self._dir = Path(config_dir)
        self._path = self._dir / CONFIG_FILE_NAME

    def get_config_file_path(self) -> Path:
        return self._path

    def _ensure_config_dir(self) -> None:
        self._dir.mkdir(parents=True, exist_ok=True)

    def load_config(self) -> AppConfig:
        """Load, validate and merge over defaults; reset to defaults on failure."""
        try:
            self._ensure_config_dir()
            raw = self._path.read_text(encoding="utf-8")
            data = json.loads(raw)
        except (OSError, ValueError) as e:
            logger.warning(
                "Configuration file missing or unreadable, writing defaults",
                extra={"audit_data": {"path": str(self._path), "reason": str(e)}},
            )
            return self._reset_to_defaults()

        result = validate_app_config(data)
        if not result.ok:
            # TODO: back up the rejected file before it is overwritten
            logger.warning(
                "Invalid configuration, writing defaults",
                extra={"audit_data": {"path": str(self._path), "errors": result.errors}},
            )
            return self._reset_to_defaults()

        return merge_over_defaults(result.config)

    def _reset_to_defaults(self) -> AppConfig:
        config = default_config()
        self.save_config(config)
        return config

    def save_config(self, config: AppConfig) -> bool:
        """Validate and write the whole document. Returns True on success."""
        document = config.to_dict()
        result = validate_app_config(document)
        if not result.ok:
            logger.error(
                "Refusing to save invalid configuration",
                extra={"audit_data": {"errors": result.errors}},
            )
            return False

        try:
            self._ensure_config_dir()
            self._write_atomic(json.dumps(result.config.to_dict(), indent=2))
        except OSError as e:
            logger.error(
                "Failed to save configuration",
                extra={"audit_data": {"path": str(self._path), "reason": str(e)}},
            )
            return False

        logger.debug("Configuration saved", extra={"audit_data": {"path": str(self._path)}})
        return True

    def _write_atomic(self, text: str) -> None:
        """Write via a temp file in the same directory, then rename over."""
        fd, tmp_path = tempfile.mkstemp(dir=self._dir, prefix=".config-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp_path, self._path)
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def set_default_provider(self, provider_id: ProviderId | str) -> bool:
        pid = _known_provider(provider_id)
        if pid is None:
            return False
        config = self.load_config()
        config.default_provider = pid
        return self.save_config(config)

    def update_provider_config(self, provider_id: ProviderId | str, **updates: str | None) -> bool:
        """Merge *updates* over one provider block; None leaves a field as is."""
        pid = _known_provider(provider_id)
        if pid is None:
            return False
        unknown = sorted(set(updates) - set(PROVIDER_FIELDS))
        if unknown:
            logger.error(
                "Unknown provider fields",
                extra={"audit_data": {"provider": pid.value, "fields": unknown}},
            )
            return False
        config = self.load_config()
        config.providers[pid] = config.provider(pid).merged(ProviderConfig(**updates))
        return self.save_config(config)


def _known_provider(value: ProviderId | str) -> ProviderId | None:
    pid = ProviderId.parse(value)
    if pid is None:
        logger.error("Unknown provider", extra={"audit_data": {"provider": str(value)}})
    return pid
