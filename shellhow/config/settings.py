"""Runtime settings loaded from environment variables."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

DEFAULT_CONFIG_DIR_NAME = ".ai-shell-js"


class Settings(BaseSettings):
    # Provider config location
    config_dir: str = ""  # Empty = ~/.ai-shell-js

    # Logging
    log_level: str = "WARNING"
    log_file: str = ""  # Empty = stderr only

    # Upstream HTTP
    request_timeout: float = 60.0
    connect_timeout: float = 10.0

    model_config = {"env_prefix": "AI_SHELL_", "env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def config_path(self) -> Path:
        """Resolve the directory holding config.json."""
        if self.config_dir:
            return Path(self.config_dir).expanduser()
        return Path.home() / DEFAULT_CONFIG_DIR_NAME


@lru_cache
def get_settings() -> Settings:
    return Settings()
