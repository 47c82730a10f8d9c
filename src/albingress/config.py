"""Configuration with environment variable support.

All settings can be configured via environment variables with the
ALBINGRESS_ prefix. Example: ALBINGRESS_FOLDER_ID=b1g... sets folder_id.
"""

from __future__ import annotations

import tomllib
from datetime import timedelta
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def load_config_from_file(path: str | Path) -> dict[str, Any]:
    """Load configuration from a YAML or TOML file.

    Args:
        path: Path to the configuration file (.yaml, .yml, or .toml)

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValueError: If the config file has encoding errors, invalid syntax, or unsupported format
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ValueError(f"Config file encoding error in {path}: {e}") from e

    try:
        if path.suffix in (".yaml", ".yml"):
            return yaml.safe_load(content) or {}
        elif path.suffix == ".toml":
            return tomllib.loads(content)
        else:
            raise ValueError(f"Unsupported config format: {path.suffix}")
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Invalid TOML in {path}: {e}") from e


class BuilderSettings(BaseSettings):
    """Defaults for router build sessions.

    Values from a routing plan take precedence over these.
    """

    model_config = SettingsConfigDict(
        env_prefix="ALBINGRESS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    folder_id: str = Field(
        default="",
        description="Cloud folder the router is created in.",
    )
    cluster_id: str = Field(
        default="",
        description="Kubernetes cluster ID, used in backend group names and labels.",
    )
    name_prefix: str = Field(
        default="ingress",
        description="Leading word of generated resource names.",
    )
    default_timeout: float | None = Field(
        default=60.0,
        description="Route timeout in seconds when a plan sets none. None or 0 to leave unset.",
    )
    default_idle_timeout: float | None = Field(
        default=None,
        description="Route idle timeout in seconds when a plan sets none.",
    )
    log_level: str = Field(
        default="warning",
        description="Log level: debug, info, warning or error.",
    )

    def timeout(self) -> timedelta | None:
        return timedelta(seconds=self.default_timeout) if self.default_timeout else None

    def idle_timeout(self) -> timedelta | None:
        return timedelta(seconds=self.default_idle_timeout) if self.default_idle_timeout else None


_settings: BuilderSettings | None = None


def get_settings() -> BuilderSettings:
    """Get the cached settings instance, reading the environment on first use."""
    global _settings
    if _settings is None:
        _settings = BuilderSettings()
    return _settings


def clear_settings() -> None:
    """Forget cached settings so the next get_settings() re-reads the environment."""
    global _settings
    _settings = None
