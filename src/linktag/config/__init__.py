"""Configuration management for linktag."""

from __future__ import annotations

import os
import textwrap
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError
from .models import LinktagConfig, LoggingSettings, ScanOptions
from .resolver import env_key, flatten_for_env, parse_env, resolve_with_precedence

DEFAULT_CONFIG_PATH = Path("~/.linktag/config.yaml")
_CONFIG_HEADER = textwrap.dedent(
    """\
    # linktag configuration file
    # Generated automatically; manage via `linktag config edit` or `linktag config set`.
    """
)


class ConfigManager:
    """Load and persist configuration data, applying precedence rules."""

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._config_path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = env if env is not None else os.environ

    @property
    def config_path(self) -> Path:
        """Return the resolved configuration path."""
        return self._config_path

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
        env_overrides: Mapping[str, str] | None = None,
    ) -> LinktagConfig:
        """Load the config file, creating it first, then apply env and CLI overrides.

        Args:
            cli_overrides: Dotted-key overrides from command line options.
            include_env: Whether `LINKTAG__` variables are applied.
            env_overrides: Environment to read instead of the process environment.

        Raises:
            ConfigError: If the file or any override is invalid.
        """
        self.ensure_exists()
        env = env_overrides if env_overrides is not None else self._env
        return resolve_with_precedence(
            defaults=LinktagConfig(),
            file_overrides=self._read_file(),
            env_overrides=parse_env(env) if include_env else None,
            cli_overrides=cli_overrides,
        )

    def load_file_overrides(self) -> dict[str, Any]:
        """Return raw overrides stored on disk."""
        return self._read_file()

    def save(self, config: LinktagConfig | Mapping[str, Any]) -> None:
        """Persist configuration data to disk."""
        if isinstance(config, LinktagConfig):
            data = config.model_dump(mode="python")
        else:
            data = dict(config)
        self._write_file(data)

    def ensure_exists(self) -> Path:
        """Create a configuration file with defaults if one does not exist."""
        path = self._config_path
        if not path.exists():
            self._write_file(LinktagConfig().model_dump(mode="python"))
        return path

    def read_text(self) -> str:
        """Return the current configuration file contents."""
        if not self._config_path.exists():
            return ""
        return self._config_path.read_text(encoding="utf-8")

    # Internal helpers -------------------------------------------------

    def _read_file(self) -> dict[str, Any]:
        if not self._config_path.exists():
            return {}

        try:
            raw = yaml.safe_load(self._config_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse configuration file: {exc}") from exc

        if not isinstance(raw, dict):
            raise ConfigError("Configuration file must contain a mapping at the top level.")

        return raw

    def _write_file(self, data: Mapping[str, Any]) -> None:
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        serialized = yaml.safe_dump(dict(data), sort_keys=False)
        stamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        self._config_path.write_text(
            _CONFIG_HEADER + f"# Last updated: {stamp}\n" + serialized, encoding="utf-8"
        )


__all__ = [
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "LinktagConfig",
    "LoggingSettings",
    "ScanOptions",
    "resolve_with_precedence",
    "env_key",
    "flatten_for_env",
    "parse_env",
    "ConfigError",
]
