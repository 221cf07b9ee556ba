"""Configuration management for Tractor."""

from __future__ import annotations

import os
import textwrap
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError
from .models import TractorConfig
from .resolver import resolve_config

DEFAULT_CONFIG_PATH = Path("~/.tractor/config.yaml")
ENV_PREFIX = "TRACTOR__"
_CONFIG_HEADER = textwrap.dedent(
    """\
    # Tractor configuration file
    # Generated automatically; edit values here or override them with
    # TRACTOR__SECTION__KEY environment variables.
    """
)


class ConfigManager:
    """Locate, create and load the Tractor configuration file."""

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
        ensure_file: bool = True,
        env_overrides: Mapping[str, str] | None = None,
    ) -> TractorConfig:
        """Load configuration from disk, then apply environment and CLI overrides.

        Args:
            cli_overrides: Dotted ``section.key`` values given on the command line.
            include_env: Whether ``TRACTOR__`` variables are consulted.
            ensure_file: Create the configuration file with defaults when missing.
            env_overrides: Environment to read instead of ``os.environ``.

        Returns:
            TractorConfig: The resolved configuration.
        """
        if ensure_file:
            self.ensure_exists()

        env_data: Mapping[str, str] | None = None
        if include_env:
            env_data = env_overrides if env_overrides is not None else self._env

        return resolve_config(
            file_data=self._read_file(),
            env_overrides=self._extract_env(env_data) if env_data else None,
            cli_overrides=cli_overrides,
        )

    def ensure_exists(self) -> Path:
        """Create a configuration file with defaults if one does not exist."""
        path = self._config_path
        if path.exists():
            return path

        try:
            self._write_file(TractorConfig().model_dump(mode="python"))
        except OSError as exc:
            raise ConfigError(f"Unable to create configuration file {path}: {exc}") from exc
        return path

    # Internal helpers -------------------------------------------------

    def _read_file(self) -> dict[str, Any]:
        if not self._config_path.exists():
            return {}

        try:
            raw = yaml.safe_load(self._config_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse configuration file: {exc}") from exc
        except OSError as exc:
            raise ConfigError(f"Unable to read configuration file: {exc}") from exc

        if not isinstance(raw, dict):
            raise ConfigError("Configuration file must contain a mapping at the top level.")

        return raw

    def _write_file(self, data: Mapping[str, Any]) -> None:
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        serialized = yaml.safe_dump(dict(data), sort_keys=False)
        stamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        timestamp = f"# Last updated: {stamp}\n"
        self._config_path.write_text(_CONFIG_HEADER + timestamp + serialized, encoding="utf-8")

    def _extract_env(self, env: Mapping[str, str]) -> dict[str, Any]:
        overrides: dict[str, Any] = {}
        for key, raw_value in env.items():
            if not key.startswith(ENV_PREFIX):
                continue
            segments = [segment.lower() for segment in key[len(ENV_PREFIX) :].split("__") if segment]
            if not segments:
                continue
            try:
                value: Any = yaml.safe_load(raw_value)
            except yaml.YAMLError:
                value = raw_value
            overrides[".".join(segments)] = value
        return overrides


__all__ = [
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "ENV_PREFIX",
    "TractorConfig",
    "resolve_config",
    "ConfigError",
]
