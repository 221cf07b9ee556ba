"""Layered configuration resolution.

Tractor reads settings from three layers, each overriding the previous one:

* ``file``: the nested mapping parsed from ``config.yaml``.
* ``environment``: ``TRACTOR__SECTION__KEY`` variables, flattened to
  ``section.key`` by :class:`~tractor.config.ConfigManager`.
* ``command line``: options such as ``--resource``, given as ``section.key``.

Dotted keys and nested mappings may be mixed within any layer.
"""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from typing import Any, Mapping

from pydantic import ValidationError

from .exceptions import ConfigError
from .models import TractorConfig


def resolve_config(
    *,
    file_data: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
    defaults: TractorConfig | None = None,
) -> TractorConfig:
    """Build a validated configuration from the file, environment and CLI layers.

    Args:
        file_data: Mapping loaded from the configuration file.
        env_overrides: Values taken from ``TRACTOR__`` environment variables.
        cli_overrides: Values given explicitly on the command line.
        defaults: Base configuration; the model defaults when omitted.

    Returns:
        TractorConfig: The merged configuration.

    Raises:
        ConfigError: If a layer is malformed or the merged values are invalid.
    """
    merged = (defaults or TractorConfig()).model_dump(mode="python")
    layers = (("file", file_data), ("environment", env_overrides), ("command line", cli_overrides))
    for source, layer in layers:
        if not layer:
            continue
        if not isinstance(layer, MappingABC):
            raise ConfigError(f"The {source} configuration must be a mapping.")
        merged = merge_overrides(merged, expand_dotted(layer, source=source))

    try:
        return TractorConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def expand_dotted(values: Mapping[str, Any], *, source: str) -> dict[str, Any]:
    """Turn ``{"storage.root": x}`` style keys into nested dictionaries.

    Raises:
        ConfigError: If a key is not a non-empty string or one key addresses a
            section that another key in the same layer set to a plain value.
    """
    nested: dict[str, Any] = {}
    for key, value in values.items():
        if not isinstance(key, str) or not key:
            raise ConfigError(f"The {source} configuration has an invalid key {key!r}.")
        *sections, leaf = key.split(".")
        node = nested
        for section in sections:
            child = node.setdefault(section, {})
            if not isinstance(child, dict):
                raise ConfigError(f"The {source} setting {key!r} conflicts with {section!r}.")
            node = child
        if isinstance(value, MappingABC):
            current = node.get(leaf)
            node[leaf] = merge_overrides(current if isinstance(current, dict) else {}, value)
        else:
            node[leaf] = value
    return nested


def merge_overrides(base: dict[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of base with overrides applied section by section.

    Nested mappings are merged key by key; any other value, lists included,
    replaces what base held. Neither argument is modified.
    """
    result = dict(base)
    for key, value in overrides.items():
        if isinstance(value, MappingABC):
            current = result.get(key)
            result[key] = merge_overrides(current if isinstance(current, dict) else {}, value)
        else:
            result[key] = value
    return result


__all__ = ["expand_dotted", "merge_overrides", "resolve_config"]
