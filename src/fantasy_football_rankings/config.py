from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from config import ConfigurationSet, config_from_dict, config_from_env, config_from_yaml

from fantasy_football_rankings.context import Settings
from fantasy_football_rankings.domain.fetch_result import SourceTag

if TYPE_CHECKING:
    from collections.abc import Mapping


class ConfigError(Exception):
    """Raised when a configuration value cannot be used."""


_DEFAULTS: dict[str, object] = {
    "sources": {
        "api_key": "",
        "username": "",
        "password": "",
        "timeout": 10.0,
        "season": 2025,
        "order": ["primary-api", "authenticated-session", "public-access"],
    },
    "cache": {
        "ttl": 900,
        "max_entries": 1000,
        "prune_interval": 300,
    },
    "snapshots": {
        "enabled": False,
        "db_path": "~/.config/ffr/snapshots.db",
    },
}

# Variables honoured when the layered config leaves a credential empty.
_LEGACY_ENV = {
    "api_key": "FANTASYPROS_API_KEY",
    "username": "FANTASYPROS_USERNAME",
    "password": "FANTASYPROS_PASSWORD",
}

_TRUE_STRINGS = frozenset({"1", "true", "yes", "on"})
_FALSE_STRINGS = frozenset({"0", "false", "no", "off", ""})


def create_config(
    yaml_path: str = "ffr.yaml",
    env_prefix: str = "FFR",
    defaults: dict[str, object] | None = None,
) -> ConfigurationSet:
    """Create a layered configuration.

    Priority (highest to lowest): env vars > YAML file > defaults dict.

    Args:
        yaml_path: Path to the YAML config file. A missing file is ignored.
        env_prefix: Prefix for environment variables, e.g. ``FFR__CACHE__TTL``.
        defaults: Default configuration values.
    """
    if defaults is None:
        defaults = _DEFAULTS

    return ConfigurationSet(
        config_from_env(env_prefix, separator="__", lowercase_keys=True),
        config_from_yaml(yaml_path, read_from_file=True, ignore_missing_paths=True),
        config_from_dict(defaults),
    )


def _number[T: (int, float)](cfg: ConfigurationSet, key: str, kind: type[T], minimum: float = 0) -> T:
    raw = cfg[key]
    try:
        value = kind(str(raw))
    except ValueError:
        raise ConfigError(f"{key} must be a number, got {raw!r}") from None
    if value <= minimum:
        raise ConfigError(f"{key} must be greater than {minimum}, got {value}")
    return value


def _flag(cfg: ConfigurationSet, key: str) -> bool:
    raw = cfg[key]
    if isinstance(raw, bool):
        return raw
    text = str(raw).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    raise ConfigError(f"{key} must be a boolean, got {raw!r}")


def _source_order(raw: object) -> tuple[SourceTag, ...]:
    items = raw.split(",") if isinstance(raw, str) else list(raw)  # type: ignore[call-overload]
    try:
        order = tuple(SourceTag(str(item).strip()) for item in items if str(item).strip())
    except ValueError as e:
        raise ConfigError(f"sources.order contains an unknown source: {e}") from None
    if SourceTag.SAMPLE_FALLBACK in order:
        raise ConfigError("sources.order cannot include sample-fallback")
    return order


def _credential(cfg: ConfigurationSet, name: str, environ: Mapping[str, str]) -> str:
    value = str(cfg[f"sources.{name}"] or "").strip()
    return value or environ.get(_LEGACY_ENV[name], "").strip()


def load_settings(cfg: ConfigurationSet | None = None, environ: Mapping[str, str] | None = None) -> Settings:
    """Resolve the layered configuration into Settings.

    Raises:
        ConfigError: If a value is missing its expected type or range.
    """
    if cfg is None:
        cfg = create_config()
    if environ is None:
        environ = os.environ

    return Settings(
        api_key=_credential(cfg, "api_key", environ),
        username=_credential(cfg, "username", environ),
        password=_credential(cfg, "password", environ),
        season=_number(cfg, "sources.season", int),
        timeout=_number(cfg, "sources.timeout", float),
        source_order=_source_order(cfg["sources.order"]),
        cache_ttl=_number(cfg, "cache.ttl", float),
        cache_max_entries=_number(cfg, "cache.max_entries", int),
        prune_interval=_number(cfg, "cache.prune_interval", float),
        snapshots_enabled=_flag(cfg, "snapshots.enabled"),
        snapshot_db_path=Path(str(cfg["snapshots.db_path"])).expanduser(),
    )
