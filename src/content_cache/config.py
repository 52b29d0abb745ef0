from __future__ import annotations

from typing import Protocol

from config import ConfigurationSet, config_from_dict, config_from_env, config_from_yaml


class AppConfig(Protocol):
    def __getitem__(self, key: str) -> object: ...


_DEFAULTS: dict[str, object] = {
    "cache": {
        "backend": "sqlite",
        "db_path": "~/.cache/content_cache/cache.db",
    },
    "menus": {
        "namespace": "",
        "ttl": 86400,
    },
    "thumbnails": {
        "namespace": "",
        "ttl": 86400,
    },
    "permalinks": {
        "namespace": "",
        "ttl": 86400,
    },
}


def create_config(
    yaml_path: str = "content_cache.yaml",
    env_prefix: str = "CONTENT_CACHE",
    defaults: dict[str, object] | None = None,
    *,
    overrides: dict[str, object] | None = None,
) -> ConfigurationSet:
    """Create a layered configuration.

    Priority (highest to lowest): explicit overrides > env vars > YAML file > defaults dict.

    Args:
        yaml_path: Path to the YAML config file.
        env_prefix: Prefix for environment variables (``CONTENT_CACHE__MENUS__TTL``).
        defaults: Default configuration values.
        overrides: Values that win over every other layer.
    """
    if defaults is None:
        defaults = _DEFAULTS

    layers = [
        config_from_env(env_prefix, separator="__", lowercase_keys=True),
        config_from_yaml(yaml_path, read_from_file=True, ignore_missing_paths=True),
        config_from_dict(defaults),
    ]
    if overrides:
        layers.insert(0, config_from_dict(overrides))

    return ConfigurationSet(*layers)
