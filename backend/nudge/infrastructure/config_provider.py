"""YAML Config Provider — reads `<config_path>/<namespace>.yml` once per namespace.

Invariants:
    - A missing namespace file yields {} (the caller's validation decides)
    - A file that is not a YAML mapping, or is not valid YAML, raises
      ConfigurationInvalidError
    - Each namespace is parsed at most once per provider
"""

from pathlib import Path
from typing import Any

import yaml

from nudge.core.errors import ConfigurationInvalidError

_EXTENSIONS = (".yml", ".yaml")


class YamlConfigProvider:
    """Implements the ConfigProvider protocol over a directory of YAML files."""

    def __init__(self, config_path: str):
        self.config_path = config_path
        self._cache: dict[str, dict[str, Any]] = {}

    def get_config(self, namespace: str) -> dict[str, Any]:
        if namespace not in self._cache:
            self._cache[namespace] = self._load(namespace)
        return self._cache[namespace]

    def _find_file(self, namespace: str) -> Path | None:
        for ext in _EXTENSIONS:
            path = Path(self.config_path) / f"{namespace}{ext}"
            if path.is_file():
                return path
        return None

    def _load(self, namespace: str) -> dict[str, Any]:
        path = self._find_file(namespace)
        if path is None:
            return {}
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationInvalidError(f"{path}: invalid YAML: {e}")
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationInvalidError(
                f"{path}: expected a mapping, got {type(data).__name__}",
            )
        return data
