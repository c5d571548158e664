"""
fieldrules Configuration
========================

Layered configuration with dot-notation access.

Loading priority (highest to lowest):
1. Runtime overrides (`set`)
2. Environment variables (FIELDRULES_*)
3. JSON config file
4. Default values

Example:
    config = Config.load(path="fieldrules.json")

    level = config.get("log.level")
    overrides = config.get("validation.messages", {})
"""

from __future__ import annotations

import copy
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, TypeVar, Union

T = TypeVar("T")

ENV_PREFIX = "FIELDRULES_"

DEFAULTS: Dict[str, Any] = {
    "log": {
        "level": "WARNING",
        "format": "text",
    },
    "validation": {
        "messages": {},
    },
}


@dataclass
class ConfigSource:
    """Configuration source with priority."""

    name: str
    data: Dict[str, Any]
    priority: int = 0


class Config:
    """
    Configuration container.

    Sources are deep-merged by priority, lower first, so higher priority
    values override.
    """

    def __init__(self, defaults: Optional[Mapping[str, Any]] = None) -> None:
        self._sources: List[ConfigSource] = []
        self._merged: Dict[str, Any] = {}
        self._dirty = True

        self.add_source("defaults", copy.deepcopy(dict(defaults or DEFAULTS)), priority=0)

    @classmethod
    def load(
        cls,
        path: Optional[Union[str, Path]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "Config":
        """
        Build configuration from defaults, an optional file and the environment.

        Raises:
            FileNotFoundError: If `path` is given but missing
            ValueError: If the file is not a JSON object
        """
        config = cls()
        if path is not None:
            config.load_file(path)
        config.load_env(environ)
        return config

    def load_file(self, path: Union[str, Path]) -> None:
        """Load a JSON object file as a configuration source."""
        path = Path(path)
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Configuration file must hold a JSON object: {path}")
        self.add_source(f"file:{path.name}", data, priority=10)

    def load_env(self, environ: Optional[Mapping[str, str]] = None) -> None:
        """Load overrides from FIELDRULES_* environment variables."""
        environ = os.environ if environ is None else environ
        overrides: Dict[str, Any] = {}

        for key, value in environ.items():
            if key.startswith(ENV_PREFIX):
                # FIELDRULES_LOG_LEVEL -> log.level
                config_key = key[len(ENV_PREFIX):].lower().replace("_", ".", 1)
                overrides[config_key] = self._parse_env_value(value)

        if overrides:
            self.add_source("env", self._unflatten(overrides), priority=100)

    def _parse_env_value(self, value: str) -> Any:
        """Parse environment variable value to appropriate type."""
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            return int(value)
        except ValueError:
            pass

        if value.startswith(("{", "[")):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        return value

    def _unflatten(self, flat: Dict[str, Any]) -> Dict[str, Any]:
        """Convert flat dot-notation keys to nested dict."""
        result: Dict[str, Any] = {}

        for key, value in flat.items():
            parts = key.split(".")
            current = result
            for part in parts[:-1]:
                current = current.setdefault(part, {})
            current[parts[-1]] = value

        return result

    def add_source(self, name: str, data: Dict[str, Any], priority: int = 0) -> None:
        """Add a configuration source."""
        self._sources.append(ConfigSource(name=name, data=data, priority=priority))
        self._dirty = True

    def _merge(self) -> None:
        if not self._dirty:
            return

        self._merged = {}
        for source in sorted(self._sources, key=lambda s: s.priority):
            self._deep_merge(self._merged, source.data)

        self._dirty = False

    def _deep_merge(self, base: Dict[str, Any], override: Mapping[str, Any]) -> None:
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, Mapping):
                self._deep_merge(base[key], value)
            elif isinstance(value, Mapping):
                base[key] = {}
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def get(self, key: str, default: T = None) -> Union[Any, T]:
        """
        Get configuration value using dot notation.

        Args:
            key: Configuration key (e.g., "log.level")
            default: Default value if key not found
        """
        self._merge()

        current: Any = self._merged
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]

        return current

    def get_bool(self, key: str, default: bool = False) -> bool:
        """Get configuration value as boolean."""
        value = self.get(key, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.lower() in ("true", "yes", "1")
        return bool(value)

    def get_dict(self, key: str) -> Dict[str, Any]:
        """Get configuration value as dict (empty if missing)."""
        value = self.get(key)
        return dict(value) if isinstance(value, dict) else {}

    def set(self, key: str, value: Any) -> None:
        """Set a runtime value (highest priority)."""
        runtime = next((s for s in self._sources if s.name == "runtime"), None)
        if runtime is None:
            runtime = ConfigSource(name="runtime", data={}, priority=1000)
            self._sources.append(runtime)

        parts = key.split(".")
        current = runtime.data
        for part in parts[:-1]:
            current = current.setdefault(part, {})
        current[parts[-1]] = value

        self._dirty = True

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def all(self) -> Dict[str, Any]:
        """Get merged configuration."""
        self._merge()
        return copy.deepcopy(self._merged)

    def __contains__(self, key: str) -> bool:
        return self.has(key)
