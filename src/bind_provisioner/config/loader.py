"""Configuration loader for the provisioner.

Settings are layered in a fixed order: built-in defaults, then a YAML or
JSON file, then ``BIND_PROVISIONER_<SECTION>_<KEY>`` environment variables,
then command-line overrides. The merged result is validated by the schema
dataclasses.
"""

import json
import os
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .schema import (
    DeploymentConfig,
    LoggingConfig,
    PathsConfig,
    ProvisionerConfig,
    RunConfig,
    ServiceConfig,
    ZoneConfig,
    create_default_config,
)

ENV_PREFIX = "BIND_PROVISIONER_"

_SECTIONS = {
    "deployment": DeploymentConfig,
    "zone": ZoneConfig,
    "paths": PathsConfig,
    "service": ServiceConfig,
    "run": RunConfig,
    "logging": LoggingConfig,
}

# Mapping values that replace the default instead of merging into it
_REPLACED_MAPPINGS = {"aliases"}

_TRUE = ("true", "yes", "1", "on")
_FALSE = ("false", "no", "0", "off")


class ConfigLoader:
    """Builds a ProvisionerConfig from defaults, a file and the environment."""

    def __init__(
        self,
        config_file: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        """
        Args:
            config_file: Path to a YAML or JSON configuration file
            environ: Environment mapping, defaults to ``os.environ``
        """
        self.config_file = config_file
        self.environ = os.environ if environ is None else environ
        self._config: Optional[ProvisionerConfig] = None

    def load_config(
        self, overrides: Optional[Dict[str, Any]] = None
    ) -> ProvisionerConfig:
        """Load and validate the configuration.

        Args:
            overrides: Section dictionary applied last (command-line options)

        Raises:
            FileNotFoundError: If the configuration file does not exist
            ValueError: If a section or value is invalid
            yaml.YAMLError: If YAML parsing fails
            json.JSONDecodeError: If JSON parsing fails
        """
        settings = asdict(create_default_config())

        if self.config_file:
            settings = self._merge_configs(settings, self._load_from_file(self.config_file))

        settings = self._merge_configs(settings, self._environment_settings(settings))

        if overrides:
            settings = self._merge_configs(settings, overrides)

        self._config = self._dict_to_config(settings)
        return self._config

    def get_config(self) -> Optional[ProvisionerConfig]:
        """Return the configuration from the last load_config() call."""
        return self._config

    def _load_from_file(self, file_path: str) -> Dict[str, Any]:
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {file_path}")

        content = path.read_text(encoding="utf-8")
        suffix = path.suffix.lower()

        if suffix in (".yaml", ".yml"):
            data = yaml.safe_load(content)
        elif suffix == ".json":
            data = json.loads(content)
        else:
            # No telling extension: YAML first, JSON as the fallback
            try:
                data = yaml.safe_load(content)
            except yaml.YAMLError:
                try:
                    data = json.loads(content)
                except json.JSONDecodeError:
                    raise ValueError(f"Unsupported file format: {file_path}")

        return data if isinstance(data, dict) else {}

    def _dict_to_config(self, settings: Dict[str, Any]) -> ProvisionerConfig:
        unknown = set(settings) - set(_SECTIONS)
        if unknown:
            raise ValueError(f"Unknown configuration sections: {sorted(unknown)}")

        sections = {}
        for name, section_cls in _SECTIONS.items():
            values = settings.get(name) or {}
            if not isinstance(values, dict):
                raise ValueError(f"Configuration section '{name}' must be a mapping")
            try:
                sections[name] = section_cls(**values)
            except TypeError as e:
                raise ValueError(f"Invalid '{name}' configuration: {e}") from e

        return ProvisionerConfig(**sections)

    def _merge_configs(
        self, base: Dict[str, Any], override: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Deep-merge ``override`` into a copy of ``base``."""
        merged = dict(base)

        for key, value in override.items():
            current = merged.get(key)
            if (
                isinstance(current, dict)
                and isinstance(value, dict)
                and key not in _REPLACED_MAPPINGS
            ):
                merged[key] = self._merge_configs(current, value)
            else:
                merged[key] = value

        return merged

    def _environment_settings(self, settings: Dict[str, Any]) -> Dict[str, Any]:
        """Collect overrides from ``BIND_PROVISIONER_<SECTION>_<KEY>`` variables.

        Variables that do not name a known section and field are ignored.
        """
        found: Dict[str, Dict[str, Any]] = {}

        for env_key, env_value in self.environ.items():
            if not env_key.startswith(ENV_PREFIX):
                continue

            section, _, key = env_key[len(ENV_PREFIX) :].lower().partition("_")
            section_cls = _SECTIONS.get(section)
            if section_cls is None or key not in {f.name for f in fields(section_cls)}:
                continue

            current = (settings.get(section) or {}).get(key)
            found.setdefault(section, {})[key] = self._convert_env_value(
                env_value, current
            )

        return found

    def _convert_env_value(self, value: str, current: Any = None) -> Any:
        """Convert an environment string to the type of the value it replaces."""
        if isinstance(current, list):
            return [item.strip() for item in value.split(",") if item.strip()]

        if isinstance(current, dict):
            pairs = [item.split("=", 1) for item in value.split(",") if "=" in item]
            return {k.strip(): v.strip() for k, v in pairs}

        if isinstance(current, bool):
            lowered = value.strip().lower()
            if lowered in _TRUE:
                return True
            if lowered in _FALSE:
                return False
            # Left as text so validation reports it
            return value

        if isinstance(current, int):
            try:
                return int(value)
            except ValueError:
                return value

        if isinstance(current, float):
            try:
                return float(value)
            except ValueError:
                return value

        return value


def load_config_from_file(
    config_file: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> ProvisionerConfig:
    """Load configuration from ``config_file`` and the process environment."""
    return ConfigLoader(config_file).load_config(overrides)
