"""
Configuration Loader.

Reads ledger settings from YAML with an optional per-environment overlay
file and .env support. ``${VAR}`` references are resolved during
validation (see BaseConfig).
"""

from copy import deepcopy
from pathlib import Path
from typing import Any, Iterator, Optional

import yaml
from dotenv import load_dotenv

from .exceptions import (
    ConfigFileNotFoundError,
    ConfigParseError,
    ConfigValidationError,
)
from .models import LedgerConfig

LEDGER_SECTION = "ledger"


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Merge ``override`` into a copy of ``base``; nested mappings merge key by key.

    Example:
        >>> deep_merge({"a": {"b": 1, "c": 2}}, {"a": {"b": 10}})
        {'a': {'b': 10, 'c': 2}}
    """
    merged = deepcopy(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = deepcopy(value)
    return merged


class ConfigLoader:
    """
    YAML configuration loader for the ledger.

    Example:
        >>> loader = ConfigLoader()
        >>> config = loader.load("config/ledger.yaml", env="production")
        >>> config.administrator
        '0xadmin'
    """

    def __init__(self, env_file: Optional[str | Path] = None):
        """
        Initialize ConfigLoader.

        Args:
            env_file: .env file to load first; otherwise the first .env found
                next to the config file, in its parent, or in the working
                directory is used
        """
        self._env_file = Path(env_file) if env_file else None
        self._env_loaded = False

    def load(self, path: str | Path, env: Optional[str] = None) -> LedgerConfig:
        """
        Load and validate the ledger configuration.

        ``config/ledger.yaml`` with ``env="production"`` also reads
        ``config/ledger.production.yaml`` when present and merges it over
        the base file. Settings are read from the ``ledger`` section, or
        from the top level when there is none.

        Raises:
            ConfigFileNotFoundError: If the base file is missing
            ConfigParseError: If a file is not a YAML mapping
            ConfigValidationError: If the settings are invalid
        """
        path = Path(path)
        self._load_env(path.parent)

        data = self.load_yaml(path)
        overlay = path.with_name(f"{path.stem}.{env}{path.suffix}") if env else None
        if overlay is not None and overlay.exists():
            data = deep_merge(data, self.load_yaml(overlay))

        section = data.get(LEDGER_SECTION, data)
        if not isinstance(section, dict):
            raise ConfigValidationError([f"{LEDGER_SECTION}: section must be a mapping"])

        return LedgerConfig.from_mapping(section)

    def load_yaml(self, path: str | Path) -> dict[str, Any]:
        """
        Read one YAML file; an empty file reads as ``{}``.

        Raises:
            ConfigFileNotFoundError: If file not found
            ConfigParseError: If YAML parsing fails or the root is not a mapping
        """
        path = Path(path)
        if not path.exists():
            raise ConfigFileNotFoundError(str(path))

        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ConfigParseError(str(path), str(e)) from e

        data = {} if data is None else data
        if not isinstance(data, dict):
            raise ConfigParseError(str(path), "top-level YAML must be a mapping")
        return data

    def _env_candidates(self, config_dir: Path) -> Iterator[Path]:
        if self._env_file:
            yield self._env_file
        yield config_dir / ".env"
        yield config_dir.parent / ".env"
        yield Path.cwd() / ".env"

    def _load_env(self, config_dir: Path) -> None:
        if self._env_loaded:
            return
        env_path = next((p for p in self._env_candidates(config_dir) if p.exists()), None)
        if env_path is not None:
            load_dotenv(env_path)
            self._env_loaded = True


def load_config(
    path: str | Path,
    env: Optional[str] = None,
    env_file: Optional[str | Path] = None,
) -> LedgerConfig:
    """
    Load ledger configuration from a YAML file.

    Args:
        path: Path to base configuration file
        env: Optional environment name selecting an overlay file
        env_file: Optional path to .env file

    Returns:
        Validated LedgerConfig
    """
    return ConfigLoader(env_file=env_file).load(path, env=env)
