"""
Bundle options and their loader.

Options come from a ``dts-bundler.json``/``dts-bundler.yaml`` file, from the
command line, or from a caller building ``BundleOptions`` directly. Keys may be
written in camelCase (``baseDir``) or snake_case (``base_dir``).
"""

import json
import yaml
import logging
import dataclasses
from pathlib import Path
from typing import Dict, Any, Optional, Tuple
from dataclasses import dataclass, field

from .exceptions import ConfigurationError

KEY_ALIASES = {
    'baseDir': 'base_dir',
    'exclude': 'excludes',
    'extern': 'externs',
}

# Paths in a config file are relative to the file's directory
PATH_KEYS = ('base_dir', 'out', 'project')


@dataclass(frozen=True)
class BundleOptions:
    """Configuration for one bundling run."""

    base_dir: str
    name: str
    out: str
    files: Tuple[str, ...] = field(default_factory=tuple)
    excludes: Tuple[str, ...] = field(default_factory=tuple)
    externs: Tuple[str, ...] = field(default_factory=tuple)
    eol: Optional[str] = None
    indent: str = '\t'
    main: Optional[str] = None
    target: Optional[str] = None

    # Compiler command and tsconfig location
    tsc: Optional[str] = None
    project: Optional[str] = None
    # Seconds before a compiler run is abandoned; None uses the compiler default
    timeout: Optional[float] = None

    def __post_init__(self):
        for key in ('files', 'excludes', 'externs'):
            value = getattr(self, key)
            if value is None:
                object.__setattr__(self, key, ())
            elif isinstance(value, str):
                object.__setattr__(self, key, (value,))
            else:
                object.__setattr__(self, key, tuple(value))
        if self.indent is None:
            object.__setattr__(self, 'indent', '\t')

    def validate(self) -> 'BundleOptions':
        """Check required options, raising ConfigurationError on the first problem."""
        for key in ('base_dir', 'name', 'out'):
            if not getattr(self, key):
                raise ConfigurationError(f"Missing required option '{key}'")
        for key in ('files', 'excludes', 'externs'):
            if not all(isinstance(item, str) for item in getattr(self, key)):
                raise ConfigurationError(f"Option '{key}' must be a list of strings")
        if self.eol is not None and self.eol not in ('\n', '\r\n'):
            raise ConfigurationError(f"Unsupported eol {self.eol!r}; use '\\n' or '\\r\\n'")
        if self.timeout is not None and (not isinstance(self.timeout, (int, float)) or self.timeout <= 0):
            raise ConfigurationError(f"Option 'timeout' must be a positive number of seconds, got {self.timeout!r}")
        return self

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BundleOptions':
        """Create from a dictionary, normalizing key names and dropping unknown keys."""
        valid_keys = {f.name for f in dataclasses.fields(cls)}
        normalized = {}
        for key, value in data.items():
            key = KEY_ALIASES.get(key, key)
            if key not in valid_keys:
                logging.debug(f"Ignoring unknown option '{key}'")
                continue
            normalized[key] = value

        for key in ('base_dir', 'name', 'out'):
            normalized.setdefault(key, '')
        return cls(**normalized)


class ConfigLoader:
    """Loads bundle options from configuration files."""

    CONFIG_FILES = [
        'dts-bundler.json',
        'dts-bundler.yaml',
        'dts-bundler.yml',
        '.dts-bundler.yml'
    ]

    @classmethod
    def find(cls, directory: Path) -> Optional[Path]:
        """Return the first known config file in ``directory``, if any."""
        for config_file in cls.CONFIG_FILES:
            config_path = Path(directory) / config_file
            if config_path.exists():
                return config_path
        return None

    @classmethod
    def load_dict(cls, config_path: Path) -> Dict[str, Any]:
        """
        Read raw options from a JSON or YAML file.

        Relative ``baseDir``, ``out`` and ``project`` values are resolved
        against the file's directory.

        Raises:
            ConfigurationError: the file cannot be read or parsed
        """
        config_path = Path(config_path)
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                if config_path.suffix in ['.yaml', '.yml']:
                    data = yaml.safe_load(f) or {}
                else:
                    data = json.load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to parse config file {config_path}: {e}", config_file=str(config_path))
        except OSError as e:
            raise ConfigurationError(f"Failed to load config file {config_path}: {e}", config_file=str(config_path))

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {config_path} must contain a mapping", config_file=str(config_path))

        data = {KEY_ALIASES.get(k, k): v for k, v in data.items()}
        for key in PATH_KEYS:
            value = data.get(key)
            if isinstance(value, str) and value and not Path(value).is_absolute():
                data[key] = str(config_path.parent / value)

        logging.info(f"Loaded config from: {config_path}")
        return data

    @classmethod
    def load(cls, config_path: Path, **overrides) -> BundleOptions:
        """Load options from ``config_path`` with non-None ``overrides`` applied, validated."""
        data = cls.load_dict(config_path)
        data.update({k: v for k, v in overrides.items() if v is not None})
        return BundleOptions.from_dict(data).validate()


def load_config(config_path: Optional[Path] = None, **overrides) -> BundleOptions:
    """Shorthand: load from a file when given, else build from ``overrides`` alone."""
    if config_path is not None:
        return ConfigLoader.load(config_path, **overrides)
    return BundleOptions.from_dict({k: v for k, v in overrides.items() if v is not None}).validate()
