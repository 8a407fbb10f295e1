# bnghex/config/config.py
"""Configuration manager: built-in defaults with YAML overrides."""

import copy
import logging
import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional

from . import defaults

logger = logging.getLogger(__name__)

SECTIONS = ('grids', 'processing', 'processing_bounds', 'export', 'logging', 'paths')


def _deep_merge(base: dict, override: dict):
    """Merge ``override`` into ``base`` in place; mappings merge, anything else replaces."""
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value


def _search_paths() -> List[Path]:
    return [
        Path.cwd() / 'config.yml',
        defaults.PROJECT_ROOT / 'config.yml',
        Path.home() / '.bnghex' / 'config.yml',
    ]


class Config:
    """
    Settings tree built from ``defaults`` and an optional config.yml.

    An explicit ``config_file`` must exist. Without one the first config.yml
    found in the working directory, the project root or ``~/.bnghex`` is
    merged; a broken discovered file is logged and ignored.
    """

    def __init__(self, config_file: Optional[Path] = None):
        self.settings = self.load_defaults()
        self.config_file: Optional[Path] = None

        if config_file is not None:
            self.load_file(config_file)
            return

        discovered = next((p for p in _search_paths() if p.is_file()), None)
        if discovered is None:
            return
        try:
            self.load_file(discovered)
        except (OSError, yaml.YAMLError) as e:
            self.settings = self.load_defaults()
            logger.warning(f"Config file loading failed: {e} - using defaults")

    def load_defaults(self) -> Dict[str, Any]:
        return {section: copy.deepcopy(getattr(defaults, section.upper())) for section in SECTIONS}

    def load_file(self, config_file: Path):
        """Merge a YAML file over the current settings."""
        config_file = Path(config_file)
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_file}")

        with open(config_file, 'r') as f:
            overrides = yaml.safe_load(f)
        if overrides:
            if not isinstance(overrides, dict):
                raise yaml.YAMLError(f"Top level of {config_file} must be a mapping")
            _deep_merge(self.settings, overrides)

        self.config_file = config_file
        logger.debug(f"Loaded configuration from {config_file}")

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value by dotted key, e.g. ``config.get('grids.hexagonal.zooms')``."""
        value: Any = self.settings
        for part in key.split('.'):
            if not isinstance(value, dict) or part not in value:
                return default
            value = value[part]
        return value

    @property
    def grids(self) -> Dict[str, Any]:
        return self.settings['grids']

    @property
    def processing(self) -> Dict[str, Any]:
        return self.settings['processing']

    @property
    def processing_bounds(self) -> Dict[str, Any]:
        return self.settings['processing_bounds']

    @property
    def export(self) -> Dict[str, Any]:
        return self.settings['export']

    @property
    def logging(self) -> Dict[str, Any]:
        return self.settings['logging']

    @property
    def paths(self) -> Dict[str, Any]:
        return self.settings['paths']


# Global configuration instance
config = Config()
