"""
Entity Type Table

Loads per-type layout properties (radius, priority, orbit radius, colors)
from a configuration file. Allows sites to add or retune celestial types
without modifying code.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)


class EntityTypes:
    """
    Manager for celestial entity type properties.

    Loads entity_types.yaml by default, but allows callers to provide a
    custom configuration file. Unknown types always resolve to the values
    in the `default` section.
    """

    REQUIRED_SECTIONS = (
        'radius',
        'priority',
        'orbit_radius',
        'size_modifier',
        'color',
        'default',
    )

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize the type table.

        Args:
            config_path: Optional path to a custom entity types YAML file.
                        If None, uses the packaged entity_types.yaml.
        """
        if config_path is None:
            config_path = Path(__file__).parent / "entity_types.yaml"

        self.config_path = Path(config_path)
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self):
        """Load the type table from YAML."""
        if not self.config_path.exists():
            raise FileNotFoundError(
                f"Entity type configuration file not found: {self.config_path}"
            )

        # Security: Check for symlinks to prevent reading unintended files
        if self.config_path.is_symlink():
            raise ConfigError(
                f"Entity type configuration file cannot be a symlink: {self.config_path}"
            )

        with open(self.config_path, 'r', encoding='utf-8') as f:
            self._config = yaml.safe_load(f) or {}

        missing = [s for s in self.REQUIRED_SECTIONS if s not in self._config]
        if missing:
            raise ConfigError(
                f"Configuration file missing required sections: {missing}"
            )
        logger.debug("Loaded entity types from %s", self.config_path)

    def _lookup(self, section: str, entity_type: Optional[str]) -> Any:
        table = self._config.get(section) or {}
        if entity_type in table:
            return table[entity_type]
        return self._config['default'][section]

    @property
    def known_types(self):
        """All types with an explicit radius entry."""
        return sorted(self._config['radius'].keys())

    def is_known(self, entity_type: Optional[str]) -> bool:
        return entity_type in self._config['radius']

    def radius(self, entity_type: Optional[str]) -> float:
        """Collision radius for a type (pixels)."""
        return float(self._lookup('radius', entity_type))

    def priority(self, entity_type: Optional[str]) -> float:
        """Base layout priority for a type."""
        return float(self._lookup('priority', entity_type))

    def orbit_radius(self, entity_type: Optional[str]) -> float:
        """Default orbit radius for a type."""
        return float(self._lookup('orbit_radius', entity_type))

    def size_modifier(self, entity_type: Optional[str]) -> float:
        return float(self._lookup('size_modifier', entity_type))

    def color(self, entity_type: Optional[str]) -> str:
        return str(self._lookup('color', entity_type))

    def icon(self, entity_type: Optional[str]) -> str:
        table = self._config.get('icon') or {}
        if entity_type in table:
            return table[entity_type]
        return self._config['default'].get('icon', '')

    def importance_size_modifier(self, importance: str) -> float:
        table = self._config.get('importance_size_modifier') or {}
        return float(table.get(importance, 1.0))


# Cached default instance
_default_types: Optional[EntityTypes] = None


def get_entity_types(config_path: Optional[str] = None) -> EntityTypes:
    """
    Get the entity type table.

    Args:
        config_path: Optional path to a custom type table.
                    If None, uses the cached default instance.

    Returns:
        EntityTypes instance
    """
    global _default_types

    if config_path is not None:
        return EntityTypes(config_path)

    if _default_types is None:
        _default_types = EntityTypes()

    return _default_types


def reload_entity_types():
    """Reload the default type table from its configuration file."""
    global _default_types
    _default_types = EntityTypes()
