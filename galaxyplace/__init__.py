"""
GalaxyPlace - Adaptive Galaxy Layout Engine

Positions the pages of a site as celestial bodies on a 2D canvas: density
classification picks a layout strategy, children orbit their parents, and
an iterative resolver removes overlaps while respecting entity priorities.
"""

__version__ = "0.1.0"
__author__ = "GalaxyPlace Team"

from .entity_types import EntityTypes, get_entity_types
from .errors import ConfigError, GalaxyPlaceError, SitemapValidationError
from .galaxy.abstraction import Entity, Position, PositionUnits, Space
from .placement.config import LayoutConfig
from .placement.engine import AdaptivePositioning, LayoutResult

__all__ = [
    "AdaptivePositioning",
    "LayoutConfig",
    "LayoutResult",
    "Entity",
    "Position",
    "PositionUnits",
    "Space",
    "EntityTypes",
    "get_entity_types",
    "GalaxyPlaceError",
    "SitemapValidationError",
    "ConfigError",
]
