"""Galaxy entity model and hierarchy construction."""

from .abstraction import Entity, EntityId, Importance, Position, PositionUnits, Space
from .hierarchy import (
    Hierarchy,
    HierarchyBuilder,
    build_hierarchy,
    entity_from_record,
    validate_sitemap,
)

__all__ = [
    "Entity",
    "EntityId",
    "Importance",
    "Position",
    "PositionUnits",
    "Space",
    "Hierarchy",
    "HierarchyBuilder",
    "build_hierarchy",
    "entity_from_record",
    "validate_sitemap",
]
