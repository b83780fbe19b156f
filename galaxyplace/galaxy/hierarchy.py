"""
Hierarchy Builder

Turns flat page records (as produced by the site scanner / sitemap.json)
into Entity objects with resolved parent/child links and hierarchy depth.

Broken links never fail a build: entities whose parent is missing, or whose
parent chain loops back on itself, are promoted to roots with a warning.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from ..entity_types import EntityTypes, get_entity_types
from ..errors import SitemapValidationError
from .abstraction import Entity, EntityId, Importance, Position

logger = logging.getLogger(__name__)

DEFAULT_PAGE_TYPE = "planet"
MIN_SANE_ORBIT_RADIUS = 10.0
MAX_SANE_ORBIT_RADIUS = 500.0


def _is_missing(value: Any) -> bool:
    """None and empty strings count as absent; 0 is a valid id."""
    return value is None or value == ""


def _record_key(record: Mapping[str, Any]) -> Any:
    level = record.get("level")
    return record.get("id") if _is_missing(level) else level


def validate_sitemap(sitemap: Any) -> List[Dict[str, Any]]:
    """
    Validate a sitemap document and return its page records.

    Pages without a `level` are rejected; pages without a `type` default to
    planet with a warning.

    Raises:
        SitemapValidationError: if the document or any page is malformed
    """
    if not sitemap or not isinstance(sitemap, Mapping):
        raise SitemapValidationError("Sitemap must be a non-empty object")

    pages = sitemap.get("pages")
    if not isinstance(pages, list):
        raise SitemapValidationError("Sitemap 'pages' must be a list")

    for index, page in enumerate(pages):
        if not isinstance(page, Mapping):
            raise SitemapValidationError(f"Page #{index} is not an object")
        if _is_missing(page.get("level")) and _is_missing(page.get("id")):
            raise SitemapValidationError(f"Page #{index} missing level field")
        if not page.get("type"):
            logger.warning("Page %s missing type, using %s",
                           _record_key(page), DEFAULT_PAGE_TYPE)

    return [dict(page) for page in pages]


def _parse_float(record: Mapping[str, Any], *keys: str) -> Optional[float]:
    for key in keys:
        value = record.get(key)
        if value is None or value == "":
            continue
        try:
            return float(value)
        except (TypeError, ValueError):
            raise SitemapValidationError(
                f"Invalid {key} {value!r} for page {_record_key(record)}"
            ) from None
    return None


def entity_from_record(record: Mapping[str, Any],
                       types: Optional[EntityTypes] = None) -> Entity:
    """
    Build an Entity from a page record.

    Accepts both sitemap spelling (`orbit-radius`) and snake case
    (`orbit_radius`). Missing visual fields are filled from the type table.
    """
    types = types or get_entity_types()

    entity_id = record.get("level") if _is_missing(record.get("id")) else record.get("id")
    if _is_missing(entity_id):
        raise SitemapValidationError("Page record has neither id nor level")

    entity_type = record.get("type") or DEFAULT_PAGE_TYPE
    if not types.is_known(entity_type):
        logger.warning("Unknown entity type %r for %s, using defaults", entity_type, entity_id)

    metadata = dict(record.get("metadata") or {})
    position = record.get("position")

    orbit_radius = _parse_float(record, "orbit-radius", "orbit_radius", "orbitRadius")
    if orbit_radius is not None and not (
            MIN_SANE_ORBIT_RADIUS <= orbit_radius <= MAX_SANE_ORBIT_RADIUS):
        logger.warning("Unusual orbit radius %.1f for %s", orbit_radius, entity_id)

    entity = Entity(
        id=entity_id,
        type=entity_type,
        parent=None if _is_missing(record.get("parent")) else record.get("parent"),
        position=Position(float(position["x"]), float(position["y"])) if position else Position(),
        importance=Importance.parse(record.get("importance") or "medium"),
        content_priority=record.get("content-priority", record.get("content_priority")),
        predictive_score=_parse_float(record, "predictive-score", "predictive_score")
        or _parse_float(metadata, "predictiveScore"),
        orbit_radius=orbit_radius,
        orbit_angle=_parse_float(record, "orbit-angle", "orbit_angle", "orbitAngle"),
        size_modifier=_parse_float(record, "size-modifier", "size_modifier"),
        title=record.get("title") or str(entity_id),
        url=record.get("url") or metadata.get("url"),
        color=record.get("color") or types.color(entity_type),
        icon=record.get("icon") or types.icon(entity_type),
        tags=list(metadata.get("tags") or record.get("tags") or []),
        metadata=metadata,
        radius=0.0,
        priority=0.0,
    )
    entity.resolve_type_properties(types)
    return entity


@dataclass
class Hierarchy:
    """Entities keyed by id, plus the ordered root ids."""
    entities: Dict[EntityId, Entity] = field(default_factory=dict)
    roots: List[EntityId] = field(default_factory=list)
    promoted: List[EntityId] = field(default_factory=list)  # ids forced to root

    def children_of(self, entity_id: EntityId) -> List[Entity]:
        return [self.entities[c] for c in self.entities[entity_id].children]

    def flatten(self) -> List[Entity]:
        """Depth-first, roots in input order; assigns metadata['depth']."""
        ordered: List[Entity] = []
        stack = [(root_id, 0) for root_id in reversed(self.roots)]
        while stack:
            entity_id, depth = stack.pop()
            entity = self.entities[entity_id]
            entity.metadata["depth"] = depth
            ordered.append(entity)
            for child_id in reversed(entity.children):
                stack.append((child_id, depth + 1))
        return ordered


class HierarchyBuilder:
    """Resolves parent links for a batch of page records."""

    def __init__(self, types: Optional[EntityTypes] = None):
        self.types = types or get_entity_types()

    def build(self, records: Iterable[Union[Mapping[str, Any], Entity]]) -> Hierarchy:
        """
        Build a hierarchy from records or pre-built entities.

        Duplicate ids keep the first occurrence.
        """
        hierarchy = Hierarchy()

        for record in records:
            if isinstance(record, Entity):
                entity = record.copy()
                entity.children = []
            else:
                entity = entity_from_record(record, self.types)
            if entity.id in hierarchy.entities:
                logger.warning("Duplicate entity id %r ignored", entity.id)
                continue
            hierarchy.entities[entity.id] = entity

        # Missing parents become roots
        for entity in hierarchy.entities.values():
            if entity.parent is not None and entity.parent not in hierarchy.entities:
                logger.warning("Parent %r not found for %r, treating as root",
                               entity.parent, entity.id)
                entity.parent = None
                hierarchy.promoted.append(entity.id)

        self._break_cycles(hierarchy)

        for entity in hierarchy.entities.values():
            if entity.parent is None:
                hierarchy.roots.append(entity.id)
            else:
                hierarchy.entities[entity.parent].children.append(entity.id)

        logger.debug("Built hierarchy: %d roots, %d entities",
                     len(hierarchy.roots), len(hierarchy.entities))
        return hierarchy

    def _break_cycles(self, hierarchy: Hierarchy):
        """Promote one entity per parent cycle to root."""
        entities = hierarchy.entities
        for entity in entities.values():
            seen = set()
            current = entity
            while current.parent is not None:
                if current.id in seen:
                    logger.warning("Circular parent chain at %r, treating as root", current.id)
                    current.parent = None
                    hierarchy.promoted.append(current.id)
                    break
                seen.add(current.id)
                current = entities[current.parent]


def build_hierarchy(records: Iterable[Union[Mapping[str, Any], Entity]],
                    types: Optional[EntityTypes] = None) -> Hierarchy:
    """Convenience wrapper around HierarchyBuilder."""
    return HierarchyBuilder(types).build(records)
