"""
Orbital Placement

Hierarchy-aware initial placement:
- Roots are spread on a ring around the canvas center; large root sets use
  a golden-angle spiral instead, which avoids visible ring artifacts.
- Children orbit their parent at their orbit radius, evenly split among
  siblings unless an explicit orbit angle is given.
"""

import logging
import math
from typing import List, Optional, Sequence

from ..entity_types import EntityTypes, get_entity_types
from ..galaxy.abstraction import Entity, Space
from ..galaxy.hierarchy import Hierarchy
from .config import LayoutConfig
from .geometry import polar_offset

logger = logging.getLogger(__name__)


class OrbitalPlacer:
    """Places a hierarchy as roots plus orbiting children."""

    def __init__(self, config: Optional[LayoutConfig] = None,
                 types: Optional[EntityTypes] = None):
        self.config = config or LayoutConfig()
        self.types = types or get_entity_types()

    def place_roots(self, roots: Sequence[Entity], space: Space):
        """Distribute root entities around the canvas center (in place)."""
        count = len(roots)
        center = space.center
        use_spiral = count > self.config.spiral_threshold

        for index, entity in enumerate(roots):
            base_radius = self.types.orbit_radius(entity.type)
            if use_spiral:
                angle = index * self.config.golden_angle
                radius = self.config.spiral_scale * math.sqrt(index) * base_radius
            else:
                angle = 360.0 / count * index
                radius = self.config.root_ring_factor * base_radius
            entity.position = polar_offset(center, radius, angle)

        logger.debug("Placed %d roots using %s", count, "spiral" if use_spiral else "ring")

    def place_children(self, parent: Entity, children: Sequence[Entity]):
        """Put children on their orbits around the parent (in place)."""
        sibling_count = len(children)
        for index, child in enumerate(children):
            if child.orbit_radius is None:
                child.orbit_radius = self.types.orbit_radius(child.type)
            if child.orbit_angle is None:
                child.orbit_angle = 360.0 / sibling_count * index
            child.position = polar_offset(parent.position, child.orbit_radius, child.orbit_angle)

    def place(self, hierarchy: Hierarchy, space: Space) -> List[Entity]:
        """
        Place every entity of a hierarchy.

        Returns:
            Flattened entity list (depth-first, roots first) with positions
        """
        roots = [hierarchy.entities[r] for r in hierarchy.roots]
        self.place_roots(roots, space)

        max_depth = self.config.max_recursion_depth
        stack = [(root, 0) for root in reversed(roots)]
        while stack:
            parent, depth = stack.pop()
            children = hierarchy.children_of(parent.id)
            if not children:
                continue
            if depth + 1 > max_depth:
                logger.warning("Max hierarchy depth %d reached below %r; "
                               "stacking %d descendants on it",
                               max_depth, parent.id, len(children))
                for child in children:
                    child.position = parent.position.copy()
                    stack.append((child, depth + 1))
                continue
            self.place_children(parent, children)
            for child in reversed(children):
                stack.append((child, depth + 1))

        return hierarchy.flatten()
