"""
Collision Resolver

Iterative overlap removal for positioned entities:

1. Detect overlapping pairs using the spatial hash grid (same or adjacent
   cells only). Two entities overlap when their center distance is below
   radius(A) + radius(B) + min_distance.
2. Sort overlaps so conflicts involving high-priority entities go first.
3. Push each pair apart along the line between their centers. The shift is
   split by the *other* entity's priority, so the lower-priority entity
   moves further. Both are clamped back into the canvas.
4. Repeat on the updated positions until no overlap remains or the
   iteration cap is hit. Hitting the cap is logged, never raised.
"""

import hashlib
import itertools
import logging
import math
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

from ..galaxy.abstraction import Entity, Position, Space
from .config import LayoutConfig
from .spatial_index import SpatialGrid

logger = logging.getLogger(__name__)

# Extra separation applied with each correction so a resolved pair does not
# sit exactly on the overlap boundary.
SEPARATION_BUFFER = 0.01


@dataclass
class Overlap:
    """An overlapping entity pair (indices into the entity list)."""
    index_a: int
    index_b: int
    overlap: float  # required separation minus current distance
    distance: float
    priority: float  # max priority of the pair


@dataclass
class CollisionResult:
    """Result of collision resolution."""
    entities: List[Entity] = field(default_factory=list)
    iterations_used: int = 0
    collisions_resolved: int = 0  # corrections applied
    final_overlaps: int = 0
    converged: bool = True


def _coincident_angle(a: Entity, b: Entity) -> float:
    """Deterministic separation direction for entities sharing a center."""
    h = hashlib.md5(f"{a.id}:{b.id}".encode()).hexdigest()
    return int(h[:8], 16) / 0xFFFFFFFF * 2 * math.pi


def required_distance(a: Entity, b: Entity, min_distance: float) -> float:
    """Smallest allowed center distance between two entities."""
    return (a.radius or 0.0) + (b.radius or 0.0) + min_distance


def priority_shares(priority_a: float, priority_b: float,
                    amount: float) -> Tuple[float, float]:
    """
    Split a separation between two entities by priority.

    Each entity moves in proportion to the other's priority, so the
    higher-priority entity moves less. Equal (or zero) priorities split evenly.
    """
    total = priority_a + priority_b
    if total <= 0:
        return (amount / 2, amount / 2)
    return (amount * priority_b / total, amount * priority_a / total)


class CollisionResolver:
    """Detects and resolves entity overlaps within a canvas."""

    def __init__(self, space: Space, config: Optional[LayoutConfig] = None,
                 grid: Optional[SpatialGrid] = None):
        """
        Args:
            space: Canvas bounds entities are clamped into
            config: Layout configuration (min_distance, iteration cap, grid size)
            grid: Spatial grid to reuse; rebuilt on every detection pass
        """
        self.space = space
        self.config = config or LayoutConfig()
        self.grid = grid

    def _grid_for(self, entities: Sequence[Entity]) -> SpatialGrid:
        # Cell size must cover the largest collision distance, otherwise two
        # overlapping entities could land in non-adjacent cells.
        max_radius = max((e.radius or 0.0) for e in entities)
        cell_size = max(self.config.spatial_grid_size,
                        2 * max_radius + self.config.min_distance + SEPARATION_BUFFER)
        if self.grid is None or self.grid.cell_size != cell_size:
            self.grid = SpatialGrid(cell_size)
        self.grid.build(entities)
        return self.grid

    def _candidate_pairs(self, entities: Sequence[Entity]) -> Iterable[Tuple[int, int]]:
        grid = self._grid_for(entities)
        if len(grid) == 0:
            return itertools.combinations(range(len(entities)), 2)
        return grid.candidate_pairs()

    def detect_overlaps(self, entities: Sequence[Entity]) -> List[Overlap]:
        """Find all overlapping pairs (each unordered pair at most once)."""
        if len(entities) <= 1:
            return []

        min_distance = self.config.min_distance
        overlaps = []
        for i, j in self._candidate_pairs(entities):
            a, b = entities[i], entities[j]
            distance = a.distance_to(b)
            required = required_distance(a, b, min_distance)
            if distance < required:
                overlaps.append(Overlap(
                    index_a=i,
                    index_b=j,
                    overlap=required - distance,
                    distance=distance,
                    priority=max(a.priority or 0.0, b.priority or 0.0),
                ))
        return overlaps

    def clamp(self, entity: Entity):
        """Clamp an entity into the canvas, accounting for its radius."""
        entity.position = self.space.clamp(entity.position, entity.radius or 0.0)

    def adjust_positions(self, entities: List[Entity], overlaps: Sequence[Overlap]) -> int:
        """
        Apply priority-weighted corrections for a batch of overlaps (in place).

        Overlap amounts are recomputed from current positions, since earlier
        corrections in the same batch may already have moved the pair.

        Returns:
            Number of corrections applied
        """
        applied = 0
        min_distance = self.config.min_distance

        for overlap in overlaps:
            a = entities[overlap.index_a]
            b = entities[overlap.index_b]

            distance = a.distance_to(b)
            amount = required_distance(a, b, min_distance) - distance
            if amount <= 0:
                continue

            if distance > 0:
                angle = math.atan2(b.position.y - a.position.y,
                                   b.position.x - a.position.x)
            else:
                angle = _coincident_angle(a, b)

            shift_a, shift_b = priority_shares(
                a.priority or 0.0, b.priority or 0.0, amount + SEPARATION_BUFFER)
            cos_a, sin_a = math.cos(angle), math.sin(angle)

            a.position = Position(a.position.x - cos_a * shift_a,
                                  a.position.y - sin_a * shift_a)
            b.position = Position(b.position.x + cos_a * shift_b,
                                  b.position.y + sin_a * shift_b)
            self.clamp(a)
            self.clamp(b)
            applied += 1

        return applied

    def resolve(self, entities: Sequence[Entity]) -> CollisionResult:
        """
        Iteratively resolve overlaps on a copy of the entities.

        Returns:
            CollisionResult with best-effort positions
        """
        working = [e.copy() for e in entities]
        result = CollisionResult(entities=working)
        max_iterations = self.config.max_collision_iterations

        overlaps = self.detect_overlaps(working)
        while overlaps and result.iterations_used < max_iterations:
            overlaps.sort(key=lambda o: -o.priority)
            result.collisions_resolved += self.adjust_positions(working, overlaps)
            result.iterations_used += 1
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("Collision iteration %d: overlaps=%d",
                             result.iterations_used, len(overlaps))
            overlaps = self.detect_overlaps(working)

        result.final_overlaps = len(overlaps)
        result.converged = not overlaps
        if overlaps:
            logger.warning(
                "Collision iteration cap (%d) reached with %d overlaps remaining",
                max_iterations, len(overlaps),
            )
        return result


def resolve_collisions(entities: Sequence[Entity], space: Space,
                       config: Optional[LayoutConfig] = None) -> CollisionResult:
    """Convenience wrapper around CollisionResolver."""
    return CollisionResolver(space, config).resolve(entities)
