"""
Layout Strategies

Three interchangeable placement algorithms, one per density regime:

- SimpleStrategy (LOW): keeps the current layout and nudges each entity
  by a small priority-scaled jitter.
- ClusteredStrategy (MEDIUM): groups entities by priority into small
  clusters arranged on a ring (or on user interaction hotspots).
- HexPackingStrategy (HIGH): packs entities on a hexagonal grid and pulls
  high-priority entities toward the canvas center.

Strategies return copies; the input entities are never mutated.
"""

import logging
import math
from typing import Dict, List, Optional, Sequence

from ..galaxy.abstraction import Entity, Position, Space
from .context import LayoutContext
from .density import DensityRegime
from .geometry import lerp, polar_offset

logger = logging.getLogger(__name__)


def _by_priority(entities: Sequence[Entity]) -> List[Entity]:
    """Copies sorted by descending priority (stable for ties)."""
    return sorted((e.copy() for e in entities), key=lambda e: -(e.priority or 0.0))


class LayoutStrategy:
    """Base class for layout strategies."""

    name = "base"

    def compute_positions(self, entities: Sequence[Entity], space: Space,
                          context: Optional[LayoutContext] = None) -> List[Entity]:
        """
        Compute positions for all entities.

        Args:
            entities: Entities to place (not mutated)
            space: Canvas size
            context: Build context providing RNG, config and hotspots

        Returns:
            New entity list with positions set
        """
        raise NotImplementedError

    @staticmethod
    def _context(space: Space, context: Optional[LayoutContext]) -> LayoutContext:
        return context if context is not None else LayoutContext(space=space)


class SimpleStrategy(LayoutStrategy):
    """Fine adjustment of an already acceptable layout."""

    name = "simple"

    def compute_positions(self, entities, space, context=None):
        context = self._context(space, context)
        config = context.config
        result = []
        for entity in entities:
            placed = entity.copy()
            variation = config.jitter_base + (entity.priority or 0.0) * config.jitter_per_priority
            placed.position = Position(
                entity.position.x + context.rng.uniform(-variation / 2, variation / 2),
                entity.position.y + context.rng.uniform(-variation / 2, variation / 2),
            )
            result.append(placed)
        return result


class ClusteredStrategy(LayoutStrategy):
    """Priority-aware clustering for medium-density galaxies."""

    name = "clustered"

    def create_clusters(self, entities: Sequence[Entity],
                        context: LayoutContext) -> List[List[Entity]]:
        """
        Greedily bucket priority-sorted entities into clusters.

        Clusters close at max_cluster_size, or early with a small random
        probability so cluster sizes are not uniform.
        """
        config = context.config
        clusters: List[List[Entity]] = []
        current: List[Entity] = []

        for entity in _by_priority(entities):
            current.append(entity)
            if (len(current) >= config.max_cluster_size or
                    context.rng.random() < config.cluster_split_probability):
                clusters.append(current)
                current = []

        if current:
            clusters.append(current)
        return clusters

    def compute_positions(self, entities, space, context=None):
        context = self._context(space, context)
        config = context.config
        clusters = self.create_clusters(entities, context)
        hotspot_positions = [h.position for h in context.hotspots]
        center = space.center

        result = []
        for index, cluster in enumerate(clusters):
            if index < len(hotspot_positions):
                cluster_center = hotspot_positions[index].copy()
            else:
                angle = index / len(clusters) * 360.0
                cluster_center = polar_offset(center, config.cluster_radius, angle)

            for member_index, entity in enumerate(cluster):
                angle = member_index / len(cluster) * 360.0
                distance = config.entity_spacing + member_index * config.cluster_ring_step
                entity.position = polar_offset(cluster_center, distance, angle)
                result.append(entity)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Clustered layout: %d clusters (%d on hotspots)",
                         len(clusters), min(len(clusters), len(hotspot_positions)))
        return result


class HexPackingStrategy(LayoutStrategy):
    """Hexagonal packing with priority-weighted center bias."""

    name = "hex_packing"

    def compute_positions(self, entities, space, context=None):
        context = self._context(space, context)
        config = context.config
        ordered = _by_priority(entities)
        if not ordered:
            return []

        radius = config.hex_radius
        horizontal_spacing = radius * 2
        vertical_spacing = radius * math.sqrt(3)
        items_per_row = max(1, int(math.floor(math.sqrt(len(ordered)))))
        center = space.center

        for index, entity in enumerate(ordered):
            row = index // items_per_row
            col = index % items_per_row

            grid = Position(
                center.x + (col - items_per_row / 2) * horizontal_spacing,
                center.y + (row - items_per_row / 2) * vertical_spacing
                + (0.0 if col % 2 == 0 else vertical_spacing / 2),
            )

            # 0 = pulled fully to center, 1 = stays on the grid
            center_bias = max(0.0, 1 - (entity.priority or 0.0) / config.center_bias_priority_scale)
            entity.position = space.clamp(lerp(grid, center, 1 - center_bias), radius)

        return ordered


class StrategyRegistry:
    """Maps density regimes to layout strategies; swappable at runtime."""

    def __init__(self, strategies: Optional[Dict[str, LayoutStrategy]] = None):
        self._strategies: Dict[str, LayoutStrategy] = {}
        for label, strategy in (strategies or {}).items():
            self.register(label, strategy)

    @classmethod
    def default(cls) -> "StrategyRegistry":
        return cls({
            DensityRegime.LOW.value: SimpleStrategy(),
            DensityRegime.MEDIUM.value: ClusteredStrategy(),
            DensityRegime.HIGH.value: HexPackingStrategy(),
        })

    def register(self, label, strategy: LayoutStrategy):
        """Register (or replace) the strategy for a density label."""
        self._strategies[_label(label)] = strategy

    def get(self, label) -> LayoutStrategy:
        """Strategy for a label, falling back to the low-density strategy."""
        strategy = self._strategies.get(_label(label))
        if strategy is None:
            logger.warning("No strategy registered for %s, using %s",
                           _label(label), DensityRegime.LOW.value)
            strategy = self._strategies.get(DensityRegime.LOW.value) or SimpleStrategy()
        return strategy

    def labels(self) -> List[str]:
        return list(self._strategies)

    def __contains__(self, label) -> bool:
        return _label(label) in self._strategies


def _label(label) -> str:
    return label.value if isinstance(label, DensityRegime) else str(label)
