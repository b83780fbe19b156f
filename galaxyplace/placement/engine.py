"""
Adaptive Positioning Engine

Orchestrates one layout build:

    density -> strategy -> layout -> collision resolution -> rebalance
    -> collision resolution -> report

Each call works on its own snapshot of the entities and its own
LayoutContext, so the engine can be shared between builds. The analytics
and predictive advisors only ever influence the result through optional
hints; any failure in them is logged and the density-derived choice wins.
"""

import logging
import math
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from ..entity_types import EntityTypes, get_entity_types
from ..galaxy.abstraction import Entity, EntityId, Position, PositionUnits, Space
from ..galaxy.hierarchy import HierarchyBuilder
from .analytics import Hotspot, PositioningAnalytics, calculate_performance_score
from .collision import CollisionResolver
from .config import LayoutConfig
from .context import LayoutContext
from .density import DensityRegime, analyze_entity_density
from .events import (
    LayoutEvents,
    PositioningCompletedEvent,
    PositioningErrorEvent,
    PredictedPositionEvent,
    StrategyRecommendedEvent,
)
from .geometry import bounds, calculate_center
from .orbital import OrbitalPlacer
from .predictive import PredictivePositioning
from .strategies import LayoutStrategy, StrategyRegistry

logger = logging.getLogger(__name__)

PREDICTION_CONFIDENCE = 0.8


@dataclass
class LayoutMetrics:
    """Per-run metrics reported to the rendering layer."""
    entity_count: int = 0
    calculation_time: float = 0.0  # ms
    collisions_resolved: int = 0
    performance_score: float = 0.0
    strategy_used: str = ""
    density: str = ""
    iterations_used: int = 0
    final_overlaps: int = 0
    converged: bool = True


@dataclass
class LayoutResult:
    """Finalized entities plus run metrics."""
    entities: List[Entity] = field(default_factory=list)
    metrics: LayoutMetrics = field(default_factory=LayoutMetrics)
    bounds: Tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0)
    units: PositionUnits = PositionUnits.PIXELS

    def by_id(self) -> Dict[EntityId, Entity]:
        return {e.id: e for e in self.entities}

    def to_dict(self) -> Dict[str, Any]:
        m = self.metrics
        return {
            "units": self.units.value,
            "entities": [e.to_dict() for e in self.entities],
            "metrics": {
                "entityCount": m.entity_count,
                "calculationTime": m.calculation_time,
                "collisionsResolved": m.collisions_resolved,
                "performanceScore": m.performance_score,
                "strategyUsed": m.strategy_used,
                "density": m.density,
                "iterationsUsed": m.iterations_used,
                "finalOverlaps": m.final_overlaps,
                "converged": m.converged,
            },
            "bounds": {
                "minX": self.bounds[0],
                "minY": self.bounds[1],
                "maxX": self.bounds[2],
                "maxY": self.bounds[3],
            },
        }


def _require_list(entities) -> None:
    if not isinstance(entities, (list, tuple)):
        raise TypeError(f"Entities must be a list, got {type(entities).__name__}")


class AdaptivePositioning:
    """
    Density-adaptive layout engine.

    Holds only long-lived collaborators (config, strategy registry,
    analytics, event channel); everything a build mutates lives in a
    per-call LayoutContext.
    """

    def __init__(
        self,
        config: Optional[LayoutConfig] = None,
        registry: Optional[StrategyRegistry] = None,
        analytics: Optional[PositioningAnalytics] = None,
        predictor: Optional[PredictivePositioning] = None,
        types: Optional[EntityTypes] = None,
        events: Optional[LayoutEvents] = None,
    ):
        self.config = config or LayoutConfig()
        self.config.validate()
        self.registry = registry or StrategyRegistry.default()
        self.analytics = analytics or PositioningAnalytics(
            buffer_size=self.config.analytics_buffer_size,
            count_window=self.config.analytics_count_window,
            min_hotspot_interactions=self.config.min_hotspot_interactions,
        )
        self.predictor = predictor or PredictivePositioning()
        self.types = types or get_entity_types()
        self.events = events or LayoutEvents()
        self.last_strategy: Optional[str] = None

    # ------------------------------------------------------------------
    # Strategy selection
    # ------------------------------------------------------------------

    def analyze_entity_density(self, entities: Sequence[Entity],
                               space: Space) -> DensityRegime:
        return analyze_entity_density(entities, space, self.config)

    def select_positioning_strategy(self, density: DensityRegime,
                                    entity_count: int) -> Tuple[str, LayoutStrategy]:
        """
        Pick the strategy for a density regime.

        Analytics may override the density-derived choice; errors there
        are logged and ignored.

        Returns:
            (strategy label, strategy)
        """
        label = density.value
        if self.config.use_analytics_override:
            try:
                recommended = self.analytics.get_optimal_strategy(entity_count)
            except Exception as e:
                logger.warning("Strategy analytics failed, using %s: %s", label, e)
                recommended = None

            if recommended and recommended != label and recommended in self.registry:
                logger.info("Analytics recommends %s instead of %s", recommended, label)
                self.events.emit(StrategyRecommendedEvent(
                    density_strategy=label,
                    recommended_strategy=recommended,
                    entity_count=entity_count,
                ))
                label = recommended

        self.last_strategy = label
        return label, self.registry.get(label)

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def _safe_hotspots(self) -> List[Hotspot]:
        try:
            return self.analytics.get_user_interaction_hotspots()
        except Exception as e:
            logger.warning("Could not read interaction hotspots: %s", e)
            return []

    def _snapshot(self, entities: Sequence[Entity], space: Space,
                  units: PositionUnits) -> List[Entity]:
        snapshot = []
        for entity in entities:
            copy = entity.copy()
            if units == PositionUnits.PERCENT:
                copy.position = space.to_pixels(copy.position)
            snapshot.append(copy)
        return snapshot

    def _clamp_all(self, entities: Iterable[Entity], space: Space):
        for entity in entities:
            entity.position = space.clamp(entity.position, entity.radius or 0.0)

    def calculate_optimal_distribution(
        self,
        entities: Sequence[Entity],
        space: Space,
        strategy: Optional[Union[str, DensityRegime, LayoutStrategy]] = None,
        units: PositionUnits = PositionUnits.PIXELS,
    ) -> LayoutResult:
        """
        Run the full layout pipeline on a snapshot of the entities.

        Args:
            entities: Entities to lay out (not mutated)
            space: Canvas size in pixels
            strategy: Optional strategy (or density label) forcing the layout
            units: Units of the input positions; output uses the same units

        Returns:
            LayoutResult with clamped, collision-resolved positions

        Raises:
            TypeError: if entities is not a list or tuple
        """
        _require_list(entities)
        start = time.perf_counter()

        snapshot = self._snapshot(entities, space, units)
        context = LayoutContext(space=space, entities=snapshot, config=self.config,
                                hotspots=self._safe_hotspots())

        try:
            density = self.analyze_entity_density(snapshot, space)
            if strategy is None:
                label, chosen = self.select_positioning_strategy(density, len(snapshot))
            elif isinstance(strategy, LayoutStrategy):
                label, chosen = strategy.name, strategy
            else:
                label = strategy.value if isinstance(strategy, DensityRegime) else str(strategy)
                chosen = self.registry.get(label)

            logger.debug("Applying %s strategy (%s) to %d entities",
                         label, density.value, len(snapshot))

            positioned = chosen.compute_positions(snapshot, space, context)
            self._clamp_all(positioned, space)

            resolver = CollisionResolver(space, self.config, grid=context.grid)
            collision = resolver.resolve(positioned)

            finalized = collision.entities
            if self.config.rebalance:
                balanced = self.balance_distribution(finalized, space, context.hotspots)
                # Shifting toward the desired center can pile entities
                # against a wall; settle them again after the move.
                settled = resolver.resolve(balanced)
                settled.collisions_resolved += collision.collisions_resolved
                settled.iterations_used += collision.iterations_used
                collision = settled
                finalized = collision.entities
        except Exception as e:
            self.events.emit(PositioningErrorEvent(error=str(e), entity_count=len(snapshot)))
            raise

        calculation_time = (time.perf_counter() - start) * 1000.0
        score = calculate_performance_score(
            calculation_time, len(snapshot), collision.collisions_resolved)

        try:
            self.analytics.record_calculation(
                label, len(snapshot), calculation_time, collision.collisions_resolved)
        except Exception as e:
            logger.warning("Failed to record layout analytics: %s", e)

        metrics = LayoutMetrics(
            entity_count=len(snapshot),
            calculation_time=calculation_time,
            collisions_resolved=collision.collisions_resolved,
            performance_score=score,
            strategy_used=label,
            density=density.value,
            iterations_used=collision.iterations_used,
            final_overlaps=collision.final_overlaps,
            converged=collision.converged,
        )
        self.events.emit(PositioningCompletedEvent(
            strategy=label,
            entity_count=metrics.entity_count,
            calculation_time=calculation_time,
            collisions_resolved=metrics.collisions_resolved,
            performance_score=score,
        ))

        layout_bounds = bounds([e.position for e in finalized])
        if units == PositionUnits.PERCENT:
            for entity in finalized:
                entity.position = space.to_percent(entity.position)

        logger.info("Layout done: %d entities, strategy=%s, %.1fms, %d corrections, %d overlaps left",
                    metrics.entity_count, label, calculation_time,
                    metrics.collisions_resolved, metrics.final_overlaps)
        return LayoutResult(entities=finalized, metrics=metrics,
                            bounds=layout_bounds, units=units)

    def recalculate_positions(self, entities: Sequence[Entity], space: Space,
                              units: PositionUnits = PositionUnits.PIXELS) -> LayoutResult:
        """Re-run the density-selected pipeline for an updated entity set."""
        return self.calculate_optimal_distribution(entities, space, units=units)

    def layout_hierarchy(
        self,
        records: Iterable[Union[Mapping[str, Any], Entity]],
        space: Space,
        strategy: Optional[Union[str, DensityRegime, LayoutStrategy]] = None,
    ) -> LayoutResult:
        """
        Lay out a page hierarchy.

        Records are resolved into a hierarchy (missing parents become
        roots), placed as roots plus orbits, then run through the adaptive
        pipeline.

        Only the LOW_DENSITY strategy keeps the orbital placement. Above the
        low-density threshold the clustered and hex-packing strategies
        re-place every entity, so parent/child geometry is not preserved.
        Pass strategy=DensityRegime.LOW to keep the orbits at any size.
        """
        hierarchy = HierarchyBuilder(self.types).build(records)
        placed = OrbitalPlacer(self.config, self.types).place(hierarchy, space)
        return self.calculate_optimal_distribution(placed, space, strategy=strategy)

    def balance_distribution(self, entities: Sequence[Entity], space: Space,
                             hotspots: Optional[Sequence[Hotspot]] = None) -> List[Entity]:
        """
        Shift all entities so their centroid lands on the desired center.

        The desired center is the canvas center, or the log-weighted
        centroid of interaction hotspots when there are any. Results are
        clamped into the canvas.
        """
        if len(entities) <= 1:
            return [e.copy() for e in entities]

        current = calculate_center([e.position for e in entities])
        desired = space.center

        if hotspots:
            total_x = total_y = total_weight = 0.0
            for hotspot in hotspots:
                weight = math.log(hotspot.interaction_count + 1)
                total_x += hotspot.position.x * weight
                total_y += hotspot.position.y * weight
                total_weight += weight
            if total_weight > 0:
                desired = Position(total_x / total_weight, total_y / total_weight)

        offset_x = desired.x - current.x
        offset_y = desired.y - current.y

        balanced = []
        for entity in entities:
            moved = entity.copy()
            moved.position = space.clamp(
                Position(entity.position.x + offset_x, entity.position.y + offset_y),
                entity.radius or 0.0,
            )
            balanced.append(moved)
        return balanced

    # ------------------------------------------------------------------
    # Advisory
    # ------------------------------------------------------------------

    def record_user_interaction(self, entity_id: EntityId, kind: str, position: Any) -> bool:
        """Forward an interaction to analytics; never raises."""
        try:
            return self.analytics.record_user_interaction(entity_id, kind, position)
        except Exception as e:
            logger.warning("Dropping interaction for %r: %s", entity_id, e)
            return False

    def handle_predictive_request(self, current: Position,
                                  history: Sequence[Any]) -> Optional[PredictedPositionEvent]:
        """
        Predict the next interaction position and emit it as an event.

        Returns:
            The emitted event, or None when no pattern was recognized
        """
        try:
            analysis = self.predictor.analyze_interaction_pattern(history)
            pattern = analysis.best
            predicted = self.predictor.predict_next_position(pattern, current)
        except Exception as e:
            logger.warning("Predictive request failed: %s", e)
            return None

        if predicted is None:
            return None

        event = PredictedPositionEvent(
            predicted_position=predicted,
            pattern=pattern.type,
            confidence=PREDICTION_CONFIDENCE,
        )
        self.events.emit(event)
        return event

    def get_stats(self) -> Dict[str, Any]:
        stats = dict(self.analytics.get_stats())
        stats["current_strategy"] = self.last_strategy
        stats["strategies"] = self.registry.labels()
        return stats
