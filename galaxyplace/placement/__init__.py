"""Adaptive layout engine: density strategies, orbital placement and collision resolution."""

from .analytics import Hotspot, PositioningAnalytics, calculate_performance_score
from .collision import CollisionResolver, CollisionResult, Overlap, resolve_collisions
from .config import LayoutConfig
from .context import LayoutContext
from .density import DensityRegime, analyze_entity_density, calculate_distribution_score
from .engine import AdaptivePositioning, LayoutMetrics, LayoutResult
from .events import (
    LayoutEvent,
    LayoutEvents,
    PositioningCompletedEvent,
    PositioningErrorEvent,
    PredictedPositionEvent,
    StrategyRecommendedEvent,
)
from .orbital import OrbitalPlacer
from .predictive import MovementPattern, PatternAnalysis, PredictivePositioning
from .spatial_index import SpatialGrid
from .strategies import (
    ClusteredStrategy,
    HexPackingStrategy,
    LayoutStrategy,
    SimpleStrategy,
    StrategyRegistry,
)

__all__ = [
    "AdaptivePositioning",
    "LayoutMetrics",
    "LayoutResult",
    "LayoutConfig",
    "LayoutContext",
    "DensityRegime",
    "analyze_entity_density",
    "calculate_distribution_score",
    "LayoutStrategy",
    "SimpleStrategy",
    "ClusteredStrategy",
    "HexPackingStrategy",
    "StrategyRegistry",
    "OrbitalPlacer",
    "SpatialGrid",
    "CollisionResolver",
    "CollisionResult",
    "Overlap",
    "resolve_collisions",
    "PositioningAnalytics",
    "Hotspot",
    "calculate_performance_score",
    "PredictivePositioning",
    "MovementPattern",
    "PatternAnalysis",
    "LayoutEvent",
    "LayoutEvents",
    "PositioningCompletedEvent",
    "PositioningErrorEvent",
    "PredictedPositionEvent",
    "StrategyRecommendedEvent",
]
