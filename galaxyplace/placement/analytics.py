"""
Positioning Analytics

Advisory bookkeeping for the layout engine:
- a bounded history of layout runs with a simple performance score,
  used to recommend a strategy for a given entity count
- per-entity user interaction records, aggregated into hotspots that
  bias cluster placement and rebalancing

Nothing here is required for a correct layout. Callers treat every
failure in this module as non-fatal.
"""

import logging
import math
import time
from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, Dict, List, Optional, Tuple

from ..galaxy.abstraction import EntityId, Position

logger = logging.getLogger(__name__)


@dataclass
class AnalyticsRecord:
    """One recorded layout run."""
    timestamp: float
    strategy: str
    entity_count: int
    calculation_time: float  # ms
    collisions_resolved: int
    performance_score: float


@dataclass
class InteractionRecord:
    """One user interaction with an entity."""
    kind: str
    position: Position
    timestamp: float


@dataclass
class Hotspot:
    """Canvas region with elevated user interaction."""
    entity_id: EntityId
    position: Position
    interaction_count: int
    last_interaction: float


def calculate_performance_score(calculation_time: float, entity_count: int,
                                collisions_resolved: int) -> float:
    """
    Score a layout run.

    Rewards handling more entities and resolving more collisions,
    penalizes wall-clock time (ms). Never negative.
    """
    base_score = 1000.0
    time_penalty = calculation_time / 10
    entity_bonus = math.log(entity_count + 1) * 10
    collision_bonus = collisions_resolved * 5
    return max(0.0, base_score - time_penalty + entity_bonus + collision_bonus)


def _coerce_position(position: Any) -> Position:
    if isinstance(position, Position):
        return position.copy()
    if isinstance(position, dict):
        return Position(float(position["x"]), float(position["y"]))
    x, y = position
    return Position(float(x), float(y))


class PositioningAnalytics:
    """Bounded layout history and interaction hotspots."""

    def __init__(self, buffer_size: int = 1000, count_window: int = 10,
                 min_hotspot_interactions: int = 5):
        self.buffer_size = buffer_size
        self.count_window = count_window
        self.min_hotspot_interactions = min_hotspot_interactions
        self.records: Dict[Tuple[str, int], Deque[AnalyticsRecord]] = {}
        self.interactions: Dict[EntityId, Deque[InteractionRecord]] = {}
        self.total_calculations = 0

    def record_calculation(self, strategy: str, entity_count: int,
                           calculation_time: float,
                           collisions_resolved: int = 0) -> AnalyticsRecord:
        """Append a layout run to the (strategy, entity_count) history."""
        record = AnalyticsRecord(
            timestamp=time.time(),
            strategy=str(strategy),
            entity_count=int(entity_count),
            calculation_time=float(calculation_time),
            collisions_resolved=int(collisions_resolved),
            performance_score=calculate_performance_score(
                calculation_time, entity_count, collisions_resolved),
        )

        key = (record.strategy, record.entity_count)
        if key not in self.records:
            self.records[key] = deque(maxlen=self.buffer_size)
        self.records[key].append(record)
        self.total_calculations += 1
        return record

    def get_optimal_strategy(self, entity_count: int) -> Optional[str]:
        """
        Strategy with the best average score for similar entity counts.

        Only history keys within +/- count_window of entity_count count.
        Returns None when there is no such history.
        """
        best_strategy: Optional[str] = None
        best_score = -1.0

        for (strategy, count), records in self.records.items():
            if not records or abs(count - entity_count) > self.count_window:
                continue
            avg_score = sum(r.performance_score for r in records) / len(records)
            if avg_score > best_score:
                best_score = avg_score
                best_strategy = strategy

        return best_strategy

    def record_user_interaction(self, entity_id: EntityId, kind: str,
                                position: Any) -> bool:
        """
        Record an interaction. Malformed events are logged and dropped.

        Returns:
            True if the interaction was recorded
        """
        try:
            pos = _coerce_position(position)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Ignoring malformed interaction for %r: %s", entity_id, e)
            return False

        if entity_id not in self.interactions:
            self.interactions[entity_id] = deque(maxlen=self.buffer_size)
        self.interactions[entity_id].append(
            InteractionRecord(kind=str(kind), position=pos, timestamp=time.time())
        )
        return True

    def get_user_interaction_hotspots(self) -> List[Hotspot]:
        """Hotspots for entities with enough interactions, busiest first."""
        hotspots = []
        for entity_id, interactions in self.interactions.items():
            if len(interactions) <= self.min_hotspot_interactions:
                continue
            n = len(interactions)
            hotspots.append(Hotspot(
                entity_id=entity_id,
                position=Position(
                    sum(i.position.x for i in interactions) / n,
                    sum(i.position.y for i in interactions) / n,
                ),
                interaction_count=n,
                last_interaction=interactions[-1].timestamp,
            ))
        hotspots.sort(key=lambda h: -h.interaction_count)
        return hotspots

    def get_strategy_distribution(self) -> Dict[str, int]:
        """Number of history keys per strategy."""
        distribution: Dict[str, int] = {}
        for strategy, _ in self.records:
            distribution[strategy] = distribution.get(strategy, 0) + 1
        return distribution

    def get_average_performance(self) -> float:
        total_score = 0.0
        total_records = 0
        for records in self.records.values():
            total_score += sum(r.performance_score for r in records)
            total_records += len(records)
        return total_score / total_records if total_records else 0.0

    def get_stats(self) -> Dict[str, Any]:
        return {
            "total_records": sum(len(r) for r in self.records.values()),
            "total_calculations": self.total_calculations,
            "strategy_distribution": self.get_strategy_distribution(),
            "average_performance": self.get_average_performance(),
            "user_hotspots": len(self.get_user_interaction_hotspots()),
        }
