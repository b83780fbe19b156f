"""
Predictive Positioning

Looks at a short history of interaction positions, recognizes simple
movement patterns and predicts where the user goes next:

- linear: consecutive steps share a heading
- circular: points keep a constant distance from their centroid
- clustered: points fall into two groups (2-means)

Advisory only. The k-means uses the first k points as initial centroids and
a fixed iteration cap, which is fine for hints but not for anything that
must be stable.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from ..galaxy.abstraction import Position
from .geometry import calculate_center, calculate_distance, calculate_variance

logger = logging.getLogger(__name__)


@dataclass
class Cluster:
    center: Position
    size: int


@dataclass
class MovementPattern:
    """A recognized interaction pattern."""
    type: str  # "linear", "circular", "clustered"
    direction: Optional[float] = None  # radians, linear
    center: Optional[Position] = None  # circular
    radius: Optional[float] = None  # circular
    clusters: List[Cluster] = field(default_factory=list)  # clustered


@dataclass
class PatternAnalysis:
    linear: Optional[MovementPattern] = None
    circular: Optional[MovementPattern] = None
    clustered: Optional[MovementPattern] = None

    @property
    def best(self) -> Optional[MovementPattern]:
        """Most specific pattern found (linear, then circular, then clustered)."""
        return self.linear or self.circular or self.clustered


def _positions(history: Sequence[Any]) -> List[Position]:
    """Accept Positions, {x, y} dicts or interaction records with .position."""
    result = []
    for item in history:
        item = getattr(item, "position", item)
        if isinstance(item, dict) and "position" in item:
            item = item["position"]
        if isinstance(item, Position):
            result.append(item)
        elif isinstance(item, dict):
            result.append(Position(float(item["x"]), float(item["y"])))
        else:
            x, y = item
            result.append(Position(float(x), float(y)))
    return result


class PredictivePositioning:
    """Pattern detector over interaction position histories."""

    linear_variance_threshold = 0.1
    circular_variance_threshold = 50.0
    linear_step = 50.0
    circular_step_degrees = 30.0
    kmeans_iterations = 10
    kmeans_tolerance = 1.0

    def analyze_interaction_pattern(self, history: Sequence[Any]) -> PatternAnalysis:
        positions = _positions(history)
        return PatternAnalysis(
            linear=self.detect_linear_pattern(positions),
            circular=self.detect_circular_pattern(positions),
            clustered=self.detect_clustered_pattern(positions),
        )

    def detect_linear_pattern(self, positions: Sequence[Position]) -> Optional[MovementPattern]:
        if len(positions) < 3:
            return None
        angles = [
            math.atan2(positions[i].y - positions[i - 1].y,
                       positions[i].x - positions[i - 1].x)
            for i in range(1, len(positions))
        ]
        # Headings are compared as wrapped offsets from the latest one, so
        # motion near +-pi does not read as a direction flip.
        reference = angles[-1]
        offsets = [math.remainder(a - reference, 2 * math.pi) for a in angles]
        if calculate_variance(offsets) < self.linear_variance_threshold:
            return MovementPattern(type="linear", direction=angles[-1])
        return None

    def detect_circular_pattern(self, positions: Sequence[Position]) -> Optional[MovementPattern]:
        if len(positions) < 4:
            return None
        center = calculate_center(positions)
        distances = [calculate_distance(p, center) for p in positions]
        if calculate_variance(distances) < self.circular_variance_threshold:
            return MovementPattern(type="circular", center=center, radius=distances[0])
        return None

    def detect_clustered_pattern(self, positions: Sequence[Position]) -> Optional[MovementPattern]:
        clusters = self.perform_clustering(positions, 2)
        if len(clusters) > 1:
            return MovementPattern(
                type="clustered",
                clusters=[Cluster(center=calculate_center(c), size=len(c)) for c in clusters],
            )
        return None

    def perform_clustering(self, positions: Sequence[Position], k: int) -> List[List[Position]]:
        """Plain k-means; empty clusters are dropped from the result."""
        if len(positions) <= k:
            return [list(positions)]

        centroids = [p.copy() for p in positions[:k]]
        clusters: List[List[Position]] = [[] for _ in range(k)]

        for _ in range(self.kmeans_iterations):
            clusters = [[] for _ in range(k)]
            for position in positions:
                nearest = min(range(k), key=lambda i: calculate_distance(position, centroids[i]))
                clusters[nearest].append(position)

            changed = False
            for i, cluster in enumerate(clusters):
                if not cluster:
                    continue
                new_centroid = calculate_center(cluster)
                if calculate_distance(centroids[i], new_centroid) > self.kmeans_tolerance:
                    changed = True
                centroids[i] = new_centroid
            if not changed:
                break

        return [c for c in clusters if c]

    def predict_next_position(self, pattern: Optional[MovementPattern],
                              current: Position) -> Optional[Position]:
        if pattern is None:
            return None

        if pattern.type == "linear":
            return Position(current.x + math.cos(pattern.direction) * self.linear_step,
                            current.y + math.sin(pattern.direction) * self.linear_step)

        if pattern.type == "circular":
            angle = math.atan2(current.y - pattern.center.y, current.x - pattern.center.x)
            angle += math.radians(self.circular_step_degrees)
            return Position(pattern.center.x + math.cos(angle) * pattern.radius,
                            pattern.center.y + math.sin(angle) * pattern.radius)

        if pattern.type == "clustered":
            current_cluster = next(
                (c for c in pattern.clusters
                 if calculate_distance(current, c.center) < c.size * 10),
                None,
            )
            if current_cluster is None:
                return None
            next_cluster = next((c for c in pattern.clusters if c is not current_cluster), None)
            return next_cluster.center.copy() if next_cluster else None

        logger.debug("Unknown pattern type %r", pattern.type)
        return None
