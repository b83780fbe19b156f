"""Geometry helpers shared by the layout strategies and the resolver."""

import math
from typing import Iterable, List, Sequence, Tuple

from ..galaxy.abstraction import Position


def calculate_center(positions: Sequence[Position]) -> Position:
    """Center of mass of a set of positions (origin if empty)."""
    if not positions:
        return Position(0.0, 0.0)
    n = len(positions)
    return Position(
        sum(p.x for p in positions) / n,
        sum(p.y for p in positions) / n,
    )


def calculate_distance(p1: Position, p2: Position) -> float:
    """Euclidean distance between two positions."""
    return math.hypot(p1.x - p2.x, p1.y - p2.y)


def calculate_variance(values: Iterable[float]) -> float:
    """Population variance; 0.0 for an empty input."""
    values = list(values)
    if not values:
        return 0.0
    mean = sum(values) / len(values)
    return sum((v - mean) ** 2 for v in values) / len(values)


def polar_offset(origin: Position, radius: float, angle_degrees: float) -> Position:
    """Point at `radius` from `origin` along `angle_degrees`."""
    rad = math.radians(angle_degrees)
    return Position(origin.x + math.cos(rad) * radius,
                    origin.y + math.sin(rad) * radius)


def lerp(a: Position, b: Position, t: float) -> Position:
    """Linear interpolation from a (t=0) to b (t=1)."""
    return Position(a.x + (b.x - a.x) * t, a.y + (b.y - a.y) * t)


def bounds(positions: Sequence[Position]) -> Tuple[float, float, float, float]:
    """(min_x, min_y, max_x, max_y) of the positions; zeros if empty."""
    if not positions:
        return (0.0, 0.0, 0.0, 0.0)
    xs: List[float] = [p.x for p in positions]
    ys: List[float] = [p.y for p in positions]
    return (min(xs), min(ys), max(xs), max(ys))
