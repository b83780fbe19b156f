"""
Density Classifier

Buckets an entity set into a density regime that decides which layout
strategy runs. The raw count is discounted when entities are unevenly
spread, so a few far-flung clusters do not count as a crowded galaxy.
"""

import logging
from enum import Enum
from typing import Optional, Sequence

from ..galaxy.abstraction import Entity, Space
from .config import LayoutConfig
from .geometry import calculate_center, calculate_distance, calculate_variance

logger = logging.getLogger(__name__)


class DensityRegime(str, Enum):
    """Density regimes, keyed by their wire labels."""
    LOW = "LOW_DENSITY"
    MEDIUM = "MEDIUM_DENSITY"
    HIGH = "HIGH_DENSITY"


def _require_sequence(entities) -> None:
    if not isinstance(entities, (list, tuple)):
        raise TypeError(
            f"Entities must be a list, got {type(entities).__name__}"
        )


def calculate_distribution_score(entities: Sequence[Entity], space: Space,
                                 config: Optional[LayoutConfig] = None) -> float:
    """
    Evenness of the spatial distribution, in [min_score, 1].

    1.0 means all entities sit at the same distance from their centroid;
    the score falls as the variance of those distances approaches
    (width / 2)^2.
    """
    config = config or LayoutConfig()
    if len(entities) <= 1:
        return 1.0

    positions = [e.position for e in entities]
    center = calculate_center(positions)
    distances = [calculate_distance(p, center) for p in positions]
    variance = calculate_variance(distances)

    max_variance = (space.width / 2) ** 2
    if max_variance <= 0:
        return 1.0
    return max(config.min_distribution_score, 1 - variance / max_variance)


def analyze_entity_density(entities: Sequence[Entity], space: Space,
                           config: Optional[LayoutConfig] = None) -> DensityRegime:
    """
    Classify an entity set as LOW, MEDIUM or HIGH density.

    Raises:
        TypeError: if entities is not a list or tuple
    """
    _require_sequence(entities)
    config = config or LayoutConfig()

    score = calculate_distribution_score(entities, space, config)
    adjusted_count = len(entities) * score

    if adjusted_count <= config.low_density_threshold:
        regime = DensityRegime.LOW
    elif adjusted_count <= config.medium_density_threshold:
        regime = DensityRegime.MEDIUM
    else:
        regime = DensityRegime.HIGH

    logger.debug("Density: count=%d score=%.3f adjusted=%.1f -> %s",
                 len(entities), score, adjusted_count, regime.value)
    return regime
