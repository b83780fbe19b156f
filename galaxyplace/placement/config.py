"""Layout configuration."""

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from ..errors import ConfigError

logger = logging.getLogger(__name__)


@dataclass
class LayoutConfig:
    """Configuration for adaptive positioning and collision resolution."""
    # Density classification
    low_density_threshold: float = 20.0  # adjusted count <= this -> LOW
    medium_density_threshold: float = 100.0  # adjusted count <= this -> MEDIUM
    min_distribution_score: float = 0.1

    # Collision resolution
    min_distance: float = 20.0  # px - gap required between entity edges
    max_collision_iterations: int = 100
    spatial_grid_size: float = 100.0  # px - spatial hash cell size

    # Simple (low density) jitter
    jitter_base: float = 10.0
    jitter_per_priority: float = 2.0

    # Clustered (medium density)
    max_cluster_size: int = 8
    cluster_split_probability: float = 0.3
    cluster_radius: float = 120.0  # px - ring of cluster centers
    entity_spacing: float = 40.0  # px - first member ring radius
    cluster_ring_step: float = 10.0  # px - ring growth per member index

    # Hexagonal packing (high density)
    hex_radius: float = 25.0  # px
    center_bias_priority_scale: float = 10.0

    # Hierarchy placement
    spiral_threshold: int = 8  # roots above this use the golden-angle spiral
    golden_angle: float = 137.5  # degrees
    spiral_scale: float = 0.8
    root_ring_factor: float = 2.0
    max_recursion_depth: int = 10

    # Analytics / advisory
    analytics_buffer_size: int = 1000
    analytics_count_window: int = 10  # +/- entity count for strategy history
    use_analytics_override: bool = True
    min_hotspot_interactions: int = 5  # hotspot requires more than this
    rebalance: bool = True

    # Reproducibility (None = nondeterministic jitter/cluster splits)
    seed: Optional[int] = None

    def validate(self) -> None:
        """Reject settings the engine cannot work with."""
        if self.spatial_grid_size <= 0:
            raise ConfigError("spatial_grid_size must be positive")
        if self.max_collision_iterations < 0:
            raise ConfigError("max_collision_iterations must be >= 0")
        if self.max_cluster_size < 1:
            raise ConfigError("max_cluster_size must be >= 1")
        if self.low_density_threshold > self.medium_density_threshold:
            raise ConfigError("low_density_threshold must not exceed medium_density_threshold")
        if not 0.0 <= self.cluster_split_probability <= 1.0:
            raise ConfigError("cluster_split_probability must be within [0, 1]")
        if self.min_distance < 0:
            raise ConfigError("min_distance must be >= 0")

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "LayoutConfig":
        """Build a config from a mapping of overrides."""
        data = data or {}
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown layout config keys: {unknown}")
        config = cls(**data)
        config.validate()
        return config

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "LayoutConfig":
        """Load overrides from a YAML file (a mapping at the top level)."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Layout config not found: {path}")
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ConfigError(f"Layout config must be a mapping: {path}")
        logger.debug("Loaded layout config from %s", path)
        return cls.from_dict(data)
