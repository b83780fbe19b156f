"""Per-build layout context.

Everything a layout pass mutates lives here, so concurrent builds never
share a grid, an RNG or an entity map.
"""

import random
from dataclasses import dataclass, field
from typing import List, Optional

from ..galaxy.abstraction import Entity, Space
from .analytics import Hotspot
from .config import LayoutConfig
from .spatial_index import SpatialGrid


@dataclass
class LayoutContext:
    """State owned by a single layout build."""
    space: Space
    entities: List[Entity] = field(default_factory=list)
    config: LayoutConfig = field(default_factory=LayoutConfig)
    hotspots: List[Hotspot] = field(default_factory=list)
    rng: Optional[random.Random] = None
    grid: Optional[SpatialGrid] = None

    def __post_init__(self):
        if self.rng is None:
            self.rng = random.Random(self.config.seed)
        if self.grid is None:
            self.grid = SpatialGrid(self.config.spatial_grid_size)
