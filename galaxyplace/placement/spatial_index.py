"""Spatial hash grid for near-linear overlap detection.

Instead of checking all N*(N-1)/2 entity pairs, entities are binned into
uniform grid cells and only pairs in the same or adjacent cells are checked.
"""

import math
from typing import Dict, Iterator, List, Sequence, Tuple

from ..galaxy.abstraction import Entity

CellKey = Tuple[int, int]


class SpatialGrid:
    """Grid-based spatial hash over entity indices.

    The grid is rebuilt from scratch for every detection pass; it holds no
    state between passes. Cell size should be at least the largest collision
    distance (2 * max radius + min distance) for the adjacency rule to catch
    every overlap.
    """

    def __init__(self, cell_size: float):
        """Initialize spatial grid.

        Args:
            cell_size: Size of each grid cell in pixels
        """
        if cell_size <= 0:
            raise ValueError("cell_size must be positive")
        self.cell_size = cell_size
        self._cells: Dict[CellKey, List[int]] = {}
        self._keys: List[CellKey] = []

    def cell_key(self, x: float, y: float) -> CellKey:
        """Hash position to cell coordinates."""
        return (int(math.floor(x / self.cell_size)),
                int(math.floor(y / self.cell_size)))

    def clear(self):
        """Clear the grid for rebuilding."""
        self._cells.clear()
        self._keys = []

    def build(self, entities: Sequence[Entity]):
        """Rebuild the grid from the entities' current positions."""
        self.clear()
        for index, entity in enumerate(entities):
            key = self.cell_key(entity.position.x, entity.position.y)
            if key not in self._cells:
                self._cells[key] = []
            self._cells[key].append(index)
            self._keys.append(key)

    def __len__(self) -> int:
        return len(self._keys)

    @staticmethod
    def are_adjacent(a: CellKey, b: CellKey) -> bool:
        """True if the cells are the same or touch (3x3 neighborhood)."""
        return abs(a[0] - b[0]) <= 1 and abs(a[1] - b[1]) <= 1

    def neighbors(self, index: int) -> List[int]:
        """Indices in the 3x3 neighborhood of an entity, excluding itself."""
        cx, cy = self._keys[index]
        result = []
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                for other in self._cells.get((cx + dx, cy + dy), ()):
                    if other != index:
                        result.append(other)
        return result

    def candidate_pairs(self) -> Iterator[Tuple[int, int]]:
        """Yield each (i, j), i < j, from the same or adjacent cells once."""
        for (cx, cy), members in self._cells.items():
            for dx in (-1, 0, 1):
                for dy in (-1, 0, 1):
                    others = self._cells.get((cx + dx, cy + dy))
                    if not others:
                        continue
                    for i in members:
                        for j in others:
                            # Each unordered pair is seen from both cells;
                            # the index ordering keeps exactly one.
                            if i < j:
                                yield (i, j)

    def get_stats(self) -> Dict:
        """Get grid statistics for debugging."""
        cell_counts = [len(members) for members in self._cells.values()]
        return {
            "total_entities": len(self._keys),
            "total_cells": len(self._cells),
            "cell_size": self.cell_size,
            "avg_entities_per_cell": sum(cell_counts) / max(len(cell_counts), 1),
            "max_entities_per_cell": max(cell_counts) if cell_counts else 0,
        }
