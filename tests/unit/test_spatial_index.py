"""
Tests for the spatial hash grid.

Tests cover:
- Cell hashing, including negative coordinates
- Neighborhood queries
- Candidate pair generation (adjacent cells, no duplicates)
"""

import pytest

from galaxyplace.placement.spatial_index import SpatialGrid


class TestCellHashing:

    def test_cell_key_floors(self):
        grid = SpatialGrid(100)
        assert grid.cell_key(0, 0) == (0, 0)
        assert grid.cell_key(99.9, 150) == (0, 1)
        assert grid.cell_key(-10, -100) == (-1, -1)

    def test_rejects_non_positive_cell_size(self):
        with pytest.raises(ValueError):
            SpatialGrid(0)
        with pytest.raises(ValueError):
            SpatialGrid(-5)

    def test_are_adjacent(self):
        assert SpatialGrid.are_adjacent((0, 0), (0, 0))
        assert SpatialGrid.are_adjacent((0, 0), (1, -1))
        assert not SpatialGrid.are_adjacent((0, 0), (2, 0))


class TestNeighborhood:

    def test_build_and_neighbors(self, make_entity):
        entities = [
            make_entity("a", 10, 10),
            make_entity("b", 150, 10),   # adjacent cell
            make_entity("c", 450, 450),  # far away
        ]
        grid = SpatialGrid(100)
        grid.build(entities)

        assert len(grid) == 3
        assert grid.neighbors(0) == [1]
        assert grid.neighbors(2) == []

    def test_rebuild_clears_previous_state(self, make_entity):
        grid = SpatialGrid(100)
        grid.build([make_entity("a", 10, 10), make_entity("b", 20, 20)])
        grid.build([make_entity("c", 500, 500)])
        assert len(grid) == 1
        assert grid.get_stats()["total_cells"] == 1
        assert grid.neighbors(0) == []


class TestCandidatePairs:

    def test_pairs_from_same_and_adjacent_cells(self, make_entity):
        entities = [
            make_entity("a", 95, 10),
            make_entity("b", 105, 10),
            make_entity("c", 10, 10),
            make_entity("d", 900, 700),
        ]
        grid = SpatialGrid(100)
        grid.build(entities)

        pairs = set(grid.candidate_pairs())
        assert pairs == {(0, 1), (0, 2), (1, 2)}

    def test_each_pair_yielded_once(self, make_entity):
        entities = [make_entity(i, 40 + (i % 5) * 30, 40 + (i // 5) * 30) for i in range(25)]
        grid = SpatialGrid(50)
        grid.build(entities)

        pairs = list(grid.candidate_pairs())
        assert len(pairs) == len(set(pairs))
        assert all(i < j for i, j in pairs)

    def test_get_stats(self, make_entity):
        grid = SpatialGrid(100)
        grid.build([make_entity("a", 10, 10), make_entity("b", 20, 20), make_entity("c", 300, 10)])
        stats = grid.get_stats()
        assert stats["total_entities"] == 3
        assert stats["total_cells"] == 2
        assert stats["max_entities_per_cell"] == 2
        assert stats["avg_entities_per_cell"] == pytest.approx(1.5)
