"""
End-to-end layout tests: sitemap records through hierarchy, orbital
placement, adaptive strategy, collision resolution and the CLI.
"""

import json
import math

import pytest

from galaxyplace.cli import main
from galaxyplace.galaxy.abstraction import Entity, Position, PositionUnits, Space
from galaxyplace.galaxy.hierarchy import HierarchyBuilder
from galaxyplace.placement.collision import required_distance
from galaxyplace.placement.config import LayoutConfig
from galaxyplace.placement.density import DensityRegime
from galaxyplace.placement.engine import AdaptivePositioning
from galaxyplace.placement.orbital import OrbitalPlacer


def _assert_in_bounds(entities, space):
    for e in entities:
        assert e.radius - 1e-9 <= e.position.x <= space.width - e.radius + 1e-9, e.id
        assert e.radius - 1e-9 <= e.position.y <= space.height - e.radius + 1e-9, e.id


def _count_overlaps(entities, config):
    return sum(
        1
        for i, a in enumerate(entities)
        for b in entities[i + 1:]
        if a.distance_to(b) < required_distance(a, b, config.min_distance)
    )


# =============================================================================
# Planet with a moon
# =============================================================================

class TestPlanetMoonScenario:

    RECORDS = [
        {"id": 1, "type": "planet", "parent": None},
        {"id": 2, "type": "moon", "parent": 1},
    ]

    def test_initial_orbit(self, space):
        hierarchy = HierarchyBuilder().build(self.RECORDS)
        planet, moon = OrbitalPlacer().place(hierarchy, space)

        assert moon.position.x == pytest.approx(planet.position.x + 60.0)
        assert moon.position.y == pytest.approx(planet.position.y)
        # 60 < 60 + 30 + 20, so the pair starts out overlapping
        assert planet.distance_to(moon) < required_distance(planet, moon, 20)

    def test_layout_resolves_overlap(self, engine, space):
        result = engine.layout_hierarchy(self.RECORDS, space)
        planet, moon = result.entities

        _assert_in_bounds(result.entities, space)
        assert planet.distance_to(moon) >= required_distance(planet, moon, 20) - 1e-6
        assert result.metrics.collisions_resolved >= 1
        assert result.metrics.converged

    def test_higher_priority_planet_moves_less(self, space):
        engine = AdaptivePositioning(LayoutConfig(
            seed=1, rebalance=False, jitter_base=0, jitter_per_priority=0))
        hierarchy = HierarchyBuilder().build(self.RECORDS)
        placed = OrbitalPlacer().place(hierarchy, space)
        result = engine.calculate_optimal_distribution(placed, space)
        by_id = result.by_id()

        planet_shift = math.dist(placed[0].position.as_tuple(), by_id[1].position.as_tuple())
        moon_shift = math.dist(placed[1].position.as_tuple(), by_id[2].position.as_tuple())
        assert moon_shift > planet_shift


# =============================================================================
# Larger layouts
# =============================================================================

class TestBoundsInvariant:

    def test_sitemap_layout(self, engine, sitemap_pages, space):
        result = engine.layout_hierarchy(sitemap_pages, space)
        assert {e.id for e in result.entities} == {p["level"] for p in sitemap_pages}
        _assert_in_bounds(result.entities, space)
        assert result.metrics.converged

    @pytest.mark.parametrize("count", [15, 60, 150])
    def test_every_regime_stays_in_bounds(self, ring_entities, count):
        space = Space(1200, 900)
        engine = AdaptivePositioning(LayoutConfig(seed=3))
        entities = ring_entities(count, ring_radius=250, radius=8)
        result = engine.calculate_optimal_distribution(entities, space)

        _assert_in_bounds(result.entities, space)
        assert result.metrics.iterations_used <= engine.config.max_collision_iterations
        min_x, min_y, max_x, max_y = result.bounds
        assert 0 <= min_x <= max_x <= space.width
        assert 0 <= min_y <= max_y <= space.height

    def test_deep_hierarchy(self, engine, space):
        records = [{"id": "root", "type": "galaxy"}]
        for i in range(12):
            records.append({"id": f"n{i}", "type": "debris",
                            "parent": "root" if i == 0 else f"n{i - 1}"})
        result = engine.layout_hierarchy(records, space)
        assert len(result.entities) == 13
        _assert_in_bounds(result.entities, space)

    def test_large_hierarchy_can_keep_orbits(self, engine, space):
        records = [{"id": "home", "type": "star"}]
        records += [{"id": f"p{i}", "type": "planet", "parent": "home"} for i in range(30)]
        result = engine.layout_hierarchy(records, space, strategy=DensityRegime.LOW)
        assert result.metrics.strategy_used == "LOW_DENSITY"
        assert len(result.entities) == 31
        _assert_in_bounds(result.entities, space)


class TestPercentUnits:

    def test_round_trip_units(self, engine):
        space = Space(1000, 800)
        entities = [
            Entity(id="a", type="moon", position=Position(50, 50)),
            Entity(id="b", type="moon", position=Position(51, 50)),
        ]
        result = engine.calculate_optimal_distribution(entities, space, units=PositionUnits.PERCENT)

        assert result.units == PositionUnits.PERCENT
        for e in result.entities:
            assert 0 <= e.position.x <= 100
            assert 0 <= e.position.y <= 100

        a, b = (space.to_pixels(e.position) for e in result.entities)
        assert math.dist(a.as_tuple(), b.as_tuple()) >= 30 + 30 + 20 - 1e-6


class TestInteractionHotspots:

    def test_layout_drifts_toward_hotspot(self, engine, make_entity, space):
        for _ in range(8):
            engine.record_user_interaction("home", "click", Position(250, 200))
        entities = [make_entity(i, 500 + 100 * (i % 3), 400 + 100 * (i // 3), radius=10)
                    for i in range(6)]
        result = engine.calculate_optimal_distribution(entities, space)

        xs = [e.position.x for e in result.entities]
        ys = [e.position.y for e in result.entities]
        assert sum(xs) / len(xs) == pytest.approx(250.0, abs=1.0)
        assert sum(ys) / len(ys) == pytest.approx(200.0, abs=1.0)

    def test_corner_hotspot_reports_real_overlaps(self, engine, make_entity, space):
        for _ in range(10):
            engine.record_user_interaction("home", "click", Position(5, 5))
        entities = [make_entity(i, 275 + 150 * (i % 4), 250 + 150 * (i // 4))
                    for i in range(12)]
        result = engine.calculate_optimal_distribution(entities, space)

        assert _count_overlaps(result.entities, engine.config) == result.metrics.final_overlaps
        assert result.metrics.converged == (result.metrics.final_overlaps == 0)
        _assert_in_bounds(result.entities, space)


# =============================================================================
# CLI
# =============================================================================

class TestCli:

    def test_layout_writes_positions(self, sitemap_file, tmp_path):
        output = tmp_path / "positions.json"
        assert main(["layout", str(sitemap_file), "-o", str(output), "--seed", "4"]) == 0

        data = json.loads(output.read_text(encoding="utf-8"))
        assert {e["id"] for e in data["entities"]} == {
            "home", "about", "team", "blog", "post-1", "legacy"}
        assert data["metrics"]["entityCount"] == 6
        assert data["units"] == "px"
        for e in data["entities"]:
            assert e["radius"] <= e["position"]["x"] <= 1000 - e["radius"]

    def test_layout_with_config(self, sitemap_file, tmp_path):
        config = tmp_path / "layout.yaml"
        config.write_text("min_distance: 10\nseed: 2\n", encoding="utf-8")
        output = tmp_path / "positions.json"
        assert main(["layout", str(sitemap_file), "--config", str(config),
                     "--width", "1400", "--height", "1000", "-o", str(output)]) == 0
        assert output.exists()

    def test_report(self, sitemap_file, capsys):
        assert main(["report", str(sitemap_file)]) == 0
        out = capsys.readouterr().out
        assert "Entities: 6" in out
        assert "Roots: 2" in out
        assert "Promoted to root: legacy" in out
        assert "Unused types: anomaly, blackhole" in out
        assert "planet," not in out.split("Unused types:")[1]

    def test_missing_sitemap(self, tmp_path, capsys):
        assert main(["layout", str(tmp_path / "none.json")]) == 1
        assert "Sitemap not found" in capsys.readouterr().out

    def test_invalid_sitemap(self, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"pages": [{"type": "planet"}]}), encoding="utf-8")
        assert main(["layout", str(path)]) == 1
        assert "missing level" in capsys.readouterr().out

    def test_no_command(self):
        assert main([]) == 1
