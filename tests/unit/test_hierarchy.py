"""
Tests for sitemap validation and hierarchy construction.

Tests cover:
- Sitemap document validation
- Page record parsing (key spellings, type defaults, priority)
- Missing parents, cycles and duplicates
- Depth-first flattening
"""

import logging

import pytest

from galaxyplace.errors import SitemapValidationError
from galaxyplace.galaxy.abstraction import Entity, Importance, Position
from galaxyplace.galaxy.hierarchy import (
    HierarchyBuilder,
    build_hierarchy,
    entity_from_record,
    validate_sitemap,
)


# =============================================================================
# Validation
# =============================================================================

class TestValidateSitemap:

    @pytest.mark.parametrize("document", [None, {}, [], "pages"])
    def test_rejects_non_object(self, document):
        with pytest.raises(SitemapValidationError):
            validate_sitemap(document)

    def test_rejects_non_list_pages(self):
        with pytest.raises(SitemapValidationError, match="must be a list"):
            validate_sitemap({"pages": {"home": {}}})

    def test_rejects_page_without_level(self):
        with pytest.raises(SitemapValidationError, match="missing level"):
            validate_sitemap({"pages": [{"level": "home"}, {"type": "planet"}]})

    def test_zero_level_is_valid(self):
        pages = validate_sitemap({"pages": [{"level": 0, "type": "star"}]})
        assert pages == [{"level": 0, "type": "star"}]

    def test_empty_level_is_missing(self):
        with pytest.raises(SitemapValidationError, match="missing level"):
            validate_sitemap({"pages": [{"level": "", "type": "star"}]})

    def test_missing_type_warns(self, caplog):
        with caplog.at_level(logging.WARNING):
            pages = validate_sitemap({"pages": [{"level": "home"}]})
        assert pages == [{"level": "home"}]
        assert "missing type" in caplog.text

    def test_returns_copies(self):
        source = {"pages": [{"level": "home", "type": "star"}]}
        pages = validate_sitemap(source)
        pages[0]["type"] = "moon"
        assert source["pages"][0]["type"] == "star"


# =============================================================================
# Records
# =============================================================================

class TestEntityFromRecord:

    def test_sitemap_spelling(self):
        entity = entity_from_record({
            "level": "blog",
            "type": "planet",
            "parent": "home",
            "orbit-radius": "80",
            "orbit-angle": 45,
            "importance": "high",
            "content-priority": "critical",
            "metadata": {"tags": ["news"]},
        })
        assert entity.id == "blog"
        assert entity.parent == "home"
        assert entity.orbit_radius == 80.0
        assert entity.orbit_angle == 45.0
        assert entity.importance is Importance.HIGH
        assert entity.tags == ["news"]
        # planet 7 + high importance 2 + critical content 3
        assert entity.priority == pytest.approx(12.0)
        assert entity.radius == 60.0

    def test_snake_case_spelling(self):
        entity = entity_from_record({"id": 3, "type": "moon", "orbit_radius": 40})
        assert entity.id == 3
        assert entity.orbit_radius == 40.0

    def test_type_defaults_and_visuals(self):
        entity = entity_from_record({"level": "about"})
        assert entity.type == "planet"
        assert entity.color == "#4fc3f7"
        assert entity.title == "about"

    def test_unknown_type_uses_default_table_entry(self, caplog):
        entity = entity_from_record({"level": "x", "type": "comet"})
        assert entity.radius == 30.0
        assert entity.priority == pytest.approx(1.0 + 1.0)
        assert entity.color == "#607d8b"
        assert "Unknown entity type" in caplog.text

    def test_size_modifier_scales_radius(self):
        entity = entity_from_record({"level": "p", "type": "planet", "size-modifier": 0.5})
        assert entity.radius == 30.0
        assert entity.visual_size_modifier() == 0.5

    def test_unusual_orbit_radius_warns(self, caplog):
        entity_from_record({"level": "m", "type": "moon", "orbit-radius": 900})
        assert "Unusual orbit radius" in caplog.text

    def test_invalid_number_rejected(self):
        with pytest.raises(SitemapValidationError, match="orbit-radius"):
            entity_from_record({"level": "m", "orbit-radius": "far"})

    def test_position_parsed(self):
        entity = entity_from_record({"level": "p", "position": {"x": 5, "y": 6}})
        assert entity.position == Position(5.0, 6.0)


# =============================================================================
# Builder
# =============================================================================

class TestHierarchyBuilder:

    def test_children_and_roots(self, sitemap_pages):
        hierarchy = HierarchyBuilder().build(sitemap_pages)
        assert hierarchy.roots == ["home", "legacy"]
        assert hierarchy.entities["home"].children == ["about", "blog"]
        assert [c.id for c in hierarchy.children_of("blog")] == ["post-1"]

    def test_missing_parent_becomes_root(self, sitemap_pages, caplog):
        hierarchy = HierarchyBuilder().build(sitemap_pages)
        assert hierarchy.entities["legacy"].parent is None
        assert hierarchy.promoted == ["legacy"]
        assert "not found" in caplog.text

    def test_zero_id_parent_is_resolved(self, caplog):
        hierarchy = build_hierarchy([
            {"id": 0, "type": "planet"},
            {"id": 1, "type": "moon", "parent": 0},
        ])
        assert hierarchy.roots == [0]
        assert hierarchy.entities[1].parent == 0
        assert [c.id for c in hierarchy.children_of(0)] == [1]
        assert hierarchy.promoted == []
        assert "not found" not in caplog.text

    def test_empty_parent_is_root(self):
        hierarchy = build_hierarchy([{"id": "a", "parent": ""}])
        assert hierarchy.roots == ["a"]
        assert hierarchy.promoted == []

    def test_cycle_is_broken(self, caplog):
        hierarchy = build_hierarchy([
            {"id": "a", "parent": "b"},
            {"id": "b", "parent": "a"},
        ])
        assert len(hierarchy.roots) == 1
        assert sorted(e.id for e in hierarchy.flatten()) == ["a", "b"]
        assert "Circular parent chain" in caplog.text

    def test_self_parent_is_broken(self):
        hierarchy = build_hierarchy([{"id": "a", "parent": "a"}])
        assert hierarchy.roots == ["a"]

    def test_duplicates_keep_first(self, caplog):
        hierarchy = build_hierarchy([
            {"id": "a", "type": "star"},
            {"id": "a", "type": "moon"},
        ])
        assert hierarchy.entities["a"].type == "star"
        assert "Duplicate entity id" in caplog.text

    def test_accepts_entities(self):
        root = Entity(id=1, type="star", children=[99])
        child = Entity(id=2, type="planet", parent=1)
        hierarchy = build_hierarchy([root, child])
        assert hierarchy.entities[1].children == [2]
        assert root.children == [99]

    def test_flatten_is_depth_first(self, sitemap_pages):
        flat = HierarchyBuilder().build(sitemap_pages).flatten()
        assert [e.id for e in flat] == ["home", "about", "team", "blog", "post-1", "legacy"]
        assert [e.depth for e in flat] == [0, 1, 2, 1, 2, 0]
