"""
Shared test fixtures for GalaxyPlace tests.

Provides canvas, config, entity and sitemap fixtures for the layout
engine, hierarchy and CLI tests.
"""

import json
import math

import pytest

from galaxyplace.galaxy.abstraction import Entity, Position, Space
from galaxyplace.placement.config import LayoutConfig
from galaxyplace.placement.engine import AdaptivePositioning


@pytest.fixture
def space() -> Space:
    """The default 1000x800 canvas."""
    return Space(width=1000.0, height=800.0)


@pytest.fixture
def config() -> LayoutConfig:
    """Default config with a fixed seed for reproducible layouts."""
    return LayoutConfig(seed=42)


@pytest.fixture
def engine(config) -> AdaptivePositioning:
    return AdaptivePositioning(config=config)


@pytest.fixture
def make_entity():
    """Factory for entities with explicit position, radius and priority."""
    def _make(entity_id, x=0.0, y=0.0, radius=30.0, priority=1.0, **kwargs):
        return Entity(
            id=entity_id,
            position=Position(x, y),
            radius=radius,
            priority=priority,
            **kwargs,
        )
    return _make


@pytest.fixture
def ring_entities(make_entity, space):
    """Factory for n entities evenly spread on a ring around the canvas center."""
    def _ring(n, ring_radius=300.0, radius=10.0):
        center = space.center
        return [
            make_entity(
                i,
                center.x + math.cos(2 * math.pi * i / n) * ring_radius,
                center.y + math.sin(2 * math.pi * i / n) * ring_radius,
                radius=radius,
            )
            for i in range(n)
        ]
    return _ring


@pytest.fixture
def sitemap_pages():
    """A small site: one star, two planets, two moons and an orphan."""
    return [
        {"level": "home", "type": "star", "title": "Home", "importance": "high"},
        {"level": "about", "type": "planet", "parent": "home", "title": "About"},
        {"level": "team", "type": "moon", "parent": "about", "title": "Team"},
        {"level": "blog", "type": "planet", "parent": "home", "title": "Blog",
         "content-priority": "high"},
        {"level": "post-1", "type": "moon", "parent": "blog", "orbit-radius": 80},
        {"level": "legacy", "type": "asteroid", "parent": "missing-page"},
    ]


@pytest.fixture
def sitemap_file(tmp_path, sitemap_pages):
    """The sitemap_pages fixture written to a sitemap.json file."""
    path = tmp_path / "sitemap.json"
    path.write_text(json.dumps({
        "version": "1.0",
        "generated": "2024-01-01T00:00:00Z",
        "pages": sitemap_pages,
    }), encoding="utf-8")
    return path
