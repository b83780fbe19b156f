"""
Galaxy Abstraction Layer

Provides the entity model shared by the hierarchy builder, the layout
strategies and the collision resolver. Every celestial body on the canvas
is an Entity; the canvas itself is a Space.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from ..entity_types import EntityTypes, get_entity_types

EntityId = Union[str, int]


class Importance(Enum):
    """Editorial importance of a page."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def parse(cls, value: Any) -> "Importance":
        """Parse an importance value, defaulting to MEDIUM."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.MEDIUM


class PositionUnits(Enum):
    """Coordinate units of a layout pass."""
    PIXELS = "px"
    PERCENT = "percent"


# Priority bonuses on top of the per-type base priority
IMPORTANCE_PRIORITY_BONUS = {
    Importance.HIGH: 2.0,
    Importance.MEDIUM: 1.0,
    Importance.LOW: 0.0,
}

CONTENT_PRIORITY_BONUS = {
    "critical": 3.0,
    "high": 2.0,
    "medium": 1.0,
    "low": 0.0,
}

PREDICTIVE_SCORE_WEIGHT = 0.1


@dataclass
class Position:
    """A 2D canvas position."""
    x: float = 0.0
    y: float = 0.0

    def copy(self) -> "Position":
        return Position(self.x, self.y)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class Space:
    """Viewport the galaxy is laid out in (pixels)."""
    width: float = 1000.0
    height: float = 800.0

    @property
    def center(self) -> Position:
        return Position(self.width / 2, self.height / 2)

    def clamp(self, position: Position, radius: float = 0.0) -> Position:
        """Return a position clamped to [radius, dimension - radius] on both axes."""
        return Position(
            max(radius, min(self.width - radius, position.x)),
            max(radius, min(self.height - radius, position.y)),
        )

    def to_pixels(self, position: Position) -> Position:
        """Convert a percent-of-viewport position to pixels."""
        return Position(position.x * self.width / 100.0,
                        position.y * self.height / 100.0)

    def to_percent(self, position: Position) -> Position:
        """Convert a pixel position to percent-of-viewport."""
        return Position(
            position.x * 100.0 / self.width if self.width else 0.0,
            position.y * 100.0 / self.height if self.height else 0.0,
        )


@dataclass
class Entity:
    """A celestial body representing one page of the site."""
    id: EntityId
    type: str = "planet"
    parent: Optional[EntityId] = None
    position: Position = field(default_factory=Position)
    importance: Importance = Importance.MEDIUM

    # Priority inputs beyond the type table
    content_priority: Optional[str] = None
    predictive_score: Optional[float] = None

    # Orbital metadata (explicit overrides; None = auto)
    orbit_radius: Optional[float] = None
    orbit_angle: Optional[float] = None  # degrees
    size_modifier: Optional[float] = None

    # Visual metadata handed through to renderers
    title: str = ""
    url: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    tags: List[str] = field(default_factory=list)

    children: List[EntityId] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    # Derived from the type table in __post_init__ when not given
    radius: Optional[float] = None
    priority: Optional[float] = None

    def __post_init__(self):
        self.importance = Importance.parse(self.importance)
        if self.radius is None or self.priority is None:
            self.resolve_type_properties(get_entity_types(),
                                         keep_radius=self.radius is not None,
                                         keep_priority=self.priority is not None)

    def resolve_type_properties(self, types: EntityTypes,
                                keep_radius: bool = False,
                                keep_priority: bool = False):
        """Derive radius and priority from a type table."""
        if not keep_radius:
            modifier = self.size_modifier if self.size_modifier else 1.0
            self.radius = types.radius(self.type) * modifier
        if not keep_priority:
            self.priority = self.compute_priority(types)

    def compute_priority(self, types: EntityTypes) -> float:
        """Type priority plus importance, content-priority and predictive bonuses."""
        priority = types.priority(self.type)
        priority += IMPORTANCE_PRIORITY_BONUS[self.importance]
        if self.content_priority:
            priority += CONTENT_PRIORITY_BONUS.get(str(self.content_priority).lower(), 0.0)
        if self.predictive_score:
            priority += self.predictive_score * PREDICTIVE_SCORE_WEIGHT
        return priority

    def visual_size_modifier(self, types: Optional[EntityTypes] = None) -> float:
        """Renderer scale: explicit override, else type modifier x importance modifier."""
        if self.size_modifier:
            return self.size_modifier
        types = types or get_entity_types()
        modifier = types.size_modifier(self.type)
        modifier *= types.importance_size_modifier(self.importance.value)
        return round(modifier * 100) / 100

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def depth(self) -> int:
        return int(self.metadata.get("depth", 0))

    def copy(self) -> "Entity":
        """Copy with independent position, children and metadata."""
        return replace(
            self,
            position=self.position.copy(),
            tags=list(self.tags),
            children=list(self.children),
            metadata=dict(self.metadata),
        )

    def distance_to(self, other: "Entity") -> float:
        """Center-to-center distance to another entity."""
        dx = self.position.x - other.position.x
        dy = self.position.y - other.position.y
        return (dx * dx + dy * dy) ** 0.5

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for the rendering layer."""
        return {
            "id": self.id,
            "type": self.type,
            "parent": self.parent,
            "title": self.title,
            "url": self.url,
            "importance": self.importance.value,
            "priority": self.priority,
            "radius": self.radius,
            "position": {"x": self.position.x, "y": self.position.y},
            "orbit-radius": self.orbit_radius,
            "orbit-angle": self.orbit_angle,
            "size-modifier": self.visual_size_modifier(),
            "color": self.color,
            "icon": self.icon,
            "tags": list(self.tags),
            "children": list(self.children),
            "metadata": dict(self.metadata),
        }
