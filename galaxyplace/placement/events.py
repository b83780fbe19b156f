"""Typed layout events and an in-process listener channel."""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Type

from ..galaxy.abstraction import Position

logger = logging.getLogger(__name__)


@dataclass
class LayoutEvent:
    """Base class for events emitted by the layout engine."""


@dataclass
class PositioningCompletedEvent(LayoutEvent):
    strategy: str
    entity_count: int
    calculation_time: float  # ms
    collisions_resolved: int
    performance_score: float


@dataclass
class PositioningErrorEvent(LayoutEvent):
    error: str
    entity_count: int


@dataclass
class StrategyRecommendedEvent(LayoutEvent):
    """Analytics recommended a strategy other than the density-derived one."""
    density_strategy: str
    recommended_strategy: str
    entity_count: int


@dataclass
class PredictedPositionEvent(LayoutEvent):
    predicted_position: Position
    pattern: str
    confidence: float


Listener = Callable[[LayoutEvent], None]


class LayoutEvents:
    """Synchronous event channel.

    Listeners run in subscription order. A failing listener is logged and
    skipped; it never interrupts the layout that emitted the event.
    """

    def __init__(self):
        self._listeners: List[tuple] = []

    def subscribe(self, listener: Listener,
                  event_type: Optional[Type[LayoutEvent]] = None):
        """Register a listener, optionally for one event type only."""
        self._listeners.append((listener, event_type))

    def unsubscribe(self, listener: Listener):
        self._listeners = [(l, t) for l, t in self._listeners if l != listener]

    def emit(self, event: LayoutEvent):
        for listener, event_type in list(self._listeners):
            if event_type is not None and not isinstance(event, event_type):
                continue
            try:
                listener(event)
            except Exception as e:
                logger.error("Layout event listener failed on %s: %s",
                             type(event).__name__, e)
