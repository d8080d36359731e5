"""
Workflow Events Module

Provides the event bus used for workflow event triggers and run lifecycle
events, plus the catalogue of known kernel events.
"""

from .event_bus import EventBus, EventHandler
from .known_events import KNOWN_EVENTS, EventSpec, events_by_category

__all__ = ["EventBus", "EventHandler", "KNOWN_EVENTS", "EventSpec", "events_by_category"]
