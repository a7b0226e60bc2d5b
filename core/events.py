"""
TurretCAM - Event Bus
=====================
Simple in-process event bus. The nesting engine, path optimizer and program
emitter publish stage events; hosts (CLI, UI) subscribe without the stages
knowing about them.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional
from enum import Enum
import uuid
import logging

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Event types published by the pipeline"""

    # ========== Nesting Events ==========
    NESTING_STARTED = "nesting.started"
    NESTING_SHEET_COMPLETED = "nesting.sheet_completed"
    NESTING_ITEM_SKIPPED = "nesting.item_skipped"
    NESTING_FINISHED = "nesting.finished"

    # ========== Toolpath Events ==========
    TOOLPATH_OPTIMIZED = "toolpath.optimized"

    # ========== Program Events ==========
    PROGRAM_EMITTED = "program.emitted"


@dataclass
class Event:
    """
    Event published on the bus.

    Attributes:
        type: Event type
        data: Payload
        timestamp: Creation time
        event_id: Unique event id
        correlation_id: Groups related events (defaults to event_id)
        source: Publishing module
    """
    type: EventType
    data: Dict[str, Any]
    timestamp: datetime = field(default_factory=datetime.now)
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    correlation_id: Optional[str] = None
    source: Optional[str] = None

    def __post_init__(self):
        if self.correlation_id is None:
            self.correlation_id = self.event_id

    def to_dict(self) -> dict:
        return {
            "event_id": self.event_id,
            "type": self.type.value,
            "data": self.data,
            "timestamp": self.timestamp.isoformat(),
            "correlation_id": self.correlation_id,
            "source": self.source
        }


EventHandler = Callable[[Event], None]


class EventBus:
    """
    Singleton event bus.

    Usage:
        bus = EventBus()
        bus.subscribe(EventType.NESTING_SHEET_COMPLETED, on_sheet)
        bus.publish(Event(type=EventType.NESTING_SHEET_COMPLETED, data={...}))
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._handlers = {}
            cls._instance._global_handlers = []
        return cls._instance

    @classmethod
    def reset(cls):
        """Reset the singleton (mainly for tests)"""
        cls._instance = None

    def subscribe(self, event_type: EventType, handler: EventHandler,
                  priority: int = 0) -> None:
        """
        Subscribe a handler to one event type.

        Args:
            event_type: Event type to listen to
            handler: Callable receiving the Event
            priority: Higher priority handlers run first
        """
        if event_type not in self._handlers:
            self._handlers[event_type] = []

        self._handlers[event_type].append((priority, handler))
        self._handlers[event_type].sort(key=lambda x: x[0], reverse=True)

        logger.debug(f"[EventBus] Subscribed handler to {event_type.value}")

    def subscribe_all(self, handler: EventHandler) -> None:
        """Subscribe a handler to every event (logging, tracing)."""
        self._global_handlers.append(handler)
        logger.debug("[EventBus] Subscribed global handler")

    def unsubscribe(self, event_type: EventType, handler: EventHandler) -> bool:
        """
        Remove a handler.

        Returns:
            True if the handler was removed
        """
        if event_type not in self._handlers:
            return False

        original_count = len(self._handlers[event_type])
        self._handlers[event_type] = [
            (p, h) for p, h in self._handlers[event_type]
            if h != handler
        ]
        return len(self._handlers[event_type]) < original_count

    def publish(self, event: Event) -> None:
        """
        Publish an event.

        Handlers run synchronously; an error in one handler does not block the others.
        """
        logger.debug(f"[EventBus] Publishing: {event.type.value} | ID: {event.event_id[:8]}")

        for priority, handler in self._handlers.get(event.type, []):
            try:
                handler(event)
            except Exception as e:
                logger.error(
                    f"[EventBus] Handler error for {event.type.value}: {e}",
                    exc_info=True
                )

        for handler in self._global_handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"[EventBus] Global handler error: {e}", exc_info=True)


# ============================================================
# Helper Functions
# ============================================================

def create_event(event_type: EventType, data: Dict[str, Any],
                 source: str = None, correlation_id: str = None) -> Event:
    return Event(
        type=event_type,
        data=data,
        source=source,
        correlation_id=correlation_id
    )


def get_event_bus() -> EventBus:
    """Return the event bus instance"""
    return EventBus()


def publish_event(event_type: EventType, data: Dict[str, Any],
                  source: str = None) -> None:
    """Create and publish an event in one call."""
    get_event_bus().publish(create_event(event_type, data, source=source))


# ============================================================
# Built-in Handlers
# ============================================================

def logging_handler(event: Event) -> None:
    """Log every event at INFO level"""
    logger.info(
        f"[EVENT] {event.type.value} | "
        f"ID: {event.event_id[:8]} | "
        f"Source: {event.source or 'pipeline'} | "
        f"Data: {event.data}"
    )


def setup_event_logging():
    """Log all events published on the bus"""
    EventBus().subscribe_all(logging_handler)


__all__ = [
    'EventType',
    'Event',
    'EventHandler',
    'EventBus',
    'create_event',
    'get_event_bus',
    'publish_event',
    'logging_handler',
    'setup_event_logging',
]
