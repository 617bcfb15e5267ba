import logging
from abc import ABC
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

logger = logging.getLogger(__name__)


def event(cls):
    return dataclass(frozen=True, slots=True)(cls)


@dataclass(frozen=True, slots=True, kw_only=True)
class DomainEvent(ABC):
    timestamp: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


@event
class PhasePassedEvent(DomainEvent):
    """The current step's profit target was reached for the first time."""

    account_id: str
    step: int
    phase_pnl: float
    target: float
    is_final_step: bool


@event
class PhaseAdvancedEvent(DomainEvent):
    account_id: str
    from_step: int
    to_step: int
    is_funded: bool


class EventDispatcher:
    """Synchronous event dispatcher for domain events.

    Handlers run in subscription order on the caller's thread. Exceptions in
    handlers are logged but don't stop dispatch to other handlers.
    """

    def __init__(self):
        self._handlers: dict[type[DomainEvent], list[Callable]] = defaultdict(list)

    def subscribe(
        self,
        event_type: type[DomainEvent],
        handler: Callable[[DomainEvent], None],
    ):
        """Register a handler for an event type.

        Args:
            event_type: The event class to subscribe to
            handler: Callable that accepts the event
        """
        self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: type[DomainEvent], handler: Callable):
        """Unregister a handler from an event type."""
        if handler in self._handlers[event_type]:
            self._handlers[event_type].remove(handler)

    def publish(self, event: DomainEvent):
        """Dispatch event to all registered handlers.

        Args:
            event: The domain event to dispatch
        """
        handlers = self._handlers[type(event)]
        for handler in list(handlers):
            try:
                handler(event)
            except Exception as e:
                logger.error(
                    f"Event handler {getattr(handler, '__name__', handler)!s} failed for {event.__class__.__name__}: {e}",
                    exc_info=True,
                )
