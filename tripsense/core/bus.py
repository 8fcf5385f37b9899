"""
Event bus for TripSense.

Events are validated against the registry, recorded by the tracer when one is
attached, then handed to each subscriber in subscription order. A handler that
raises is logged and skipped; the remaining handlers still get the event.
"""

import asyncio
import logging
from typing import Dict, List, Optional, Callable, Awaitable
from .events import EventType, BaseEvent
from .registry import EventRegistry
from .tracing import EventTracer

EventHandler = Callable[[BaseEvent], Awaitable[None]]

class EventBus:
    """
    Delivers typed events from producers to subscribed handlers.

    publish() returns only after every handler has finished with the event,
    including any events those handlers published in turn. Events published
    one after another therefore reach every subscriber in that order, which
    the trip detection pipeline depends on.

    Args:
        registry: Registry used to validate events and record consumers
        tracer: Optional tracer that records each accepted event
    """

    def __init__(self, registry: EventRegistry, tracer: Optional[EventTracer] = None):
        self.registry = registry
        self.tracer = tracer
        # None holds the handlers subscribed to every event type
        self.subscribers: Dict[Optional[EventType], List[EventHandler]] = {}
        self.logger = logging.getLogger(__name__)

    def _handlers_for(self, event_type: EventType) -> List[EventHandler]:
        return self.subscribers.get(event_type, []) + self.subscribers.get(None, [])

    async def publish(self, event: BaseEvent, sender: str) -> None:
        """
        Validate an event and deliver it to its subscribers.

        Args:
            event: The event to publish
            sender: Name of the publishing component, used when the event has no producer
        """
        if not event.producer_name:
            event.producer_name = sender

        try:
            self.registry.validate_schema(event)
        except (ValueError, TypeError) as e:
            self.logger.error(f"Dropping event from {sender}: {e}")
            return

        if self.tracer:
            self.tracer.record_event(event)

        handlers = self._handlers_for(event.type)
        if not handlers:
            self.logger.debug(f"No subscribers for event type: {event.type}")
            return

        for handler in handlers:
            await self._deliver_event(handler, event)

    async def _deliver_event(self, handler: EventHandler, event: BaseEvent) -> None:
        """
        Deliver an event to a single handler, logging anything it raises.

        Args:
            handler: The subscribed handler
            event: The event to deliver
        """
        try:
            await handler(event)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.logger.error(
                f"Handler {handler.__qualname__} failed on {event.type}: {e}",
                exc_info=True
            )

    def subscribe(self, event_type: Optional[EventType], handler: EventHandler, service_name: str) -> None:
        """
        Subscribe a handler to one event type, or to all of them when event_type is None.

        Args:
            event_type: The event type to subscribe to, or None for all events
            handler: Coroutine function called with each event
            service_name: Name of the subscribing service, recorded as a consumer
        """
        self.subscribers.setdefault(event_type, []).append(handler)
        if event_type is not None:
            self.registry.register_consumer(service_name, event_type)
        self.logger.debug(f"Service {service_name} subscribed to {event_type or 'all events'}")

    def unsubscribe(self, event_type: Optional[EventType], handler: EventHandler) -> None:
        """
        Remove a handler subscribed with subscribe(). Unknown handlers are ignored.

        Args:
            event_type: The event type it was subscribed to, or None for all events
            handler: The handler to remove
        """
        handlers = self.subscribers.get(event_type)
        if not handlers or handler not in handlers:
            return
        handlers.remove(handler)
        if not handlers:
            del self.subscribers[event_type]
