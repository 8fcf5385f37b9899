"""
Base service implementation for TripSense.

A service declares the events it produces and consumes as class tables.
BaseService registers those with the bus on construction, subscribes the
consuming handlers on start and announces every lifecycle transition with a
ServiceStateChangedEvent.
"""

import asyncio
import structlog
from abc import ABC, abstractmethod
from typing import Dict, Iterator, Any, Optional, ClassVar, Tuple
from .events import EventType, BaseEvent
from .registry import ServiceRegistry
from .bus import EventBus, EventHandler

class BaseService(ABC):
    """
    Base class for the services wired into the application.

    Subclasses fill in:
    - PRODUCES_EVENTS: event type to {'schema': event class, 'description': str}
    - CONSUMES_EVENTS: event type to the name of the handler method

    Args:
        event_bus: Bus to publish on and subscribe to
        service_registry: Registry tracking service state
        name: Service name (defaults to the class name)
        config: Application configuration
    """

    PRODUCES_EVENTS: ClassVar[Dict[EventType, Dict[str, Any]]] = {}
    CONSUMES_EVENTS: ClassVar[Dict[EventType, str]] = {}

    def __init__(self,
                 event_bus: EventBus,
                 service_registry: ServiceRegistry,
                 name: Optional[str] = None,
                 config: Optional[Any] = None):
        from tripsense.events.system import ServiceStateChangedEvent

        self.event_bus = event_bus
        self.service_registry = service_registry
        self.name = name or self.__class__.__name__
        self.config = config
        self.logger = structlog.get_logger(service=self.name)

        self._running = False
        self._lock = asyncio.Lock()

        produced = {
            EventType.SERVICE_STATE_CHANGED: {
                'schema': ServiceStateChangedEvent,
                'description': "A service changed lifecycle state"
            },
            **self.PRODUCES_EVENTS,
        }
        for event_type, info in produced.items():
            event_bus.registry.register_event(event_type, info['schema'], info['description'])
            event_bus.registry.register_producer(self.name, event_type)

        service_registry.register_service(self.name, self)

    @property
    def is_running(self) -> bool:
        return self._running

    def _subscriptions(self) -> Iterator[Tuple[EventType, EventHandler]]:
        for event_type, handler_name in self.CONSUMES_EVENTS.items():
            yield event_type, getattr(self, handler_name)

    async def start(self) -> None:
        """Run service-specific startup, then subscribe to consumed events."""
        async with self._lock:
            if self._running:
                self.logger.warning("Service already running")
                return

            await self._on_start()
            for event_type, handler in self._subscriptions():
                self.event_bus.subscribe(event_type, handler, self.name)

            self._running = True
            await self._transition('running', 'started')

    async def stop(self) -> None:
        """Unsubscribe from consumed events, then run service-specific cleanup."""
        async with self._lock:
            if not self._running:
                self.logger.warning("Service already stopped")
                return

            await self.publish_service_state('stopping')
            for event_type, handler in self._subscriptions():
                self.event_bus.unsubscribe(event_type, handler)
            await self._on_stop()

            self._running = False
            await self._transition('stopped', 'stopped')

    async def _transition(self, registry_state: str, announced: str) -> None:
        self.service_registry.set_service_state(self.name, registry_state)
        self.logger.info(f"Service {announced}")
        await self.publish_service_state(announced)

    async def _on_start(self) -> None:
        """Service-specific startup; the default does nothing."""

    async def _on_stop(self) -> None:
        """Service-specific cleanup; the default does nothing."""

    async def publish(self, event: BaseEvent) -> None:
        """Publish an event as this service. Ignored with a warning once stopped."""
        if not self._running:
            self.logger.warning("Attempted publish while stopped", event_type=event.type)
            return
        await self.event_bus.publish(event, self.name)

    async def publish_service_state(self, state: str) -> None:
        from tripsense.events.system import ServiceStateChangedEvent

        await self.event_bus.publish(
            ServiceStateChangedEvent(producer_name=self.name, service_name=self.name, state=state),
            self.name
        )

    @abstractmethod
    async def handle_event(self, event: BaseEvent) -> None:
        """
        Handle an event delivered from the bus.

        Args:
            event: One of the event types listed in CONSUMES_EVENTS
        """
