"""
Registries for TripSense.

EventRegistry knows the schema of every event type that may travel on the bus
and which components produce and consume it. ServiceRegistry tracks the
running services and their lifecycle state.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Set, Type, Any, Optional
from .events import EventType, BaseEvent

@dataclass(frozen=True)
class EventSpec:
    schema: Type[BaseEvent]
    description: str

class EventRegistry:
    """
    Schemas and producer/consumer flows for every event type.

    Providers and services register the events they put on the bus when they
    are constructed, so several components may register the same type. They
    must agree on its schema.
    """

    def __init__(self):
        self._specs: Dict[EventType, EventSpec] = {}
        self._producers: Dict[EventType, Set[str]] = {}
        self._consumers: Dict[EventType, Set[str]] = {}
        self._logger = logging.getLogger(__name__)

    def register_event(self, event_type: EventType, event_schema: Type[BaseEvent], description: str):
        """
        Register an event type with its schema and description.

        Args:
            event_type: The type of event being registered
            event_schema: The pydantic model class for this event type
            description: Human-readable description of this event type

        Raises:
            TypeError: If the type is already registered with another schema
        """
        known = self._specs.get(event_type)
        if known is not None and known.schema is not event_schema:
            raise TypeError(
                f"{event_type} already registered with {known.schema.__name__}, "
                f"not {event_schema.__name__}"
            )
        self._specs[event_type] = EventSpec(event_schema, description)
        self._logger.debug(f"Registered event type: {event_type}")

    def register_producer(self, producer_name: str, event_type: EventType):
        self._producers.setdefault(event_type, set()).add(producer_name)

    def register_consumer(self, consumer_name: str, event_type: EventType):
        self._consumers.setdefault(event_type, set()).add(consumer_name)

    def validate_schema(self, event: BaseEvent) -> bool:
        """
        Check an event against the schema registered for its type.

        Raises:
            ValueError: If the event type was never registered
            TypeError: If the event is not an instance of the registered schema
        """
        spec = self._specs.get(event.type)
        if spec is None:
            raise ValueError(f"Unknown event type: {event.type}")
        if not isinstance(event, spec.schema):
            raise TypeError(f"{type(event).__name__} does not match schema "
                            f"{spec.schema.__name__} for {event.type}")
        return True

    def get_event_flow(self, event_type: EventType) -> Dict[str, Set[str]]:
        """Producers and consumers registered for an event type."""
        return {
            'producers': self._producers.get(event_type, set()),
            'consumers': self._consumers.get(event_type, set())
        }

    def describe(self) -> Dict[str, Dict[str, Any]]:
        """
        Summarize every registered event type, sorted by type.

        Returns:
            Mapping of event type to description, schema name, producers and consumers
        """
        return {
            EventType(event_type).value: {
                'description': spec.description,
                'schema': spec.schema.__name__,
                'producers': sorted(self._producers.get(event_type, set())),
                'consumers': sorted(self._consumers.get(event_type, set())),
            }
            for event_type, spec in sorted(self._specs.items(), key=lambda item: EventType(item[0]).value)
        }

class ServiceRegistry:
    """Services by name, with their lifecycle state."""

    def __init__(self):
        self._services: Dict[str, Any] = {}
        self._states: Dict[str, str] = {}
        self._logger = logging.getLogger(__name__)

    def register_service(self, service_name: str, service_instance: Any):
        self._services[service_name] = service_instance
        self._states[service_name] = "registered"
        self._logger.debug(f"Registered service: {service_name}")

    def set_service_state(self, service_name: str, state: str):
        self._states[service_name] = state
        self._logger.debug(f"Service {service_name} is {state}")

    def get_service_state(self, service_name: str) -> Optional[str]:
        return self._states.get(service_name)
