"""
Main entry point for TripSense.

This module initializes the core components of the system and starts the application.
It handles signal management, logging setup, and system lifecycle. With a session
file the recorded motion and location stream is replayed through the pipeline;
without one the application idles until interrupted.
"""

import argparse
import asyncio
import logging
import signal
import sys
from typing import Dict, List, Optional

import structlog
from dotenv import load_dotenv

from tripsense.core import (
    EventRegistry, ServiceRegistry, EventBus, EventTracer, EventType, get_config
)
from tripsense.core.config import ApplicationConfig
from tripsense.core.service import BaseService
from tripsense.events.system import ApplicationStartupCompletedEvent
from tripsense.providers.location import SimulatedLocationProvider
from tripsense.providers.motion import RecordedMotionClassifier
from tripsense.providers.replay import SessionRecord, SessionReplayer, load_session
from tripsense.services.log_service import ActivityLogService
from tripsense.services.trip_service import TripDetectionService

def setup_logging(level: str = "INFO"):
    """Configure structured logging for the application."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level),
        stream=sys.stdout,
    )

class TripSenseApplication:
    """
    Main application class for TripSense.

    This class wires the event system, the providers and the services together
    and manages their lifecycle.

    Args:
        config: Application configuration
        records: Optional session records to replay after startup
        speed: Replay speed relative to recorded time; 0 replays without pauses
    """

    def __init__(self,
                 config: Optional[ApplicationConfig] = None,
                 records: Optional[List[SessionRecord]] = None,
                 speed: float = 0.0):
        self.logger = structlog.get_logger(app="tripsense")
        self.config = config or get_config()
        self.records = records

        self.event_registry = EventRegistry()
        self.service_registry = ServiceRegistry()

        if self.config.event.tracing_enabled:
            self.event_tracer = EventTracer(max_events=self.config.event.max_trace_events)
        else:
            self.event_tracer = None

        self.event_bus = EventBus(self.event_registry, self.event_tracer)
        self.event_registry.register_event(
            EventType.APPLICATION_STARTUP_COMPLETED,
            ApplicationStartupCompletedEvent,
            "All services started"
        )
        self.event_registry.register_producer("tripsense", EventType.APPLICATION_STARTUP_COMPLETED)

        self.location_provider = SimulatedLocationProvider(
            self.event_bus,
            distance_filter_meters=self.config.location.distance_filter_meters,
        )
        self.motion_classifier = RecordedMotionClassifier(self.event_bus)
        self.replayer = SessionReplayer(
            records or [], self.location_provider, self.motion_classifier, speed=speed
        )

        self.services: Dict[str, BaseService] = {}
        self._running = True
        self._stopped = False

    async def initialize(self):
        """Initialize providers and services and announce startup."""
        self.logger.info("Initializing TripSense")

        try:
            await self.location_provider.initialize()
            await self.motion_classifier.initialize()

            # log service first so it sees everything the engine emits
            self.services["activity_log"] = await self._init_service(ActivityLogService)
            self.services["trip_detection"] = await self._init_service(
                TripDetectionService,
                location_provider=self.location_provider,
                motion_classifier=self.motion_classifier,
            )

            await self.event_bus.publish(
                ApplicationStartupCompletedEvent(producer_name="tripsense"),
                "tripsense"
            )

            self.logger.debug("Event flows", flows=self.event_registry.describe())
            self.logger.info("TripSense initialization complete")

        except Exception as e:
            self.logger.error("Failed to initialize application", error=str(e), exc_info=True)
            raise

    async def _init_service(self, service_class, **kwargs):
        """
        Initialize and start a service.

        Args:
            service_class: The service class to initialize
            **kwargs: Additional arguments to pass to the service constructor

        Returns:
            The started service instance
        """
        service_name = service_class.__name__
        self.logger.info(f"Initializing service: {service_name}")

        service = service_class(
            event_bus=self.event_bus,
            service_registry=self.service_registry,
            config=self.config,
            **kwargs
        )

        try:
            await asyncio.wait_for(service.start(), timeout=self.config.service.service_startup_timeout)
            self.logger.info(f"Service started: {service_name}")
            return service
        except Exception as e:
            self.logger.error(f"Failed to start service: {service_name}",
                              error=str(e), exc_info=True)
            raise

    async def run(self):
        """Replay the session if one was given, otherwise idle until stopped."""
        try:
            if self.records is not None:
                await self.replayer.run()
                self._log_summary()
            else:
                while self._running:
                    await asyncio.sleep(1)

        except asyncio.CancelledError:
            self.logger.info("Application task cancelled")

        finally:
            await self.shutdown()

    def _log_summary(self):
        engine = self.services["trip_detection"].engine
        self.logger.info(
            "Session summary",
            active_kind=engine.state.active_kind.value if engine.state.active_kind else None,
            trip_in_progress=engine.state.trip_in_progress,
            geofence_armed=engine.state.geofence_armed,
            events=self.event_tracer.get_event_stats()['event_types'] if self.event_tracer else None,
        )

    async def shutdown(self):
        """Shut down all services and providers."""
        if self._stopped:
            return

        self._stopped = True
        self._running = False
        self.logger.info("Shutting down TripSense")

        for name, service in reversed(list(self.services.items())):
            try:
                self.logger.info(f"Stopping service: {name}")
                await asyncio.wait_for(service.stop(), timeout=self.config.service.service_shutdown_timeout)
            except Exception as e:
                self.logger.error(f"Error stopping service {name}: {e}")

        for provider in (self.motion_classifier, self.location_provider):
            if provider.is_initialized:
                await provider.shutdown()

        self.logger.info("TripSense shutdown complete")

    def handle_signal(self, sig):
        """
        Handle termination signals.

        Args:
            sig: The signal received
        """
        self.logger.info(f"Received signal {sig.name}, shutting down")
        self._running = False

        for task in asyncio.all_tasks():
            if task is not asyncio.current_task():
                task.cancel()

def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Detect trips from motion and location data")
    parser.add_argument("--session", help="JSON-lines session file to replay")
    parser.add_argument("--speed", type=float, default=0.0,
                        help="Replay speed relative to recorded time (0 = no pauses)")
    parser.add_argument("--log-level", default=None,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        help="Override the configured log level")
    return parser.parse_args(argv)

async def main(argv: Optional[List[str]] = None):
    """Application entry point."""
    load_dotenv()
    args = parse_args(argv)
    config = get_config()

    setup_logging(args.log_level or config.log_level.value)

    records = load_session(args.session) if args.session else None
    app = TripSenseApplication(config, records=records, speed=args.speed)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(
            sig, lambda s=sig: app.handle_signal(s))

    await app.initialize()
    await app.run()

def cli():
    try:
        asyncio.run(main())
    except Exception as e:
        logging.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)

if __name__ == "__main__":
    cli()
