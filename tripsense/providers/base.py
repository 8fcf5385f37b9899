"""
Base provider for the external collaborators that feed the engine.

A provider that cannot start (no sensor, permission denied) raises from
initialize(); the application treats that as fatal at startup. Once running,
a provider that has nothing to report simply publishes nothing.
"""

import asyncio
import structlog
from abc import ABC, abstractmethod
from typing import Optional

class BaseProvider(ABC):
    """
    Lifecycle shared by the location provider and the motion classifier.

    initialize() and shutdown() are serialized and idempotent; subclasses do
    their work in _initialize_impl() and _shutdown_impl().
    """

    def __init__(self, name: Optional[str] = None):
        self.name = name or self.__class__.__name__
        self.logger = structlog.get_logger(provider=self.name)
        self._initialized = False
        self._lock = asyncio.Lock()

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        async with self._lock:
            if self._initialized:
                self.logger.warning("Provider already initialized")
                return
            try:
                await self._initialize_impl()
            except Exception as e:
                self.logger.error("Provider failed to initialize", error=str(e), exc_info=True)
                raise
            self._initialized = True
            self.logger.info("Provider initialized")

    async def shutdown(self) -> None:
        async with self._lock:
            if not self._initialized:
                return
            try:
                await self._shutdown_impl()
            finally:
                self._initialized = False
            self.logger.info("Provider shut down")

    @abstractmethod
    async def _initialize_impl(self) -> None:
        """Acquire the underlying source."""

    @abstractmethod
    async def _shutdown_impl(self) -> None:
        """Release the underlying source."""
