"""
Motion classifier interface and a recorded implementation.

A classifier pushes MotionActivityEvents while the application is awake and
keeps a history that can be queried for a window of time, which is how motion
reported while location updates were paused gets recovered.
"""

import bisect
from abc import abstractmethod
from typing import List, Optional

from tripsense.core.bus import EventBus
from tripsense.core.events import EventType
from tripsense.engine.state import MotionEvent
from tripsense.events.inputs import MotionActivityEvent
from tripsense.providers.base import BaseProvider

class MotionClassifier(BaseProvider):
    """Source of classified motion reports."""

    @abstractmethod
    async def query_history(self, since: Optional[float], until: float,
                            latest_only: bool = False) -> List[MotionEvent]:
        """
        Return reports with since < timestamp <= until, oldest first.

        Args:
            since: Exclusive lower bound, or None for the start of history
            until: Inclusive upper bound
            latest_only: Return at most the most recent report in the window
        """

class RecordedMotionClassifier(MotionClassifier):
    """
    Motion classifier fed from recorded reports.

    Every report goes into the history. Reports are published live only when
    the caller says the application is awake to receive them.

    Args:
        event_bus: Bus to publish live reports on
    """

    def __init__(self, event_bus: EventBus, name: Optional[str] = None):
        super().__init__(name=name or "motion_classifier")
        self.event_bus = event_bus
        self._history: List[MotionEvent] = []
        self._timestamps: List[float] = []

        event_bus.registry.register_event(
            EventType.MOTION_ACTIVITY, MotionActivityEvent, "The motion classifier reported an activity"
        )
        event_bus.registry.register_producer(self.name, EventType.MOTION_ACTIVITY)

    async def _initialize_impl(self) -> None:
        pass

    async def _shutdown_impl(self) -> None:
        pass

    async def record(self, motion: MotionEvent, deliver: bool = True) -> None:
        """
        Add a report to the history and optionally publish it live.

        Args:
            motion: The classified report
            deliver: Whether to push it on the bus now
        """
        index = bisect.bisect_right(self._timestamps, motion.timestamp)
        self._timestamps.insert(index, motion.timestamp)
        self._history.insert(index, motion)

        if deliver:
            await self.event_bus.publish(
                MotionActivityEvent.from_motion_event(motion, producer_name=self.name),
                self.name
            )
        else:
            self.logger.debug("Motion queued", kind=motion.kind.value, at=motion.timestamp)

    async def query_history(self, since: Optional[float], until: float,
                            latest_only: bool = False) -> List[MotionEvent]:
        start = 0 if since is None else bisect.bisect_right(self._timestamps, since)
        end = bisect.bisect_right(self._timestamps, until)
        window = self._history[start:end]
        if latest_only:
            return window[-1:]
        return window
