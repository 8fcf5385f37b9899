"""
Session replay.

A session is a JSON-lines file of recorded motion reports and location fixes:

    {"type": "motion", "kind": "walking", "confidence": "high", "timestamp": 0}
    {"type": "location", "latitude": 52.37, "longitude": 4.89, "horizontal_accuracy": 5, "timestamp": 1}

Blank lines and lines starting with '#' are skipped. Records are replayed in
file order through the simulated providers, so motion reported while the
geofence has location updates paused queues in the classifier history
instead of being delivered live.
"""

import asyncio
import json
from pathlib import Path
from typing import Iterable, List, Optional, Union

import structlog
from pydantic import ValidationError

from tripsense.engine.state import LocationFix, MotionEvent
from tripsense.events.inputs import LocationFixEvent, MotionActivityEvent
from tripsense.providers.location import SimulatedLocationProvider
from tripsense.providers.motion import RecordedMotionClassifier

SessionRecord = Union[MotionEvent, LocationFix]

class SessionFormatError(ValueError):
    """A session line could not be parsed."""

def parse_session(lines: Iterable[str]) -> List[SessionRecord]:
    """
    Parse session lines into engine inputs.

    Raises:
        SessionFormatError: naming the first line that is not a valid record
    """
    records: List[SessionRecord] = []
    for number, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        try:
            data = json.loads(line)
        except json.JSONDecodeError as e:
            raise SessionFormatError(f"line {number}: invalid JSON ({e.msg})") from e
        if not isinstance(data, dict):
            raise SessionFormatError(f"line {number}: expected an object")

        record_type = data.pop("type", None)
        if "timestamp" not in data:
            raise SessionFormatError(f"line {number}: missing timestamp")
        try:
            if record_type == "motion":
                records.append(MotionActivityEvent(**data).to_motion_event())
            elif record_type == "location":
                records.append(LocationFixEvent(**data).to_fix())
            else:
                raise SessionFormatError(f"line {number}: unknown record type {record_type!r}")
        except ValidationError as e:
            raise SessionFormatError(f"line {number}: {e.errors()[0]['msg']}") from e
    return records

def load_session(path: Union[str, Path]) -> List[SessionRecord]:
    with open(path, "r", encoding="utf-8") as f:
        return parse_session(f)

class SessionReplayer:
    """
    Drives the simulated providers from recorded session records.

    Args:
        records: Parsed session records
        location_provider: Provider that receives location fixes
        motion_classifier: Classifier that receives motion reports
        speed: Replay speed relative to recorded time; 0 replays without pauses
    """

    def __init__(self,
                 records: List[SessionRecord],
                 location_provider: SimulatedLocationProvider,
                 motion_classifier: RecordedMotionClassifier,
                 speed: float = 0.0):
        self.records = records
        self.location_provider = location_provider
        self.motion_classifier = motion_classifier
        self.speed = speed
        self.logger = structlog.get_logger(component="session_replayer")

    async def run(self) -> int:
        """
        Replay every record.

        Returns:
            Number of records replayed
        """
        self.logger.info("Replaying session", records=len(self.records), speed=self.speed)
        previous: Optional[float] = None
        for record in self.records:
            if self.speed > 0 and previous is not None and record.timestamp > previous:
                await asyncio.sleep((record.timestamp - previous) / self.speed)
            previous = record.timestamp

            if isinstance(record, MotionEvent):
                await self.motion_classifier.record(
                    record, deliver=self.location_provider.is_updating
                )
            else:
                await self.location_provider.deliver(record)

        self.logger.info("Session replay complete", records=len(self.records))
        return len(self.records)
