"""
Configuration management for TripSense.

This module provides Pydantic settings models for type-safe configuration with
validation and environment variable integration.
"""

from typing import Dict
from enum import Enum
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tripsense.engine.activity import (
    ActivityKind, DEFAULT_MIN_DWELL_SECONDS, DEFAULT_MIN_DISPLACEMENT_METERS
)

class LogLevel(str, Enum):
    """Log levels for the application."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

class BacklogMode(str, Enum):
    """How much of the classifier backlog to replay after leaving the geofence."""
    ALL = "all"
    LATEST = "latest"

class BaseConfig(BaseSettings):
    """
    Base configuration class with common settings for all components.

    All other configuration classes should inherit from this class.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="TRIPSENSE_",
        extra="ignore",
    )

    debug: bool = False
    log_level: LogLevel = LogLevel.INFO

class EventConfig(BaseConfig):
    """Configuration for the event system."""
    model_config = SettingsConfigDict(env_prefix="TRIPSENSE_EVENT_")

    max_trace_events: int = 1000
    tracing_enabled: bool = True

    @field_validator("max_trace_events")
    @classmethod
    def validate_max_trace_events(cls, v):
        """Validate the trace buffer holds at least one event."""
        if v < 1:
            raise ValueError("max_trace_events must be at least 1")
        return v

class ServiceConfig(BaseConfig):
    """Configuration for service management."""
    model_config = SettingsConfigDict(env_prefix="TRIPSENSE_SERVICE_")

    service_startup_timeout: float = 10.0  # seconds
    service_shutdown_timeout: float = 5.0  # seconds

class ActivityConfig(BaseConfig):
    """
    Per-activity dwell and displacement thresholds.

    Overrides are merged onto the defaults, so setting
    TRIPSENSE_ACTIVITY_MIN_DWELL_SECONDS='{"walking": 45}' only changes walking.
    """
    model_config = SettingsConfigDict(env_prefix="TRIPSENSE_ACTIVITY_")

    min_dwell_seconds: Dict[ActivityKind, float] = Field(
        default_factory=lambda: dict(DEFAULT_MIN_DWELL_SECONDS)
    )
    min_displacement_meters: Dict[ActivityKind, float] = Field(
        default_factory=lambda: dict(DEFAULT_MIN_DISPLACEMENT_METERS)
    )

    @field_validator("min_dwell_seconds")
    @classmethod
    def validate_min_dwell_seconds(cls, v):
        """Fill in missing kinds and reject negative durations."""
        merged = {**DEFAULT_MIN_DWELL_SECONDS, **v}
        for kind, seconds in merged.items():
            if seconds < 0:
                raise ValueError(f"min dwell for {kind.value} must not be negative")
        return merged

    @field_validator("min_displacement_meters")
    @classmethod
    def validate_min_displacement_meters(cls, v):
        """Fill in missing kinds, reject negative distances and keep stopped at zero."""
        merged = {**DEFAULT_MIN_DISPLACEMENT_METERS, **v}
        for kind, meters in merged.items():
            if meters < 0:
                raise ValueError(f"min displacement for {kind.value} must not be negative")
        if merged[ActivityKind.STOPPED] != 0:
            raise ValueError("min displacement for stopped must be 0")
        return merged

class TripConfig(BaseConfig):
    """Configuration for trip detection and geofencing."""
    model_config = SettingsConfigDict(env_prefix="TRIPSENSE_TRIP_")

    geofence_radius_meters: float = 30.0
    backlog_mode: BacklogMode = BacklogMode.ALL
    poll_backlog_on_fix: bool = True
    log_history: int = 500  # lines kept per log pane

    @field_validator("geofence_radius_meters")
    @classmethod
    def validate_geofence_radius(cls, v):
        """Validate the geofence radius is positive."""
        if v <= 0:
            raise ValueError("geofence_radius_meters must be positive")
        return v

class LocationConfig(BaseConfig):
    """Configuration for the location provider."""
    model_config = SettingsConfigDict(env_prefix="TRIPSENSE_LOCATION_")

    distance_filter_meters: float = 5.0

    @field_validator("distance_filter_meters")
    @classmethod
    def validate_distance_filter(cls, v):
        if v < 0:
            raise ValueError("distance_filter_meters must not be negative")
        return v

class ApplicationConfig(BaseConfig):
    """
    Main application configuration that combines all component configurations.

    This is the top-level configuration class that should be used by the application.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="TRIPSENSE_",
        env_nested_delimiter="__",
    )

    event: EventConfig = Field(default_factory=EventConfig)
    service: ServiceConfig = Field(default_factory=ServiceConfig)
    activity: ActivityConfig = Field(default_factory=ActivityConfig)
    trip: TripConfig = Field(default_factory=TripConfig)
    location: LocationConfig = Field(default_factory=LocationConfig)

def get_config() -> ApplicationConfig:
    """
    Get the application configuration.

    Returns:
        The validated ApplicationConfig instance
    """
    return ApplicationConfig()
