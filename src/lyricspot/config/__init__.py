"""Configuration module for LyricSpot."""

from .settings import (
    DatabaseSettings,
    EnrichmentSettings,
    ITunesSettings,
    LoggingSettings,
    LrclibSettings,
    MusicBrainzSettings,
    Settings,
    StorageSettings,
    get_settings,
)

__all__ = [
    "DatabaseSettings",
    "EnrichmentSettings",
    "ITunesSettings",
    "LoggingSettings",
    "LrclibSettings",
    "MusicBrainzSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
]
