"""Configuration module for TicketAlert."""

from .settings import (
    DatabaseSettings,
    EmailSettings,
    ObservabilitySettings,
    Settings,
    SpotifySettings,
    SweepSettings,
    TicketmasterSettings,
    get_settings,
)

__all__ = [
    "DatabaseSettings",
    "EmailSettings",
    "ObservabilitySettings",
    "Settings",
    "SpotifySettings",
    "SweepSettings",
    "TicketmasterSettings",
    "get_settings",
]
