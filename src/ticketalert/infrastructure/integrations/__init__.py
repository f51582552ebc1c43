"""External API clients."""

from ticketalert.infrastructure.integrations.spotify_client import SpotifyClient
from ticketalert.infrastructure.integrations.ticketmaster_client import TicketmasterClient

__all__ = ["SpotifyClient", "TicketmasterClient"]
