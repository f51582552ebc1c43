"""TicketAlert Norge: concert browsing, Spotify matching and resale alerts."""

__version__ = "0.1.0"
