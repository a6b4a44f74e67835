"""Request/response schemas shared by the API and the client."""
from stocktracker.schemas.watchlist import WatchlistItem, WatchlistUpdateRequest

__all__ = ["WatchlistItem", "WatchlistUpdateRequest"]
