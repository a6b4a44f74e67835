"""Models package initialization."""
from stocktracker.models.user import User
from stocktracker.models.watchlist import WatchlistEntry

__all__ = [
    "User",
    "WatchlistEntry",
]
