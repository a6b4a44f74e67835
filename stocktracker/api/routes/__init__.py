"""API routes package initialization."""
from stocktracker.api.routes import auth, watchlist, stock, profile, health

__all__ = ["auth", "watchlist", "stock", "profile", "health"]
