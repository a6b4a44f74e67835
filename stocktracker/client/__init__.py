"""Python client for the StockTracker API."""
from stocktracker.client.sync import WatchlistSync
from stocktracker.client.token_store import TokenStore, MemoryTokenStore, FileTokenStore

__all__ = ["WatchlistSync", "TokenStore", "MemoryTokenStore", "FileTokenStore"]
