"""Core package initialization."""
from stocktracker.core.config import settings
from stocktracker.core.database import Base, get_db, init_db
from stocktracker.core.redis import get_redis, close_redis

__all__ = ["settings", "Base", "get_db", "init_db", "get_redis", "close_redis"]
