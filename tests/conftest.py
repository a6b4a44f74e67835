"""Shared pytest fixtures and test environment."""
import os

# Must be set before stocktracker.core.config is imported
os.environ.setdefault("JWT_SECRET", "test-secret-key-with-at-least-32-characters!")
os.environ.setdefault("BCRYPT_ROUNDS", "10")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ["REDIS_URL"] = ""

import pytest
from unittest.mock import AsyncMock, MagicMock
from datetime import datetime

from stocktracker.models.user import User
from stocktracker.models.watchlist import WatchlistEntry
from stocktracker.schemas.watchlist import WatchlistItem


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def mock_user():
    """Create a mock user."""
    user = MagicMock(spec=User)
    user.id = "user-123"
    user.username = "alice"
    user.name = "Alice A"
    user.email = "alice@example.com"
    user.password_hash = "hashed_password"
    user.icon = None
    user.created_at = datetime(2025, 1, 1, 12, 0, 0)
    user.summary.return_value = {
        "id": "user-123",
        "username": "alice",
        "name": "Alice A",
        "email": "alice@example.com",
    }
    return user


def make_item(symbol: str = "AAPL", price: float = 190.5, **overrides) -> WatchlistItem:
    """Factory for watchlist items as the client sends them."""
    fields = {
        "symbol": symbol,
        "companyName": overrides.pop("companyName", f"{symbol.upper()} Corp"),
        "price": price,
        "changes": overrides.pop("changes", 1.25),
        "volAvg": overrides.pop("volAvg", 1_000_000),
        "website": overrides.pop("website", "https://example.com"),
    }
    fields.update(overrides)
    return WatchlistItem(**fields)


def make_entry(symbol: str = "AAPL", price: float = 190.5, user_id: str = "user-123") -> WatchlistEntry:
    """Factory for stored watchlist rows."""
    return WatchlistEntry(
        user_id=user_id,
        symbol=symbol,
        company_name=f"{symbol.upper()} Corp",
        price=price,
        changes=1.25,
        vol_avg=1_000_000,
        website="https://example.com",
    )


def scalar_result(value):
    """Mock result of db.execute(...) for scalar_one_or_none()."""
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


def scalars_result(values):
    """Mock result of db.execute(...) for scalars().all()."""
    result = MagicMock()
    result.scalars.return_value.all.return_value = values
    return result
