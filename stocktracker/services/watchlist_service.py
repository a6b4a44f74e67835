"""Watchlist service: list, batch upsert and delete of a user's tracked stocks."""
from typing import List, Sequence
from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import logging
import re

from stocktracker.models import WatchlistEntry
from stocktracker.schemas.watchlist import WatchlistItem
from stocktracker.core.errors import NotFound

logger = logging.getLogger(__name__)


# Exchange symbols: letters, digits and the usual class/index separators
SYMBOL_PATTERN = re.compile(r'^[A-Z0-9.\-^]{1,12}$')


def normalize_symbol(symbol: str) -> str:
    """
    Validate and normalize a ticker symbol.

    Every entry point (store, query, delete) goes through this so that
    "aapl", " AAPL " and "AAPL" all address the same row.

    Raises:
        ValueError: If symbol is empty or malformed
    """
    if not symbol or not symbol.strip():
        raise ValueError("Ticker symbol cannot be empty")

    normalized = symbol.strip().upper()

    if not SYMBOL_PATTERN.match(normalized):
        raise ValueError(f"Invalid ticker format: '{symbol}'")

    return normalized


class WatchlistService:
    """Service for per-user watchlist management."""

    @staticmethod
    async def list_entries(db: AsyncSession, user_id: str) -> List[WatchlistEntry]:
        """
        Get a user's watchlist in insertion order.

        Returns an empty list when the user tracks nothing.
        """
        result = await db.execute(
            select(WatchlistEntry)
            .where(WatchlistEntry.user_id == user_id)
            .order_by(WatchlistEntry.created_at, WatchlistEntry.id)
        )
        return list(result.scalars().all())

    @staticmethod
    async def upsert_batch(
        db: AsyncSession,
        user_id: str,
        entries: Sequence[WatchlistItem]
    ) -> List[WatchlistEntry]:
        """
        Insert or overwrite each entry, keyed by (user_id, symbol).

        Entries are processed in the given order and each one is committed on
        its own, so a failure part way leaves the earlier entries in place.
        Two entries with the same symbol in one batch leave the later one.

        Args:
            db: Database session
            user_id: Owning user
            entries: Items to store

        Returns:
            The user's full watchlist after the batch

        Raises:
            ValueError: If any symbol is malformed (checked before writing anything)
        """
        normalized = [(normalize_symbol(item.symbol), item) for item in entries]

        for symbol, item in normalized:
            fields = {
                "company_name": item.company_name,
                "price": item.price,
                "changes": item.changes,
                "vol_avg": item.vol_avg,
                "website": item.website or "",
            }
            await WatchlistService._upsert_one(db, user_id, symbol, fields)

        logger.info(f"Upserted {len(normalized)} watchlist entries for user {user_id}")
        return await WatchlistService.list_entries(db, user_id)

    @staticmethod
    async def _upsert_one(db: AsyncSession, user_id: str, symbol: str, fields: dict) -> None:
        for attempt in (1, 2):
            result = await db.execute(
                select(WatchlistEntry).where(
                    WatchlistEntry.user_id == user_id,
                    WatchlistEntry.symbol == symbol
                )
            )
            existing = result.scalar_one_or_none()

            if existing:
                for key, value in fields.items():
                    setattr(existing, key, value)
            else:
                db.add(WatchlistEntry(user_id=user_id, symbol=symbol, **fields))

            try:
                await db.commit()
                return
            except IntegrityError:
                # A concurrent request inserted the same symbol first
                await db.rollback()
                if attempt == 2:
                    raise
                logger.info(f"Concurrent insert of {symbol} for user {user_id}, retrying as update")

    @staticmethod
    async def remove_one(db: AsyncSession, user_id: str, symbol: str) -> str:
        """
        Remove a symbol from a user's watchlist.

        Returns:
            The normalized symbol that was removed

        Raises:
            ValueError: If symbol is malformed
            NotFound: If the user does not track this symbol
        """
        symbol = normalize_symbol(symbol)

        result = await db.execute(
            delete(WatchlistEntry).where(
                WatchlistEntry.user_id == user_id,
                WatchlistEntry.symbol == symbol
            )
        )
        await db.commit()

        if result.rowcount == 0:
            raise NotFound("Stock not found in watchlist")

        logger.info(f"Removed {symbol} from watchlist of user {user_id}")
        return symbol
