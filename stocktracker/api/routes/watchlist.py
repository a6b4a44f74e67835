"""Watchlist management API routes."""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from stocktracker.core.database import get_db
from stocktracker.core.auth import get_current_user
from stocktracker.models.user import User
from stocktracker.schemas.watchlist import WatchlistUpdateRequest
from stocktracker.services.watchlist_service import WatchlistService

router = APIRouter(prefix="/api", tags=["watchlist"])


@router.get("/Watchlist")
async def get_watchlist(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Get the current user's watchlist.

    Requires authentication.
    """
    entries = await WatchlistService.list_entries(db, str(current_user.id))

    return [entry.to_dict() for entry in entries]


@router.post("/WatchlistUpdate", status_code=status.HTTP_201_CREATED)
async def update_watchlist(
    request: WatchlistUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Upsert every entry of the submitted watchlist.

    Requires authentication.
    """
    try:
        entries = await WatchlistService.upsert_batch(db, str(current_user.id), request.watchlist)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    return {
        "message": "Watchlist updated",
        "data": [entry.to_dict() for entry in entries]
    }


@router.delete("/Watchlist/{symbol}", status_code=status.HTTP_200_OK)
async def remove_from_watchlist(
    symbol: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Remove a stock from the current user's watchlist.

    Requires authentication. The symbol is matched case-insensitively.
    """
    try:
        symbol = await WatchlistService.remove_one(db, str(current_user.id), symbol)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    return {
        "message": "Stock removed from watchlist",
        "symbol": symbol
    }
