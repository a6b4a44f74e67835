"""Schemas for the watchlist endpoints."""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List


class WatchlistItem(BaseModel):
    """A stock as sent by the client.

    Accepts the camelCase keys of the quote records (``companyName``,
    ``volAvg``); any other quote fields are ignored.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    symbol: str
    company_name: str = Field(alias="companyName")
    price: float
    changes: Optional[float] = None
    vol_avg: Optional[float] = Field(default=None, alias="volAvg")
    website: Optional[str] = ""


class WatchlistUpdateRequest(BaseModel):
    """Full watchlist to upsert."""
    watchlist: List[WatchlistItem]
