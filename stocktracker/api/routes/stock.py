"""Stock quote proxy route."""
from typing import Optional
from fastapi import APIRouter, Depends
import logging

from stocktracker.core.config import settings
from stocktracker.providers import QuoteProvider
from stocktracker.providers.cache import CachedQuoteProvider
from stocktracker.providers.fmp import FMPQuoteProvider

router = APIRouter(prefix="/api", tags=["stocks"])
logger = logging.getLogger(__name__)

_quote_provider: Optional[CachedQuoteProvider] = None


def get_quote_provider() -> QuoteProvider:
    """FastAPI dependency returning the shared (cached) quote provider."""
    global _quote_provider
    if _quote_provider is None:
        _quote_provider = CachedQuoteProvider(
            FMPQuoteProvider(),
            ttl_seconds=settings.quote_cache_ttl_seconds
        )
    return _quote_provider


async def close_quote_provider():
    global _quote_provider
    if _quote_provider is not None:
        await _quote_provider.aclose()
        _quote_provider = None


@router.get("/Stock")
async def get_stocks(provider: QuoteProvider = Depends(get_quote_provider)):
    """
    List quote records for the tracked symbol universe.

    Upstream failures surface as UpstreamFailure (500).
    """
    quotes = await provider.get_quotes()
    return [quote.to_dict() for quote in quotes]
