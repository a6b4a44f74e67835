"""Financial Modeling Prep quote provider implementation."""
import httpx
from typing import List, Optional
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log
)
import logging
from stocktracker.providers import QuoteProvider
from stocktracker.providers.models import Quote
from stocktracker.core.config import settings
from stocktracker.core.errors import UpstreamFailure


logger = logging.getLogger(__name__)


class FMPQuoteProvider(QuoteProvider):
    """Fetches company profiles for a fixed symbol list from financialmodelingprep.com."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        symbols: Optional[List[str]] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None
    ):
        self.api_key = api_key or settings.quote_api_key
        self.symbols = symbols or settings.quote_symbols_list
        self.base_url = (base_url or settings.quote_api_base_url).rstrip("/")
        self.client = httpx.AsyncClient(timeout=timeout or settings.request_timeout_seconds)

    @property
    def cache_key(self) -> str:
        return "quotes:" + ",".join(self.symbols)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.ConnectError)),
        before_sleep=before_sleep_log(logger, logging.WARNING)
    )
    async def _make_request(self, url: str, params: dict):
        """Make HTTP request with retry logic for transient failures.

        Timeouts and connection errors are retried up to 3 times with
        exponential backoff. HTTP status errors are not retried.
        """
        response = await self.client.get(url, params=params)
        response.raise_for_status()
        return response.json()

    async def get_quotes(self) -> List[Quote]:
        """Fetch profiles for all configured symbols."""
        url = f"{self.base_url}/profile/{','.join(self.symbols)}"
        params = {"apikey": self.api_key}

        try:
            data = await self._make_request(url, params)
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 429:
                raise UpstreamFailure("Quote API rate limit exceeded (429)")
            raise UpstreamFailure(f"Quote API error: {e.response.status_code}")
        except httpx.TimeoutException as e:
            raise UpstreamFailure(f"Quote API timeout after retries: {str(e)}")
        except httpx.HTTPError as e:
            raise UpstreamFailure(f"Quote API connection error: {str(e)}")
        except ValueError as e:
            # response.json() on a non-JSON body
            raise UpstreamFailure(f"Quote API returned invalid JSON: {str(e)}")

        if not isinstance(data, list):
            # FMP reports errors as {"Error Message": "..."}
            logger.error(f"Unexpected quote payload: {str(data)[:200]}")
            raise UpstreamFailure("Quote API returned an unexpected payload")

        try:
            quotes = [Quote.from_record(record) for record in data]
        except (ValueError, AttributeError) as e:
            raise UpstreamFailure(f"Malformed quote record: {str(e)}")

        logger.info(f"Fetched {len(quotes)} quotes from upstream")
        return quotes

    async def aclose(self):
        await self.client.aclose()
