"""Abstract interface for stock quote providers."""
from abc import ABC, abstractmethod
from typing import List
from stocktracker.providers.models import Quote


class QuoteProvider(ABC):
    """Abstract base class for stock quote data providers."""

    @abstractmethod
    async def get_quotes(self) -> List[Quote]:
        """
        Fetch the tracked universe of quote records.

        Returns:
            List of Quote records

        Raises:
            UpstreamFailure: If the source is unreachable or returns bad data
        """
        pass
