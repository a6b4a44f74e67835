"""Data models for external quote records."""
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


def _as_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass
class Quote:
    """Company profile + price snapshot for one symbol."""
    symbol: str
    company_name: str
    price: Optional[float]
    changes: Optional[float] = None
    vol_avg: Optional[float] = None
    website: Optional[str] = None
    sector: Optional[str] = None
    industry: Optional[str] = None
    market_cap: Optional[float] = None
    beta: Optional[float] = None
    last_div: Optional[float] = None
    range: Optional[str] = None
    changes_percentage: Optional[str] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Quote":
        """
        Build a Quote from a raw profile record.

        Raises:
            ValueError: If the record has no symbol
        """
        symbol = (record.get("symbol") or "").strip().upper()
        if not symbol:
            raise ValueError(f"Quote record without symbol: {record!r}")

        changes_pct = record.get("changesPercentage")
        return cls(
            symbol=symbol,
            company_name=record.get("companyName") or symbol,
            price=_as_float(record.get("price")),
            changes=_as_float(record.get("changes")),
            vol_avg=_as_float(record.get("volAvg")),
            website=record.get("website"),
            sector=record.get("sector"),
            industry=record.get("industry"),
            market_cap=_as_float(record.get("mktCap", record.get("marketCap"))),
            beta=_as_float(record.get("beta")),
            last_div=_as_float(record.get("lastDiv")),
            range=record.get("range"),
            changes_percentage=None if changes_pct is None else str(changes_pct),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Wire form with the camelCase keys the client expects."""
        return {
            "symbol": self.symbol,
            "companyName": self.company_name,
            "price": self.price,
            "changes": self.changes,
            "volAvg": self.vol_avg,
            "website": self.website,
            "sector": self.sector,
            "industry": self.industry,
            "marketCap": self.market_cap,
            "beta": self.beta,
            "lastDiv": self.last_div,
            "range": self.range,
            "changesPercentage": self.changes_percentage,
        }

    def to_cache(self) -> Dict[str, Any]:
        return asdict(self)
