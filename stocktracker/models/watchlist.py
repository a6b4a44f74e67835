"""Watchlist entry model linking users to the stocks they track."""
from sqlalchemy import Column, String, Float, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship, validates
from stocktracker.core.database import Base
from stocktracker.models.user import utcnow


class WatchlistEntry(Base):
    """One tracked symbol for one user.

    The (user_id, symbol) pair is unique: re-adding a symbol overwrites the
    existing row instead of creating a duplicate.
    """

    __tablename__ = "watchlist_entries"
    __table_args__ = (
        UniqueConstraint("user_id", "symbol", name="uq_watchlist_user_symbol"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    symbol = Column(String, nullable=False, index=True)
    company_name = Column(String, nullable=False)
    price = Column(Float, nullable=False)
    changes = Column(Float, nullable=True)
    vol_avg = Column(Float, nullable=True)
    website = Column(String, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="watchlist")

    @validates('symbol')
    def validate_symbol(self, key, value):
        """Symbols are stored trimmed and uppercased."""
        return value.strip().upper()

    @validates('company_name', 'website')
    def validate_trimmed(self, key, value):
        return (value or "").strip()

    def to_dict(self) -> dict:
        """Wire form, using the camelCase keys the client expects."""
        return {
            "symbol": self.symbol,
            "companyName": self.company_name,
            "price": self.price,
            "changes": self.changes,
            "volAvg": self.vol_avg,
            "website": self.website,
        }
