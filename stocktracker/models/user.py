"""User model."""
from sqlalchemy import Column, String, DateTime, Text
from sqlalchemy.orm import relationship, validates
from datetime import datetime, timezone
import uuid
from stocktracker.core.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """Registered account. Username and email are each globally unique."""

    __tablename__ = "users"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    username = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    icon = Column(Text, nullable=True)  # data:<mime>;base64,<payload>
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    watchlist = relationship(
        "WatchlistEntry",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="WatchlistEntry.id",
    )

    @validates('username', 'name')
    def validate_trimmed(self, key, value):
        """Store trimmed values."""
        if value is None:
            raise ValueError(f"{key} is required")
        value = value.strip()
        if not value:
            raise ValueError(f"{key} cannot be empty")
        return value

    @validates('email')
    def validate_email(self, key, value):
        """Emails are stored trimmed and lowercased."""
        if value is None:
            raise ValueError("email is required")
        return value.strip().lower()

    def summary(self) -> dict:
        """Public user summary returned by the auth endpoints."""
        return {
            "id": str(self.id),
            "username": self.username,
            "name": self.name,
            "email": self.email,
        }
