"""Core configuration management using Pydantic settings."""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import model_validator, field_validator
from typing import Optional, List
import logging


logger = logging.getLogger(__name__)

# Valid log levels
VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']

DEFAULT_JWT_SECRET = "stocktracker-dev-secret-change-me-in-production"

DEFAULT_QUOTE_SYMBOLS = (
    "AAPL,MSFT,GOOGL,AMZN,TSLA,META,NFLX,NVDA,AMD,INTC,BA,DIS,UBER,LYFT,"
    "PYPL,SQ,SHOP,ORCL,IBM,SPOT,PLTR,CRM,CSCO,ADBE,QCOM"
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Database
    database_url: str = "sqlite+aiosqlite:///./data/stocktracker.db"

    # Redis (optional, enables the quote cache)
    redis_url: Optional[str] = None

    # Logging
    log_level: str = "INFO"

    # JWT Authentication
    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: Optional[int] = 1440  # 24 hours, None disables expiry

    # Password policy
    bcrypt_rounds: int = 12
    min_password_length: int = 8

    # Registration Control
    registration_enabled: bool = True

    # API Configuration
    backend_port: int = 3500

    # CORS Configuration
    cors_origins: str = "http://localhost:3000,http://localhost:3001"  # Comma-separated list of allowed origins

    # External quote source
    quote_api_base_url: str = "https://financialmodelingprep.com/api/v3"
    quote_api_key: str = "demo"
    quote_symbols: str = DEFAULT_QUOTE_SYMBOLS
    quote_cache_ttl_seconds: int = 60
    request_timeout_seconds: float = 10.0

    # Profile icons
    max_icon_bytes: int = 5 * 1024 * 1024

    @field_validator('access_token_expire_minutes', mode='before')
    @classmethod
    def parse_token_expiry(cls, v):
        """An empty value or 'none' in the environment disables expiry."""
        if v is None:
            return None
        if isinstance(v, str) and v.strip().lower() in ("", "none", "null"):
            return None
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid Python logging level."""
        upper_v = v.upper()
        if upper_v not in VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {VALID_LOG_LEVELS}")
        return upper_v

    @field_validator('bcrypt_rounds')
    @classmethod
    def validate_bcrypt_rounds(cls, v: int) -> int:
        """bcrypt cost factor must stay in the slow-hash range."""
        if not 10 <= v <= 31:
            raise ValueError(f"bcrypt_rounds must be between 10 and 31, got {v}")
        return v

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string to list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def quote_symbols_list(self) -> List[str]:
        """Parse quote symbols from comma-separated string to list."""
        return [s.strip().upper() for s in self.quote_symbols.split(",") if s.strip()]

    @model_validator(mode='after')
    def validate_config(self) -> 'Settings':
        """Validate configuration after all fields are set."""
        # Validate JWT secret strength
        if len(self.jwt_secret) < 32:
            raise ValueError("JWT secret must be at least 32 characters for security")
        if self.jwt_secret == DEFAULT_JWT_SECRET:
            logger.warning("JWT_SECRET is not set, using the built-in development secret")
        return self


# Global settings instance
settings = Settings()
