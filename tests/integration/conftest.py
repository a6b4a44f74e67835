"""Pytest fixtures for integration tests against in-memory SQLite and the ASGI app."""
import pytest
import httpx
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool
import logging

from stocktracker.core.database import Base, get_db
from stocktracker.core.errors import UpstreamFailure
from stocktracker.providers import QuoteProvider
from stocktracker.providers.models import Quote
import stocktracker.models  # noqa: F401

logger = logging.getLogger(__name__)


STUB_QUOTES = [
    Quote(symbol="AAPL", company_name="Apple Inc.", price=190.5, changes=1.2, vol_avg=55000000,
          website="https://www.apple.com", sector="Technology"),
    Quote(symbol="MSFT", company_name="Microsoft Corporation", price=410.1, changes=-0.8, vol_avg=21000000,
          website="https://www.microsoft.com", sector="Technology"),
    Quote(symbol="TSLA", company_name="Tesla, Inc.", price=250.0, changes=4.5, vol_avg=98000000,
          website="https://www.tesla.com", sector="Consumer Cyclical"),
]


class StubQuoteProvider(QuoteProvider):
    """Quote provider serving a fixed list, or failing on demand."""

    def __init__(self, quotes=None, fail=False):
        self.quotes = list(STUB_QUOTES if quotes is None else quotes)
        self.fail = fail
        self.calls = 0

    async def get_quotes(self):
        self.calls += 1
        if self.fail:
            raise UpstreamFailure()
        return self.quotes


@pytest.fixture(scope="function")
async def test_engine():
    """
    Create a fresh in-memory database for each test.

    StaticPool keeps a single connection so every session sees the same
    in-memory database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    logger.debug("Disposing test engine")
    await engine.dispose()


@pytest.fixture(scope="function")
def session_factory(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False
    )


@pytest.fixture(scope="function")
async def test_db(session_factory):
    """Create a database session for service-level tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def quote_provider():
    return StubQuoteProvider()


@pytest.fixture
async def api_client(session_factory, quote_provider):
    """HTTP client wired to the app with the test database and stub quotes."""
    from stocktracker.api.main import app
    from stocktracker.api.routes.stock import get_quote_provider

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_quote_provider] = lambda: quote_provider

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


async def signup_user(client, username="alice", email="alice@example.com", password="password123", name="Alice A"):
    """Create an account through the API and return its token."""
    response = await client.post("/api/signup", json={
        "username": username,
        "name": name,
        "email": email,
        "password": password,
    })
    assert response.status_code == 200, response.text
    return response.json()["token"]


def bearer(token):
    return {"Authorization": f"Bearer {token}"}
