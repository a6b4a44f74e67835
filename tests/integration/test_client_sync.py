"""Integration tests for the WatchlistSync client against the ASGI app."""
import httpx
import pytest

from stocktracker.client.sync import NETWORK_ERROR, WatchlistSync
from stocktracker.client.token_store import MemoryTokenStore
from tests.integration.conftest import signup_user


@pytest.fixture
def sync(api_client):
    return WatchlistSync(client=api_client, token_store=MemoryTokenStore())


def failing_client(status_code=500, exc=None, calls=None):
    def handler(request):
        if calls is not None:
            calls.append(request)
        if exc is not None:
            raise exc
        return httpx.Response(status_code, json={"detail": "boom"})

    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test")


@pytest.mark.integration
@pytest.mark.asyncio
class TestWatchlistSync:
    """Client session against a live app."""

    async def test_anonymous_mount(self, sync):
        """✅ No token → quotes loaded, no watchlist."""
        await sync.mount()

        assert sync.is_auth is False
        assert sync.is_loading is False
        assert [s["symbol"] for s in sync.stocks] == ["AAPL", "MSFT", "TSLA"]
        assert sync.filtered_stocks == sync.stocks
        assert sync.watchlist == []

    async def test_signup_then_mount(self, sync):
        """✅ Signup stores the token and mount restores the session."""
        errors = await sync.signup("alice", "Alice A", "alice@example.com", "password123")

        assert errors == {}
        assert sync.token_store.get()

        await sync.mount()
        assert sync.is_auth is True
        assert sync.user["username"] == "alice"

    async def test_add_and_remove(self, sync):
        """✅ Mutations round-trip through the server."""
        await sync.signup("alice", "Alice A", "alice@example.com", "password123")
        await sync.mount()

        aapl, msft = sync.stocks[0], sync.stocks[1]
        await sync.add(aapl)
        await sync.add(msft)
        assert [s["symbol"] for s in sync.watchlist] == ["AAPL", "MSFT"]

        await sync.remove(aapl)
        assert [s["symbol"] for s in sync.watchlist] == ["MSFT"]

    async def test_add_duplicate_is_noop(self, sync, api_client):
        """✅ Adding a tracked symbol sends nothing."""
        await sync.signup("alice", "Alice A", "alice@example.com", "password123")
        await sync.mount()
        await sync.add(sync.stocks[0])

        calls = []
        sync.client = failing_client(calls=calls)
        await sync.add({**sync.stocks[0], "symbol": "aapl"})

        assert calls == []
        assert [s["symbol"] for s in sync.watchlist] == ["AAPL"]
        await sync.client.aclose()

    async def test_search(self, sync):
        """✅ Search filters by symbol or company name, case-insensitively."""
        await sync.receive_stocks()

        assert [s["symbol"] for s in sync.search("micro")] == ["MSFT"]
        assert [s["symbol"] for s in sync.search("tsl")] == ["TSLA"]
        assert len(sync.search("")) == 3
        assert sync.search_value == ""

    async def test_login_errors(self, sync, api_client):
        """✅ Wrong password → form error, no token stored."""
        await signup_user(api_client)

        errors = await sync.login("alice@example.com", "wrong-password")

        assert errors == {"form": "Invalid credentials"}
        assert sync.token_store.get() is None

    async def test_login_validation_short_circuits(self, sync):
        """✅ Invalid form input is reported without a request."""
        sync.client = failing_client(exc=httpx.ConnectError("unreachable"))

        errors = await sync.login("not-an-email", "")

        assert set(errors) == {"email", "password"}
        await sync.client.aclose()

    async def test_signup_conflict(self, sync, api_client):
        """✅ Duplicate email → error keyed by the conflicting field."""
        await signup_user(api_client)

        errors = await sync.signup("alice2", "Alice", "alice@example.com", "password123")

        assert errors == {"email": "Email already in use"}

    async def test_update_password(self, sync):
        await sync.signup("alice", "Alice A", "alice@example.com", "password123")

        assert await sync.update_password("password123") == (False, "New password is the same as the old password")
        assert await sync.update_password("brand-new-pass") == (True, "Password updated successfully")

    async def test_logout(self, sync):
        await sync.signup("alice", "Alice A", "alice@example.com", "password123")
        await sync.mount()

        sync.logout()

        assert sync.is_auth is False
        assert sync.token_store.get() is None
        assert sync.watchlist == []


@pytest.mark.integration
@pytest.mark.asyncio
class TestWatchlistSyncDegradation:
    """Failures degrade state instead of raising."""

    async def test_server_errors(self):
        """✅ 500s → empty quotes, empty watchlist, token dropped."""
        sync = WatchlistSync(client=failing_client(), token_store=MemoryTokenStore("stale-token"))

        await sync.mount()

        assert sync.is_auth is False
        assert sync.token_store.get() is None
        assert sync.stocks == []
        assert sync.watchlist == []
        await sync.aclose()

    async def test_network_error_on_login(self):
        """✅ Unreachable server → generic form error."""
        client = failing_client(exc=httpx.ConnectError("unreachable"))

        async with WatchlistSync(client=client) as sync:
            errors = await sync.login("alice@example.com", "password123")

        assert errors == {"form": NETWORK_ERROR}

    async def test_watchlist_without_token(self):
        """✅ No token → empty watchlist, no request."""
        async with WatchlistSync(client=failing_client(exc=httpx.ConnectError("unreachable"))) as sync:
            assert await sync.get_watchlist() == []
