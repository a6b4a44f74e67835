"""Client-side state holder that keeps a local view of the user's watchlist.

Every mutation is a server round trip followed by a re-fetch of the
canonical list; nothing is patched locally. Network and parse failures are
logged and degrade the affected state to empty instead of raising.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx

from stocktracker.client.token_store import MemoryTokenStore, TokenStore
from stocktracker.client.validation import validate_login, validate_signup

logger = logging.getLogger(__name__)

NETWORK_ERROR = "Network error, please try again"


def _same_symbol(a: Optional[str], b: Optional[str]) -> bool:
    return (a or "").strip().upper() == (b or "").strip().upper()


class WatchlistSync:
    """Holds auth state, the quote list and the watchlist for one client session."""

    def __init__(
        self,
        base_url: str = "http://localhost:3500",
        token_store: Optional[TokenStore] = None,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None
    ):
        self.token_store = token_store or MemoryTokenStore()
        self.client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

        self.is_auth = False
        self.is_loading = True
        self.user: Optional[Dict[str, Any]] = None
        self.stocks: List[Dict[str, Any]] = []
        self.filtered_stocks: List[Dict[str, Any]] = []
        self.watchlist: List[Dict[str, Any]] = []
        self.search_value = ""

    async def __aenter__(self) -> "WatchlistSync":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    def _auth_headers(self) -> Optional[Dict[str, str]]:
        token = self.token_store.get()
        if not token:
            return None
        return {"Authorization": f"Bearer {token}"}

    async def mount(self) -> None:
        """Resolve identity, then load quotes and (when signed in) the watchlist."""
        await self.check_auth()
        await self.receive_stocks()
        if self.is_auth and self.user:
            await self.get_watchlist()

    async def check_auth(self) -> bool:
        """Ask the server who the stored token belongs to."""
        self.is_loading = True
        headers = self._auth_headers()

        try:
            if headers is None:
                self._reset_auth(clear_token=False)
                return False

            response = await self.client.post("/api/isAUTH", headers=headers)
            response.raise_for_status()
            data = response.json()

            if data.get("AUTH"):
                self.is_auth = True
                self.user = data.get("UserData")
            else:
                self._reset_auth(clear_token=True)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error checking auth status: {e}")
            self._reset_auth(clear_token=True)
        finally:
            self.is_loading = False

        return self.is_auth

    def _reset_auth(self, clear_token: bool) -> None:
        self.is_auth = False
        self.user = None
        if clear_token:
            self.token_store.clear()

    async def receive_stocks(self) -> List[Dict[str, Any]]:
        """Fetch the quote list from the server's proxy."""
        try:
            response = await self.client.get("/api/Stock")
            response.raise_for_status()
            data = response.json()
            if not isinstance(data, list):
                raise ValueError("Stock payload is not a list")
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error fetching stock data: {e}")
            data = []

        self.stocks = data
        self.filtered_stocks = data
        return self.stocks

    def search(self, query: str) -> List[Dict[str, Any]]:
        """Filter the already-fetched quotes by symbol or company name."""
        self.search_value = query
        needle = query.lower()
        self.filtered_stocks = [
            stock for stock in self.stocks
            if needle in (stock.get("companyName") or "").lower()
            or needle in (stock.get("symbol") or "").lower()
        ]
        return self.filtered_stocks

    async def get_watchlist(self) -> List[Dict[str, Any]]:
        """Replace the local watchlist with the server's copy."""
        headers = self._auth_headers()
        if headers is None:
            logger.error("No token found")
            self.watchlist = []
            return self.watchlist

        try:
            response = await self.client.get("/api/Watchlist", headers=headers)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error fetching watchlist: {e}")
            data = []

        self.watchlist = data if isinstance(data, list) else []
        return self.watchlist

    async def add(self, entry: Dict[str, Any]) -> None:
        """Send the current watchlist plus ``entry`` as one upsert batch, then re-fetch."""
        if any(_same_symbol(item.get("symbol"), entry.get("symbol")) for item in self.watchlist):
            return

        headers = self._auth_headers()
        if headers is None:
            logger.error("No token found")
            return

        try:
            response = await self.client.post(
                "/api/WatchlistUpdate",
                headers=headers,
                json={"watchlist": [*self.watchlist, entry]}
            )
            response.raise_for_status()
            await self.get_watchlist()
        except httpx.HTTPError as e:
            logger.error(f"Error adding to watchlist: {e}")

    async def remove(self, entry: Dict[str, Any]) -> None:
        """Delete one symbol on the server, then re-fetch."""
        headers = self._auth_headers()
        if headers is None:
            logger.error("No token found")
            return

        try:
            response = await self.client.delete(
                f"/api/Watchlist/{entry.get('symbol', '')}",
                headers=headers
            )
            response.raise_for_status()
            await self.get_watchlist()
        except httpx.HTTPError as e:
            logger.error(f"Error removing from watchlist: {e}")

    async def signup(self, username: str, name: str, email: str, password: str) -> Dict[str, str]:
        """Create an account. Returns field errors, or {} on success."""
        errors = validate_signup(username, name, email, password)
        if errors:
            return errors

        payload = {"username": username, "name": name, "email": email, "password": password}
        return await self._authenticate("/api/signup", payload)

    async def login(self, email: str, password: str) -> Dict[str, str]:
        """Log in. Returns field errors, or {} on success."""
        errors = validate_login(email, password)
        if errors:
            return errors

        return await self._authenticate("/api/login", {"email": email, "password": password})

    async def _authenticate(self, path: str, payload: Dict[str, str]) -> Dict[str, str]:
        try:
            response = await self.client.post(path, json=payload)
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error calling {path}: {e}")
            return {"form": NETWORK_ERROR}

        if response.status_code == 409:
            return {data.get("field") or "form": data.get("detail", "Account already exists")}
        if response.is_error:
            detail = data.get("detail") if isinstance(data, dict) else None
            if not isinstance(detail, str):
                detail = "Invalid input"
            return {"form": detail}

        self.token_store.set(data["token"])
        self.is_auth = True
        self.user = data.get("user")
        return {}

    async def update_password(self, new_password: str) -> Tuple[bool, str]:
        """Change the password. Returns (ok, message)."""
        if not new_password:
            return False, "Please enter a new password"

        headers = self._auth_headers()
        if headers is None:
            return False, "No authentication token found"

        try:
            response = await self.client.post(
                "/api/updatePassword",
                headers=headers,
                json={"newPassword": new_password}
            )
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Password update error: {e}")
            return False, NETWORK_ERROR

        if response.is_error:
            detail = data.get("detail") if isinstance(data, dict) else None
            return False, detail if isinstance(detail, str) else "Failed to update password"

        return True, data.get("message", "Password updated successfully")

    def logout(self) -> None:
        """Forget the token and all user state."""
        self._reset_auth(clear_token=True)
        self.watchlist = []
