"""Tests for password hashing and the token service."""
import pytest
from datetime import timedelta
from jose import jwt

from stocktracker.core.auth import TokenService, hash_password, resolve_user, verify_password
from stocktracker.core.errors import InvalidToken
from tests.conftest import scalar_result

SECRET = "unit-test-secret-key-with-32-plus-characters"


@pytest.fixture
def tokens():
    return TokenService(secret=SECRET, algorithm="HS256", expire_minutes=60)


def test_password_hashing():
    """Test password hashing and verification."""
    password = "testpassword123"
    hashed = hash_password(password)

    # Hash should not equal plain password
    assert hashed != password
    assert hashed.startswith("$2")

    assert verify_password(password, hashed) is True
    assert verify_password("wrongpassword", hashed) is False


def test_password_hashing_is_salted():
    """Same password hashes differently each time."""
    assert hash_password("samepassword") != hash_password("samepassword")


def test_long_password_hashing():
    """Passwords beyond bcrypt's 72-byte limit are still fully compared."""
    base = "x" * 80
    hashed = hash_password(base + "a")

    assert verify_password(base + "a", hashed) is True
    assert verify_password(base + "b", hashed) is False


def test_issue_and_verify(tokens):
    """Issued token verifies back to the user id."""
    token = tokens.issue("user-42")

    assert isinstance(token, str)
    assert tokens.verify(token) == "user-42"


def test_token_claims(tokens):
    """Token carries sub, iat and exp claims."""
    token = tokens.issue("user-42")
    claims = jwt.get_unverified_claims(token)

    assert claims["sub"] == "user-42"
    assert "iat" in claims
    assert claims["exp"] - claims["iat"] == 3600


def test_token_without_expiry():
    """expire_minutes=None issues non-expiring tokens."""
    tokens = TokenService(secret=SECRET, expire_minutes=None)
    token = tokens.issue("user-42")

    assert "exp" not in jwt.get_unverified_claims(token)
    assert tokens.verify(token) == "user-42"


def test_expired_token_rejected(tokens):
    token = tokens.issue("user-42", expires_delta=timedelta(seconds=-5))

    with pytest.raises(InvalidToken):
        tokens.verify(token)


def test_wrong_secret_rejected(tokens):
    other = TokenService(secret="another-secret-key-that-is-32-chars-long", expire_minutes=60)
    token = other.issue("user-42")

    with pytest.raises(InvalidToken):
        tokens.verify(token)


@pytest.mark.parametrize("token", ["", "not-a-token", "a.b.c"])
def test_malformed_token_rejected(tokens, token):
    with pytest.raises(InvalidToken):
        tokens.verify(token)


def test_token_without_subject_rejected(tokens):
    token = jwt.encode({"foo": "bar"}, SECRET, algorithm="HS256")

    with pytest.raises(InvalidToken):
        tokens.verify(token)


async def test_resolve_user(tokens, mock_db, mock_user):
    """Valid token loads the user by the id in its subject."""
    mock_db.execute.return_value = scalar_result(mock_user)

    assert await resolve_user(tokens.issue("user-123"), mock_db, tokens) is mock_user

    query = mock_db.execute.call_args[0][0]
    assert query.compile().params["id_1"] == "user-123"


async def test_resolve_user_unknown_id(tokens, mock_db):
    """Token for a deleted user resolves to None."""
    mock_db.execute.return_value = scalar_result(None)

    assert await resolve_user(tokens.issue("gone"), mock_db, tokens) is None


@pytest.mark.parametrize("token", [None, "", "garbage"])
async def test_resolve_user_bad_token_skips_lookup(tokens, mock_db, token):
    assert await resolve_user(token, mock_db, tokens) is None
    mock_db.execute.assert_not_called()
