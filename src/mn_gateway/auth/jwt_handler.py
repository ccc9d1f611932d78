"""JWT token creation and verification.

HS256 (symmetric HMAC) with a single JWT_SECRET. Every token carries a random
`jti`, so two tokens issued in the same second for the same account are still
distinct strings; the session store relies on that to tell a superseded
refresh token from the current one.

Claims: sub (account id), type ("access" | "refresh"), jti, iat, exp.
"""

import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from config.settings import settings
from src.mn_common.enums import TokenType
from src.mn_common.errors import InvalidRefreshTokenError, InvalidTokenError

_ALGORITHM = settings.JWT_ALGORITHM
_ACCESS_EXPIRE = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
_REFRESH_EXPIRE = timedelta(days=settings.JWT_REFRESH_EXPIRE_DAYS)

ACCESS_TOKEN_TTL_SECONDS = int(_ACCESS_EXPIRE.total_seconds())
REFRESH_TOKEN_TTL_SECONDS = int(_REFRESH_EXPIRE.total_seconds())


def _issue(account_id: int | str, token_type: TokenType, lifetime: timedelta) -> str:
    now = datetime.now(UTC)
    payload = {
        "sub": str(account_id),
        "type": token_type.value,
        "jti": uuid.uuid4().hex,
        "iat": now,
        "exp": now + lifetime,
    }
    return str(jwt.encode(payload, settings.JWT_SECRET, algorithm=_ALGORITHM))


def create_access_token(account_id: int | str) -> str:
    """Issue a short-lived access token (default: 30 min)."""
    return _issue(account_id, TokenType.ACCESS, _ACCESS_EXPIRE)


def create_refresh_token(account_id: int | str) -> str:
    """Issue a long-lived refresh token (default: 30 days)."""
    return _issue(account_id, TokenType.REFRESH, _REFRESH_EXPIRE)


def decode_token(token: str, expected_type: str) -> dict[str, Any]:
    """Decode and validate a JWT token.

    Args:
        token: Raw JWT string.
        expected_type: "access" or "refresh". Strictly enforced so a refresh
                       token is never accepted as an access token and vice versa.

    Returns:
        Decoded payload dict with at minimum {"sub": ..., "type": ..., "exp": ...}.

    Raises:
        InvalidTokenError: Token invalid/expired and expected_type="access".
        InvalidRefreshTokenError: Token invalid/expired and expected_type="refresh".
    """
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError:
        _raise_auth_error(expected_type)

    if payload.get("type") != expected_type or not payload.get("sub"):
        _raise_auth_error(expected_type)

    return payload


def token_expiry(token: str) -> datetime:
    """Return the signed `exp` of a token, even if that moment has passed.

    The signature is still verified; only the expiry check is skipped.
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[_ALGORITHM],
            options={"verify_exp": False},
        )
    except JWTError:
        raise InvalidTokenError() from None
    exp = payload.get("exp")
    if exp is None:
        raise InvalidTokenError()
    return datetime.fromtimestamp(int(exp), UTC)


def _raise_auth_error(expected_type: str) -> None:
    if expected_type == TokenType.ACCESS.value:
        raise InvalidTokenError()
    raise InvalidRefreshTokenError()
