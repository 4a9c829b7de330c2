"""JWT access token creation and verification.

Tokens are issued by the account service; this backend only verifies them.
create_access_token is kept so tooling and tests can mint a valid token.

HS256 (symmetric HMAC): every service shares one JWT_SECRET.
"""

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from config.settings import settings

_ALGORITHM = settings.JWT_ALGORITHM  # "HS256"
_ACCESS_EXPIRE = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)


class InvalidTokenError(Exception):
    """Token is malformed, expired, badly signed or not an access token."""


def create_access_token(user_id: str, role: str = "user") -> str:
    """Issue a short-lived access token (default: 30 min)."""
    now = datetime.now(UTC)
    payload = {
        "sub": user_id,
        "role": role,
        "type": "access",
        "iat": now,
        "exp": now + _ACCESS_EXPIRE,
    }
    return str(jwt.encode(payload, settings.JWT_SECRET, algorithm=_ALGORITHM))


def decode_access_token(token: str) -> dict[str, str]:
    """Decode and validate an access token.

    Raises:
        InvalidTokenError: signature, expiry or token type check failed.
    """
    try:
        payload: dict[str, str] = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError as exc:
        raise InvalidTokenError(str(exc)) from None

    if payload.get("type") != "access":
        raise InvalidTokenError("not an access token")
    return payload
