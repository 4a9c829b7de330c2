"""FastAPI dependency: get_current_caller.

Usage in any protected router:
    from src.mk_gateway.auth.dependencies import Caller, get_current_caller

    @router.get("/protected")
    async def protected(caller: Caller = Depends(get_current_caller)):
        ...

Identity comes from the token alone; no user lookup is made here.
"""

from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from src.mk_gateway.auth.jwt_handler import InvalidTokenError, decode_access_token

# tokenUrl points at the account service's login endpoint (Swagger "Authorize")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


@dataclass(frozen=True)
class Caller:
    user_id: str
    role: str = "user"


async def get_current_caller(token: str = Depends(oauth2_scheme)) -> Caller:
    """Validate the Bearer token and return who is calling.

    Raises HTTP 401 if the token is missing, invalid, expired or has no subject.
    """
    try:
        payload = decode_access_token(token)
    except InvalidTokenError:
        raise _CREDENTIALS_EXCEPTION from None

    user_id = payload.get("sub")
    if not user_id:
        raise _CREDENTIALS_EXCEPTION
    return Caller(user_id=user_id, role=payload.get("role") or "user")
