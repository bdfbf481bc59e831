"""FastAPI dependency: get_caller.

Usage in any protected router:
    from src.sa_gateway.auth.dependencies import get_caller

    @router.get("/protected")
    async def protected(caller: Caller = Depends(get_caller)):
        ...
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from src.sa_common.caller import Caller
from src.sa_common.errors import InvalidTokenError
from src.sa_gateway.auth.jwt_handler import decode_token

# tokenUrl tells Swagger UI where to get a token (used for the "Authorize" button)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token")

# Reusable 401 exception with WWW-Authenticate header (OAuth2 standard)
_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_caller(token: str = Depends(oauth2_scheme)) -> Caller:
    """Extract and validate the Bearer token, return the caller identity.

    Role checks are NOT done here: the live auction core decides what each
    role may do and reports refusals as results.
    """
    try:
        return decode_token(token)
    except InvalidTokenError:
        raise _CREDENTIALS_EXCEPTION from None
