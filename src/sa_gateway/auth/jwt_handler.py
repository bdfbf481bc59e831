"""JWT token creation and verification.

NOTE: Auth is a placeholder. Tokens carry the caller's id, role and display
name and are signed with HS256 (symmetric HMAC, one shared JWT_SECRET).
There is no password check and no revocation; a token is valid until expiry.
"""

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from config.settings import settings
from src.sa_common.caller import Caller
from src.sa_common.errors import InvalidTokenError

_ALGORITHM = settings.JWT_ALGORITHM  # "HS256"
_ACCESS_EXPIRE = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)


def create_access_token(user_id: str, role: str, name: str = "") -> str:
    """Issue an access token for the given identity (default: 12 h)."""
    now = datetime.now(UTC)
    payload = {
        "sub": user_id,
        "role": role,
        "name": name,
        "type": "access",
        "iat": now,
        "exp": now + _ACCESS_EXPIRE,
    }
    return str(jwt.encode(payload, settings.JWT_SECRET, algorithm=_ALGORITHM))


def decode_token(token: str) -> Caller:
    """Decode and validate an access token into a Caller.

    Raises:
        InvalidTokenError: signature invalid, expired, wrong type or missing claims.
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[_ALGORITHM],
        )
    except JWTError:
        raise InvalidTokenError() from None

    if payload.get("type") != "access" or not payload.get("sub") or not payload.get("role"):
        raise InvalidTokenError()

    return Caller(
        user_id=str(payload["sub"]),
        role=str(payload["role"]),
        name=str(payload.get("name") or ""),
    )
