"""Bearer token and URL signing utilities for API callers."""
import hashlib
import hmac
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from .exceptions import UnauthorizedError
from .logger import get_logger

logger = get_logger()

BEARER_PREFIX = "Bearer "
ALGORITHM = "HS256"
DEFAULT_TOKEN_TTL_HOURS = 24 * 7


def sign(secret: str, message: str) -> str:
    """Return a hex HMAC-SHA256 signature of message."""
    return hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).hexdigest()


def issue_token(user_id: str, secret: str, ttl_hours: float = DEFAULT_TOKEN_TTL_HOURS) -> str:
    """
    Issue a bearer token for a user.

    Args:
        user_id: User identifier, stored as the sub claim
        secret: Service key used for signing
        ttl_hours: Hours until the token expires

    Returns:
        HS256 JSON Web Token
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "iat": now,
        "exp": now + timedelta(hours=ttl_hours),
    }
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def verify_token(token: str, secret: str) -> str:
    """
    Resolve a bearer token to its user id.

    Raises:
        UnauthorizedError: If the token is malformed, expired or signed with another key
    """
    try:
        payload = jwt.decode(token, secret, algorithms=[ALGORITHM], options={"require": ["sub", "exp"]})
    except jwt.ExpiredSignatureError:
        logger.warning("Rejected expired bearer token")
        raise UnauthorizedError("Token expired")
    except jwt.InvalidTokenError as e:
        logger.warning(f"Rejected bearer token: {e}")
        raise UnauthorizedError("Unauthorized")

    user_id = payload.get("sub")
    if not isinstance(user_id, str) or not user_id:
        raise UnauthorizedError("Unauthorized")
    return user_id


def extract_bearer_token(authorization: Optional[str]) -> str:
    """Strip the Bearer prefix from an Authorization header value."""
    if not authorization:
        raise UnauthorizedError("Authorization header is required")
    if authorization.startswith(BEARER_PREFIX):
        return authorization[len(BEARER_PREFIX):].strip()
    return authorization.strip()
