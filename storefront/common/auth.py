from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from .errors import Unauthorized


JWT_ALGO = "HS256"
TOKEN_TTL = timedelta(days=7)


def issue_token(user_id: str, secret: str, ttl: Optional[timedelta] = None) -> str:
    now = datetime.now(timezone.utc)
    payload = {"sub": str(user_id), "iat": now, "exp": now + (ttl or TOKEN_TTL)}
    return jwt.encode(payload, secret, algorithm=JWT_ALGO)


def bearer_token(header: Optional[str]) -> str:
    if not header or not header.startswith("Bearer "):
        raise Unauthorized("No token provided")
    token = header.split(" ", 1)[1].strip()
    if not token:
        raise Unauthorized("No token provided")
    return token


def decode_token(token: str, secret: str) -> str:
    """Return the user id carried by a valid token."""
    try:
        payload = jwt.decode(token, secret, algorithms=[JWT_ALGO])
    except jwt.PyJWTError:
        raise Unauthorized("Invalid token")
    user_id = payload.get("sub")
    if not user_id:
        raise Unauthorized("Invalid token")
    return user_id
