"""Password hashing and bearer token issuing/decoding.

Tokens are capability snapshots: the ``role`` claim reflects the user's role
at issuance only. Request handling never trusts it and always re-reads the
user row (see ``gear_exchange.core.dependencies``).
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import bcrypt
import jwt

from gear_exchange.config.settings import settings
from gear_exchange.core.exceptions import InvalidToken


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a bcrypt hash. Malformed hashes never match."""
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"),
            hashed_password.encode("utf-8"),
        )
    except ValueError:
        return False


def token_lifetime_seconds() -> int:
    return int(timedelta(days=settings.jwt_expires_days).total_seconds())


def create_access_token(user_id: str, username: str, role: str) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "userId": user_id,
        "username": username,
        "role": role,
        "iat": now,
        "exp": now + timedelta(seconds=token_lifetime_seconds()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Dict[str, Any]:
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError:
        raise InvalidToken()
    if not payload.get("userId"):
        raise InvalidToken("Invalid token payload")
    return payload
