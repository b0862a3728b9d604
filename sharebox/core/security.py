# sharebox/core/security.py
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from werkzeug.security import check_password_hash, generate_password_hash

from sharebox.core.config import Settings
from sharebox.core.errors import AuthError


@dataclass(frozen=True)
class UserIdentity:
    """The authenticated caller, as resolved from credentials or a token."""

    id: int
    username: str
    email: str
    is_admin: bool = False

    @classmethod
    def from_user(cls, user) -> "UserIdentity":
        return cls(id=user.id, username=user.username, email=user.email, is_admin=bool(user.is_admin))


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    return check_password_hash(password_hash, password)


def create_access_token(user_id: int, is_admin: bool, settings: Settings) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "is_admin": bool(is_admin),
        "iat": now,
        "exp": now + timedelta(minutes=settings.jwt_expires_minutes),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Settings) -> int:
    """Return the user id carried by ``token``; raise AuthError if it is invalid or expired."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise AuthError("Token expired")
    except jwt.InvalidTokenError:
        raise AuthError("Not authorized, token failed")

    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise AuthError("Not authorized, token failed")
