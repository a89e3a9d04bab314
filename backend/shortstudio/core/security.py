"""
Bezpieczeństwo — tokeny JWT (access + refresh) i haszowanie haseł.
"""

from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import uuid4

import bcrypt
from jose import JWTError, jwt

from shortstudio.core.config import get_settings

settings = get_settings()

# bcrypt obcina hasła po 72 bajtach; przycinamy jawnie, żeby zachowanie
# nie zależało od wersji biblioteki.
_MAX_BCRYPT_BYTES = 72


def hash_password(password: str) -> str:
    pw_bytes = password.encode("utf-8")[:_MAX_BCRYPT_BYTES]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    pw_bytes = plain_password.encode("utf-8")[:_MAX_BCRYPT_BYTES]
    return bcrypt.checkpw(pw_bytes, hashed_password.encode("utf-8"))


def _encode(subject: str, token_type: str, ttl: timedelta, extra: dict[str, Any] | None = None) -> str:
    now = datetime.now(timezone.utc)
    claims = {
        "sub": subject,
        "iat": now,
        "exp": now + ttl,
        "type": token_type,
        "jti": uuid4().hex,
    }
    if extra:
        claims.update(extra)
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_access_token(subject: str, extra: dict[str, Any] | None = None) -> str:
    return _encode(subject, "access", timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES), extra)


def create_refresh_token(subject: str) -> str:
    return _encode(subject, "refresh", timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS))


def decode_token(token: str) -> dict[str, Any]:
    """Dekoduje i weryfikuje token JWT. Rzuca JWTError przy niepowodzeniu."""
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])


def decode_token_of_type(token: str, token_type: str) -> dict[str, Any]:
    """Jak `decode_token`, ale dodatkowo sprawdza pole `type`."""
    payload = decode_token(token)
    if payload.get("type") != token_type:
        raise JWTError(f"Oczekiwano tokena typu '{token_type}'")
    return payload
