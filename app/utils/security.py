"""
Security utilities for the CUIPO authentication layer.

JWT creation/verification with python-jose and password hashing with
bcrypt.  Secrets and token lifetime come from the application settings.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from jose import JWTError, jwt

from app.config import get_settings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Password helpers
# ---------------------------------------------------------------------------


def hash_password(password: str) -> str:
    pwd_bytes = password.encode("utf-8")
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(pwd_bytes, salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """True when *plain* matches the bcrypt *hashed* value.

    A malformed stored hash counts as a mismatch.
    """
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        logger.warning("Hash de contraseña con formato inválido")
        return False


# ---------------------------------------------------------------------------
# JWT helpers
# ---------------------------------------------------------------------------


def create_access_token(data: dict[str, Any], expires_minutes: int | None = None) -> str:
    """Sign a JWT carrying *data* plus ``iat`` and ``exp`` claims.

    Args:
        data: Claims to embed; callers set ``sub`` (the user id as text).
        expires_minutes: Lifetime override; defaults to
            ``JWT_EXPIRATION_MINUTES``.

    Returns:
        The compact JWT string.
    """
    settings = get_settings()
    ahora = datetime.now(timezone.utc)
    minutos = settings.JWT_EXPIRATION_MINUTES if expires_minutes is None else expires_minutes
    payload = {**data, "iat": ahora, "exp": ahora + timedelta(minutes=minutos)}
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def verify_token(token: str) -> dict[str, Any]:
    """Decode a JWT, checking signature and expiration.

    Raises:
        ValueError: If the token is invalid or expired.  Dependencies map
            this to HTTP 401.
    """
    settings = get_settings()
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as exc:
        logger.debug("JWT verification failed: %s", exc)
        raise ValueError("Token inválido o expirado") from exc
