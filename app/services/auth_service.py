"""
Authentication and role checks for the CUIPO API.

The token carries the user id in ``sub`` plus the role and dependency, but
every request reloads the user so a deactivated account or a changed role
takes effect immediately.  Roles are listed in ``constants.ROLES``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Annotated, Any

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.usuario import Usuario
from app.utils.security import hash_password, verify_password, verify_token

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")

_NO_AUTENTICADO = "No se pudo validar las credenciales"


def _usuario_activo(db: Session, *criterios: Any) -> Usuario | None:
    return db.query(Usuario).filter(Usuario.activo.is_(True), *criterios).first()


def _no_autenticado() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=_NO_AUTENTICADO,
        headers={"WWW-Authenticate": "Bearer"},
    )


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------


def autenticar(db: Session, username: str, password: str) -> Usuario | None:
    """Active user matching *username* and *password*, or ``None``.

    A successful login stamps ``ultimo_acceso``; failing to store it does
    not block the login.
    """
    usuario = _usuario_activo(db, Usuario.username == username)
    if usuario is None or not verify_password(password, usuario.password_hash):
        logger.debug("Login rechazado para '%s'", username)
        return None

    usuario.ultimo_acceso = datetime.now(timezone.utc)
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning("No se registró el último acceso de '%s': %s", username, exc)
    return usuario


def claims_token(usuario: Usuario) -> dict[str, Any]:
    """Claims of the access token issued to *usuario*."""
    return {
        "sub": str(usuario.id),
        "username": usuario.username,
        "rol": usuario.rol,
        "dependencia": usuario.dependencia,
    }


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def usuario_actual(
    token: Annotated[str, Depends(oauth2_scheme)],
    db: Annotated[Session, Depends(get_db)],
) -> Usuario:
    """Authenticated caller of the request.

    Raises:
        HTTPException 401: Missing, invalid or expired token, or the user
            is gone or inactive.
    """
    try:
        usuario_id = int(verify_token(token).get("sub"))
    except (TypeError, ValueError):
        raise _no_autenticado() from None

    usuario = _usuario_activo(db, Usuario.id == usuario_id)
    if usuario is None:
        raise _no_autenticado()
    return usuario


def requiere_rol(*roles: str) -> Callable[..., Usuario]:
    """Dependency admitting only callers whose ``rol`` is in *roles*.

    Raises:
        HTTPException 403: The caller's role is not allowed.
    """
    permitidos = frozenset(roles)

    def _verificar(usuario: Annotated[Usuario, Depends(usuario_actual)]) -> Usuario:
        if usuario.rol not in permitidos:
            logger.info("Acceso denegado a '%s' con rol %s", usuario.username, usuario.rol)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Acceso denegado. Se requiere uno de los roles: {sorted(permitidos)}",
            )
        return usuario

    return _verificar


# ---------------------------------------------------------------------------
# Seeding
# ---------------------------------------------------------------------------


def asegurar_admin(db: Session, username: str, password: str) -> bool:
    """Create the administrator account unless *username* already exists.

    An existing account keeps its password.

    Returns:
        True when the account was created.
    """
    if db.query(Usuario.id).filter(Usuario.username == username).first() is not None:
        return False
    db.add(
        Usuario(
            username=username,
            email=f"{username}@cuipo.local",
            password_hash=hash_password(password),
            nombre_completo="Administrador CUIPO",
            rol="ADMIN",
            activo=True,
        )
    )
    db.commit()
    logger.info("Usuario administrador '%s' creado", username)
    return True
