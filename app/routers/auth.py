"""
Login and session router, mounted under ``/api/auth``.

POST /login    OAuth2 password form → JWT with rol and dependencia.
POST /refresh  Fresh token for the holder of a valid one.
GET  /me       Profile of the caller.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.usuario import Usuario
from app.schemas.auth import TokenResponse, UserResponse
from app.services.auth_service import autenticar, claims_token, usuario_actual
from app.utils.security import create_access_token

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


def _emitir_token(usuario: Usuario) -> TokenResponse:
    return TokenResponse(access_token=create_access_token(claims_token(usuario)))


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Iniciar sesión",
    responses={401: {"description": "Usuario o contraseña incorrectos, o cuenta inactiva."}},
)
def login(
    form: Annotated[OAuth2PasswordRequestForm, Depends()],
    db: Annotated[Session, Depends(get_db)],
) -> TokenResponse:
    usuario = autenticar(db, form.username, form.password)
    if usuario is None:
        logger.warning("Intento de inicio de sesión fallido: '%s'", form.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Credenciales incorrectas o cuenta inactiva",
            headers={"WWW-Authenticate": "Bearer"},
        )
    logger.info("Inicio de sesión: '%s' (%s)", usuario.username, usuario.rol)
    return _emitir_token(usuario)


@router.post("/refresh", response_model=TokenResponse, summary="Renovar token")
def refresh(
    current_user: Annotated[Usuario, Depends(usuario_actual)],
) -> TokenResponse:
    return _emitir_token(current_user)


@router.get("/me", response_model=UserResponse, summary="Perfil del usuario autenticado")
def me(
    current_user: Annotated[Usuario, Depends(usuario_actual)],
) -> UserResponse:
    return UserResponse.model_validate(current_user)
