"""
Schemas of the ``/api/auth`` endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class TokenResponse(BaseModel):
    """JWT issued by ``/login`` and ``/refresh``."""

    access_token: str = Field(..., description="JWT para la cabecera Authorization: Bearer")
    token_type: str = Field(default="bearer")


class UserResponse(BaseModel):
    """Caller profile.

    ``dependencia`` is the secretariat whose working rows the user sees;
    ``None`` for ADMIN accounts and for users not yet assigned.
    """

    id: int
    username: str
    email: str
    nombre_completo: str | None
    rol: str | None
    dependencia: str | None
    activo: bool

    model_config = ConfigDict(from_attributes=True)
