"""
Shared Pydantic v2 schemas reused across the CUIPO modules.

Provides the error envelope returned by every failing pipeline or table
operation.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ErrorDetalle(BaseModel):
    """Body of ``HTTPException.detail`` for pipeline and table errors.

    Attributes:
        success: Always ``False``.
        error: Short error label.
        detalles: Underlying message (missing table, offending row …).
        solucion_sugerida: Hints for the operator.
    """

    success: bool = Field(default=False)
    error: str = Field(..., description="Descripción corta del error.")
    detalles: str | None = Field(default=None, description="Mensaje detallado del error.")
    solucion_sugerida: list[str] = Field(
        default_factory=list,
        description="Acciones sugeridas para corregir el problema.",
    )
    extra: dict[str, Any] | None = Field(
        default=None,
        description="Datos adicionales (etapas completadas, registro afectado …).",
    )
