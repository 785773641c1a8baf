"""
Pydantic v2 schemas for the Excel upload endpoint.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class IngestaResponse(BaseModel):
    """Summary returned by ``POST /upload``.

    Attributes:
        tabla: Table created from the file name.
        columnas: TEXT columns created besides ``id``.
        filas_insertadas: Non-empty rows stored.
        vista_previa: First rows, as stored.
        advertencias: Dropped or renamed headers.
    """

    success: bool = True
    message: str
    tabla: str
    columnas: list[str]
    filas_insertadas: int
    vista_previa: list[dict[str, Any]] = Field(default_factory=list)
    advertencias: list[str] = Field(default_factory=list)
