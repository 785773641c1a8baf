"""
Pydantic v2 schemas for the dashboard statistics endpoints.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field


class ProyectoResumen(BaseModel):
    codigo: str | None
    nombre: str | None
    fuente: str | None


class SecretariaProyectos(BaseModel):
    """Projects of one secretariat or public establishment.

    Attributes:
        tipo: ``"secretaria"`` for working-table groups,
              ``"establecimiento"`` for ``estapublicos`` entries.
        total_proyectos: Distinct project codes in the group.
    """

    secretaria: str
    centro_gestor: str | None
    dependencia_nombre_completo: str | None
    tipo: str
    total_proyectos: int
    proyectos: list[ProyectoResumen] = Field(default_factory=list)


class ProyectosPorSecretariaResponse(BaseModel):
    success: bool = True
    data: list[SecretariaProyectos]


class DetalleProyectoResponse(BaseModel):
    success: bool = True
    total: int
    data: list[dict]


class GraficaProyecto(BaseModel):
    """Summed amounts of a project (NULL amounts count as 0)."""

    dependencia: str | None
    proyecto: str | None
    nombre_proyecto: str | None
    ppto_inicial: Decimal
    reducciones: Decimal
    adiciones: Decimal
    creditos: Decimal
    contracreditos: Decimal
    total_ppto_actual: Decimal
    disponibilidad: Decimal
    compromiso: Decimal
    factura: Decimal
    pagos: Decimal
    disponible_neto: Decimal
    ejecucion: Decimal


class GraficaProyectoResponse(BaseModel):
    success: bool = True
    data: GraficaProyecto | None
