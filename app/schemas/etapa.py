"""
Pydantic v2 schemas for the pipeline endpoints (``/ejecucion``).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PasoResponse(BaseModel):
    """One internal update of a stage."""

    nombre: str
    descripcion: str
    registros_procesados: int
    registros_actualizados: int

    model_config = ConfigDict(from_attributes=True)


class EtapaResponse(BaseModel):
    """Result of a committed stage run.

    Attributes:
        success: Always ``True``; failures are returned as HTTP errors.
        etapa: Stage key, e.g. ``"parte3"``.
        nombre: Stage label, e.g. ``"Parte 3"``.
        message: Human summary.
        total_actualizados: Rows changed across all steps.
        pasos: Per-step counters.
    """

    success: bool = True
    etapa: str
    nombre: str
    message: str
    total_actualizados: int
    pasos: list[PasoResponse] = Field(default_factory=list)


class PipelineResponse(BaseModel):
    """Result of ``/procesar/todo`` when every stage succeeded."""

    success: bool = True
    message: str
    etapas: list[EtapaResponse] = Field(default_factory=list)


class EtapaContrato(BaseModel):
    """Declared contract of a stage, as listed by ``GET /etapas``."""

    clave: str
    nombre: str
    lee: list[str]
    escribe: list[str]
    depende_de: list[str]
    tablas_requeridas: list[str]


class CargaBaseResponse(BaseModel):
    """Result of ``/copiar-datos-presupuestales``.

    Attributes:
        registros_eliminados: Working rows removed.
        registros_insertados: Rows copied from the snapshot.
        columnas_invalidadas: Columns reset to NULL.
        siguiente_etapa: Stage the pipeline must restart from.
    """

    success: bool = True
    message: str
    registros_eliminados: int
    registros_insertados: int
    columnas_invalidadas: list[str]
    siguiente_etapa: str
