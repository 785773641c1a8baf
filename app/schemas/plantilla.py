"""
Pydantic v2 schemas for the working-table endpoints.

``PlantillaFila`` serialises ORM rows of the working table;
``ActualizarFilaRequest`` carries the manual validation fields a user may
edit on one row.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PlantillaFila(BaseModel):
    """One working-table row as returned by ``GET /ejecucion/plantilla``."""

    id: int
    fondo: str | None = None
    centro_gestor: str | None = None
    proyecto: str | None = None
    pospre: str | None = None
    area_funcional: str | None = None

    ppto_inicial: Decimal | None = None
    reducciones: Decimal | None = None
    adiciones: Decimal | None = None
    creditos: Decimal | None = None
    contracreditos: Decimal | None = None
    total_ppto_actual: Decimal | None = None
    disponibilidad: Decimal | None = None
    compromiso: Decimal | None = None
    factura: Decimal | None = None
    pagos: Decimal | None = None
    disponible_neto: Decimal | None = None
    ejecucion: Decimal | None = None
    porcentaje_ejecucion: Decimal | None = Field(default=None, serialization_alias="_ejecucion")

    fuente: str | None = None
    vigencia_gasto: str | None = None
    fuente_cuipo: str | None = None
    situacion_de_fondos: str | None = None
    seccion_ptal_cuipo: str | None = None
    secretaria: str | None = None
    tercero_cuipo: str | None = None
    validacion_pospre: str | None = None
    pospre_cuipo: str | None = None
    tiene_cpc: str | None = None
    bpin: str | None = None
    nombre_proyecto: str | None = None
    sector_cuipo: str | None = None
    producto_ppal: str | None = None
    cantidad_producto: int | None = None
    producto_a_reportar: str | None = None
    detalle_sectorial: str | None = None
    extrae_detalle_sectorial: str | None = None
    detalle_sectorial_prog_gasto: str | None = None

    codigo_y_nombre_del_cpc: str | None = None
    cpc_cuipo: str | None = None
    validador_cpc: str | None = None
    codigo_y_nombre_del_producto_mga: str | None = None
    producto_cuipo: str | None = None
    validador_del_producto: str | None = None

    model_config = ConfigDict(from_attributes=True)


class PlantillaResponse(BaseModel):
    success: bool = True
    total: int
    data: list[PlantillaFila]


class ActualizarFilaRequest(BaseModel):
    """Payload of ``POST /ejecucion/actualizar-fila``.

    Only the fields present in the body are written; sending none of them
    is rejected with HTTP 400.
    """

    id: int = Field(..., ge=1, description="ID del registro en la plantilla")
    codigo_y_nombre_del_cpc: str | None = None
    cpc_cuipo: str | None = None
    validador_cpc: str | None = None
    codigo_y_nombre_del_producto_mga: str | None = None
    producto_cuipo: str | None = None
    validador_del_producto: str | None = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 42,
                "cpc_cuipo": "2",
                "codigo_y_nombre_del_cpc": "21111 - Carne de bovino",
                "validador_cpc": "OK",
            }
        }
    )

    def campos(self) -> dict[str, Any]:
        """Validator fields explicitly sent by the client."""
        return self.model_dump(exclude_unset=True, exclude={"id"})


class ActualizarFilaResponse(BaseModel):
    success: bool = True
    message: str
    data: PlantillaFila


class TablaDatosResponse(BaseModel):
    """Rows of an arbitrary loaded table."""

    success: bool = True
    tabla: str
    total: int
    data: list[dict[str, Any]]


class TablasResponse(BaseModel):
    success: bool = True
    tablas: list[str]


class TablasDisponiblesResponse(BaseModel):
    """Available execution tables, plus the rows of ``tabla`` when requested."""

    success: bool = True
    tablas: list[str]
    tabla: str | None = None
    data: list[dict[str, Any]] | None = None


class CpcOption(BaseModel):
    label: str
    value: str


class CpcOptionsResponse(BaseModel):
    success: bool = True
    data: list[CpcOption]


class ProductoMgaOption(BaseModel):
    value: str | None
    label: str | None
    producto_codigo: str | None


class ProductosMgaResponse(BaseModel):
    success: bool = True
    options: list[ProductoMgaOption]
    cantidad_producto: int
