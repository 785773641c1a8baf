"""
Pipeline execution router.

Mounts under ``/api/v1/cuipo/ejecucion`` (prefix set in ``main.py``).

Stage and snapshot endpoints require the ADMIN or PRESUPUESTO role; row
edits also accept DEPENDENCIA; reading the rows of an execution table
needs ADMIN or PRESUPUESTO; other reads only need an authenticated user.

Endpoints
---------
POST /procesar/todo                  Run every stage in dependency order.
POST /procesar/{etapa}               Run one stage (parte1 … parte6).
GET  /etapas                         Stage contracts.
POST /copiar-datos-presupuestales    Reset the working table from the snapshot.
GET  /obtener-tablas-disponibles     Execution tables (+ rows of ``tabla``).
GET  /plantilla                      Working rows visible to the caller.
POST /actualizar-fila                Edit the validation fields of a row.
GET  /cpc-options/{last_digit}       CPC classes for a digit.
GET  /productos-mga-options          MGA products of an SAP project.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.etapas import orquestador
from app.etapas.base_etapa import EtapaResult
from app.etapas.errores import EtapaError, RegistroNoEncontradoError, SinCamposError
from app.models.usuario import Usuario
from app.schemas.etapa import (
    CargaBaseResponse,
    EtapaContrato,
    EtapaResponse,
    PasoResponse,
    PipelineResponse,
)
from app.schemas.plantilla import (
    ActualizarFilaRequest,
    ActualizarFilaResponse,
    CpcOptionsResponse,
    PlantillaFila,
    PlantillaResponse,
    ProductosMgaResponse,
    TablasDisponiblesResponse,
)
from app.services import carga_base_service, plantilla_service
from app.services.auth_service import requiere_rol, usuario_actual
from app.utils.constants import ROLES_EDICION, ROLES_PIPELINE
from app.utils.http_errors import error_http

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Ejecución"])


def _etapa_response(result: EtapaResult) -> EtapaResponse:
    return EtapaResponse(
        etapa=result.etapa,
        nombre=result.nombre,
        message=f"{result.nombre} procesada exitosamente.",
        total_actualizados=result.total_actualizados,
        pasos=[PasoResponse.model_validate(p) for p in result.pasos],
    )


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------


@router.post(
    "/procesar/todo",
    response_model=PipelineResponse,
    summary="Ejecutar todas las etapas",
    description=(
        "Ejecuta las etapas en orden de dependencias, cada una en su propia "
        "transacción. Se detiene en la primera etapa que falle."
    ),
)
def procesar_todo(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[Usuario, Depends(requiere_rol(*ROLES_PIPELINE))],
) -> PipelineResponse:
    logger.info("procesar_todo: usuario='%s'", current_user.username)
    ejecucion = orquestador.ejecutar_todo(db)
    etapas = [_etapa_response(r) for r in ejecucion.completadas]
    if not ejecucion.exitosa:
        raise error_http(
            ejecucion.error,
            extra={
                "etapa_fallida": ejecucion.fallida,
                "etapas_completadas": [e.model_dump() for e in etapas],
            },
        )
    return PipelineResponse(
        message=f"{len(etapas)} etapas procesadas exitosamente.",
        etapas=etapas,
    )


@router.post(
    "/procesar/{etapa}",
    response_model=EtapaResponse,
    summary="Ejecutar una etapa",
    responses={
        404: {"description": "Etapa desconocida."},
        409: {"description": "Etapas previas sin ejecutar u otro proceso en curso."},
        422: {"description": "Dato con formato inválido (área funcional)."},
        500: {"description": "Tabla o columna inexistente."},
    },
)
def procesar_etapa(
    etapa: str,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[Usuario, Depends(requiere_rol(*ROLES_PIPELINE))],
) -> EtapaResponse:
    if etapa not in orquestador.ETAPAS:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Etapa desconocida: '{etapa}'.",
        )
    logger.info("procesar_etapa: etapa='%s' usuario='%s'", etapa, current_user.username)
    try:
        result = orquestador.ejecutar_etapa(db, etapa)
    except EtapaError as exc:
        raise error_http(exc) from exc
    return _etapa_response(result)


@router.get(
    "/etapas",
    response_model=list[EtapaContrato],
    summary="Contratos de las etapas",
)
def listar_etapas(
    current_user: Annotated[Usuario, Depends(usuario_actual)],
) -> list[EtapaContrato]:
    return [EtapaContrato(**contrato) for contrato in orquestador.describir_etapas()]


@router.post(
    "/copiar-datos-presupuestales",
    response_model=CargaBaseResponse,
    summary="Copiar datos presupuestales a la plantilla",
    description=(
        "Reemplaza las filas de la plantilla con el fondo y los montos de la base "
        "de ejecución. Todas las columnas derivadas quedan vacías: el proceso debe "
        "reiniciarse desde la Parte 1."
    ),
)
def copiar_datos_presupuestales(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[Usuario, Depends(requiere_rol(*ROLES_PIPELINE))],
) -> CargaBaseResponse:
    logger.info("copiar_datos_presupuestales: usuario='%s'", current_user.username)
    try:
        result = carga_base_service.copiar_datos_presupuestales(db)
    except EtapaError as exc:
        raise error_http(exc) from exc
    return CargaBaseResponse(
        message=(
            f"{result.registros_insertados} registros copiados. "
            f"Ejecute nuevamente desde {orquestador.ETAPAS[result.siguiente_etapa].NOMBRE}."
        ),
        registros_eliminados=result.registros_eliminados,
        registros_insertados=result.registros_insertados,
        columnas_invalidadas=result.columnas_invalidadas,
        siguiente_etapa=result.siguiente_etapa,
    )


# ---------------------------------------------------------------------------
# Working table
# ---------------------------------------------------------------------------


@router.get(
    "/obtener-tablas-disponibles",
    response_model=TablasDisponiblesResponse,
    summary="Tablas disponibles para ejecución",
)
def obtener_tablas_disponibles(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[Usuario, Depends(usuario_actual)],
    tabla: Annotated[str | None, Query(description="Tabla cuyos datos se devuelven")] = None,
) -> TablasDisponiblesResponse:
    tablas = plantilla_service.tablas_disponibles(db)
    if tabla is None:
        return TablasDisponiblesResponse(tablas=tablas)
    if current_user.rol not in ROLES_PIPELINE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Acceso denegado. Se requiere uno de los roles: {sorted(ROLES_PIPELINE)}",
        )
    try:
        data = plantilla_service.obtener_tabla_disponible(db, tabla, current_user)
    except EtapaError as exc:
        raise error_http(exc, status_code=status.HTTP_404_NOT_FOUND) from exc
    return TablasDisponiblesResponse(tablas=tablas, tabla=tabla, data=data)


@router.get(
    "/plantilla",
    response_model=PlantillaResponse,
    summary="Filas de la plantilla CUIPO",
    description=(
        "ADMIN ve todas las filas (o las de ``dependencia`` si se indica); los "
        "demás roles solo ven las filas de su dependencia."
    ),
)
def obtener_plantilla(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[Usuario, Depends(usuario_actual)],
    dependencia: Annotated[str | None, Query(max_length=300)] = None,
) -> PlantillaResponse:
    filas = plantilla_service.listar_plantilla(db, current_user, dependencia)
    return PlantillaResponse(
        total=len(filas),
        data=[PlantillaFila.model_validate(f) for f in filas],
    )


@router.post(
    "/actualizar-fila",
    response_model=ActualizarFilaResponse,
    summary="Actualizar campos de validación de una fila",
    responses={
        400: {"description": "No se enviaron campos para actualizar."},
        404: {"description": "Registro inexistente."},
    },
)
def actualizar_fila(
    payload: ActualizarFilaRequest,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[Usuario, Depends(requiere_rol(*ROLES_EDICION))],
) -> ActualizarFilaResponse:
    try:
        fila = plantilla_service.actualizar_fila(db, payload.id, payload.campos(), current_user)
    except (SinCamposError, RegistroNoEncontradoError) as exc:
        raise error_http(exc) from exc
    return ActualizarFilaResponse(
        message="Fila actualizada correctamente.",
        data=PlantillaFila.model_validate(fila),
    )


# ---------------------------------------------------------------------------
# Dropdown sources
# ---------------------------------------------------------------------------


@router.get(
    "/cpc-options/{last_digit}",
    response_model=CpcOptionsResponse,
    summary="Opciones de CPC por último dígito",
)
def cpc_options(
    last_digit: str,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[Usuario, Depends(usuario_actual)],
) -> CpcOptionsResponse:
    try:
        return CpcOptionsResponse(data=plantilla_service.opciones_cpc(db, last_digit))
    except ValueError as exc:
        raise error_http(exc) from exc


@router.get(
    "/productos-mga-options",
    response_model=ProductosMgaResponse,
    summary="Productos MGA de un proyecto SAP",
)
def productos_mga_options(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[Usuario, Depends(usuario_actual)],
    codigo_sap: Annotated[str | None, Query(alias="codigoSap")] = None,
) -> ProductosMgaResponse:
    try:
        return ProductosMgaResponse(**plantilla_service.opciones_productos_mga(db, codigo_sap))
    except ValueError as exc:
        raise error_http(exc) from exc
