"""
Table loading and browsing router.

Mounts under ``/api/v1/cuipo`` (prefix set in ``main.py``).

Endpoints
---------
POST /upload               Load an Excel workbook as a TEXT table.
GET  /tables               Data tables of the schema (ADMIN, PRESUPUESTO).
GET  /tables/{table_name}  Rows of one table (ADMIN, PRESUPUESTO).
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.etapas.errores import TablaNoEncontradaError
from app.models.usuario import Usuario
from app.schemas.ingesta import IngestaResponse
from app.schemas.plantilla import TablaDatosResponse, TablasResponse
from app.services import ingesta_service, plantilla_service
from app.services.auth_service import requiere_rol
from app.utils.constants import ROLES_PIPELINE
from app.utils.http_errors import error_http

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Tablas"])


@router.post(
    "/upload",
    response_model=IngestaResponse,
    summary="Cargar archivo Excel como tabla",
    description=(
        "Crea (o reemplaza) la tabla con el nombre normalizado del archivo, con una "
        "columna TEXT por encabezado. Solo se aceptan archivos .xlsx y .xlsm."
    ),
    responses={
        400: {"description": "Archivo vacío, extensión no permitida o sin datos."},
        500: {"description": "Error al crear la tabla."},
    },
)
async def upload_excel(
    file: Annotated[UploadFile, File(description="Archivo Excel (.xlsx / .xlsm)")],
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[Usuario, Depends(requiere_rol(*ROLES_PIPELINE))],
) -> IngestaResponse:
    filename = file.filename or ""
    logger.info("upload_excel: usuario='%s' archivo='%s'", current_user.username, filename)
    try:
        ingesta_service.validar_extension(filename)
        raw = await file.read()
        result = ingesta_service.cargar_excel(db, raw, filename, username=current_user.username)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except RuntimeError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)
        ) from exc

    return IngestaResponse(
        message=f"Tabla '{result.tabla}' creada con {result.filas_insertadas} filas.",
        tabla=result.tabla,
        columnas=result.columnas,
        filas_insertadas=result.filas_insertadas,
        vista_previa=result.vista_previa,
        advertencias=result.advertencias,
    )


@router.get("/tables", response_model=TablasResponse, summary="Listar tablas")
def list_tables(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[Usuario, Depends(requiere_rol(*ROLES_PIPELINE))],
) -> TablasResponse:
    return TablasResponse(tablas=plantilla_service.listar_tablas(db))


@router.get(
    "/tables/{table_name}",
    response_model=TablaDatosResponse,
    summary="Datos de una tabla",
    description=(
        "Las filas de la plantilla CUIPO se filtran por dependencia igual que "
        "en /ejecucion/plantilla."
    ),
    responses={404: {"description": "La tabla no existe."}},
)
def get_table_data(
    table_name: str,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[Usuario, Depends(requiere_rol(*ROLES_PIPELINE))],
) -> TablaDatosResponse:
    try:
        data = plantilla_service.obtener_datos_tabla(db, table_name, current_user)
    except TablaNoEncontradaError as exc:
        raise error_http(exc, status_code=status.HTTP_404_NOT_FOUND) from exc
    return TablaDatosResponse(tabla=table_name, total=len(data), data=data)
