"""
Dashboard statistics router.

Mounts under ``/api/v1/cuipo/estadisticas`` (prefix set in ``main.py``).
Non-ADMIN users are always restricted to their own dependency.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.usuario import Usuario
from app.schemas.estadisticas import (
    DetalleProyectoResponse,
    GraficaProyectoResponse,
    ProyectosPorSecretariaResponse,
)
from app.services import estadisticas_service
from app.services.auth_service import usuario_actual
from app.services.plantilla_service import resolver_dependencia
from app.utils.http_errors import error_http

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Estadísticas"])


@router.get(
    "/proyectos-por-secretaria",
    response_model=ProyectosPorSecretariaResponse,
    summary="Proyectos agrupados por secretaría",
)
def proyectos_por_secretaria(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[Usuario, Depends(usuario_actual)],
    dependencia: Annotated[str | None, Query(max_length=300)] = None,
) -> ProyectosPorSecretariaResponse:
    filtro = resolver_dependencia(current_user, dependencia)
    if filtro == "":
        return ProyectosPorSecretariaResponse(data=[])
    return ProyectosPorSecretariaResponse(
        data=estadisticas_service.proyectos_por_secretaria(db, filtro)
    )


@router.get(
    "/detalle-proyecto",
    response_model=DetalleProyectoResponse,
    summary="Detalle de un proyecto",
)
def detalle_proyecto(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[Usuario, Depends(usuario_actual)],
    secretaria: Annotated[str, Query(min_length=1)],
    proyecto: Annotated[str, Query(min_length=1)],
) -> DetalleProyectoResponse:
    filtro = resolver_dependencia(current_user, secretaria)
    secretaria = filtro if filtro is not None else secretaria
    try:
        data = estadisticas_service.detalle_proyecto(db, secretaria, proyecto)
    except ValueError as exc:
        raise error_http(exc) from exc
    return DetalleProyectoResponse(total=len(data), data=data)


@router.get(
    "/grafica-proyecto",
    response_model=GraficaProyectoResponse,
    summary="Totales de un proyecto para gráfica",
)
def grafica_proyecto(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[Usuario, Depends(usuario_actual)],
    secretaria: Annotated[str, Query(min_length=1)],
    proyecto: Annotated[str, Query(min_length=1)],
) -> GraficaProyectoResponse:
    filtro = resolver_dependencia(current_user, secretaria)
    secretaria = filtro if filtro is not None else secretaria
    try:
        data = estadisticas_service.grafica_proyecto(db, secretaria, proyecto)
    except ValueError as exc:
        raise error_http(exc) from exc
    return GraficaProyectoResponse(data=data)
