"""
Translation of service exceptions into ``HTTPException`` responses.

Every error body uses the ``ErrorDetalle`` envelope so the frontend can
show the message and the suggested fixes the same way for all endpoints.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException, status

from app.etapas.errores import (
    DependenciaEtapaError,
    EsquemaError,
    EtapaEnEjecucionError,
    EtapaError,
    FormatoDatoError,
    RegistroNoEncontradoError,
    SinCamposError,
    TablaNoEncontradaError,
)
from app.schemas.common import ErrorDetalle

logger = logging.getLogger(__name__)

# Most specific classes first.
_MAPEO: tuple[tuple[type[Exception], int, str], ...] = (
    (TablaNoEncontradaError, status.HTTP_500_INTERNAL_SERVER_ERROR, "Tabla no encontrada"),
    (EsquemaError, status.HTTP_500_INTERNAL_SERVER_ERROR, "Error de columna"),
    (FormatoDatoError, status.HTTP_422_UNPROCESSABLE_ENTITY, "Error de formato de datos"),
    (DependenciaEtapaError, status.HTTP_409_CONFLICT, "Etapas previas pendientes"),
    (EtapaEnEjecucionError, status.HTTP_409_CONFLICT, "Proceso en ejecución"),
    (EtapaError, status.HTTP_500_INTERNAL_SERVER_ERROR, "Error interno del servidor"),
    (RegistroNoEncontradoError, status.HTTP_404_NOT_FOUND, "Registro no encontrado"),
    (SinCamposError, status.HTTP_400_BAD_REQUEST, "Sin campos para actualizar"),
    (ValueError, status.HTTP_400_BAD_REQUEST, "Solicitud inválida"),
)


def error_http(
    exc: Exception,
    *,
    status_code: int | None = None,
    extra: dict[str, Any] | None = None,
) -> HTTPException:
    """Build the ``HTTPException`` for *exc*.

    Args:
        exc: A pipeline, row or validation exception.
        status_code: Overrides the mapped status.
        extra: Additional data for the ``extra`` field of the envelope.

    Raises:
        TypeError: If *exc* is not one of the mapped exception types.
    """
    for tipo, codigo, etiqueta in _MAPEO:
        if isinstance(exc, tipo):
            break
    else:
        raise TypeError(f"Excepción sin traducción HTTP: {type(exc).__name__}") from exc

    detalle = ErrorDetalle(
        error=f"{etiqueta} en {exc.etapa}" if getattr(exc, "etapa", "") else etiqueta,
        detalles=str(exc),
        solucion_sugerida=getattr(exc, "sugerencias", []),
        extra=extra,
    )
    codigo = status_code or codigo
    logger.debug("error_http: %s → %d", type(exc).__name__, codigo)
    return HTTPException(status_code=codigo, detail=detalle.model_dump())
