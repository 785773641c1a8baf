"""
Read/query layer over the working table and the loaded tables.

Functions receive a SQLAlchemy ``Session`` and return plain dicts or ORM
rows ready for serialisation.  Generic table reads go through reflection
and only accept names that exist in the configured schema.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from sqlalchemy import MetaData, Table, case, func, inspect, select
from sqlalchemy.orm import Session

from app.config import get_settings
from app.etapas.base_etapa import nombre_tabla
from app.etapas.errores import RegistroNoEncontradoError, SinCamposError, TablaNoEncontradaError
from app.models.base_ejecucion import BaseEjecucionPresupuestal
from app.models.cpc import Cpc
from app.models.plantilla_cuipo import PlantillaCuipo
from app.models.producto_proyecto import ProductoProyecto
from app.models.usuario import Usuario
from app.utils.constants import CAMPOS_VALIDADOR, FONDO_TOTALES

logger = logging.getLogger(__name__)

_UN_DIGITO = re.compile(r"^\d$")
_ROLES_SIN_FILTRO = frozenset({"ADMIN"})
_ROLES_EDICION_GLOBAL = frozenset({"ADMIN", "PRESUPUESTO"})
# Never served by the generic table reads.
_TABLAS_RESERVADAS = frozenset({Usuario.__tablename__, "alembic_version"})


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _schema() -> str | None:
    return get_settings().DB_SCHEMA or None


def _orden_totales_al_final(columna_fondo: Any) -> Any:
    """ORDER BY key placing the Totales row after every other row."""
    return case((columna_fondo == FONDO_TOTALES, 1), else_=0)


def _reflejar(db: Session, tabla: str) -> Table:
    return Table(tabla, MetaData(), schema=_schema(), autoload_with=db.connection())


def _filas_como_dict(resultado: Any) -> list[dict[str, Any]]:
    return [dict(fila._mapping) for fila in resultado]


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


def listar_tablas(db: Session) -> list[str]:
    """Data tables of the configured schema, sorted by name.

    Accounts and migration bookkeeping are left out.
    """
    tablas = inspect(db.connection()).get_table_names(schema=_schema())
    return sorted(t for t in tablas if t not in _TABLAS_RESERVADAS)


def obtener_datos_tabla(
    db: Session,
    tabla: str,
    usuario: Usuario | None = None,
) -> list[dict[str, Any]]:
    """All rows of *tabla*.

    The working table is ordered with the Totales row last, then by id;
    other tables by ``id`` when they have one.  When *usuario* is given,
    working rows go through the same dependency filter as
    ``listar_plantilla``.

    Raises:
        TablaNoEncontradaError: If *tabla* is not a table of the schema.
    """
    if tabla not in listar_tablas(db):
        raise TablaNoEncontradaError(nombre_tabla(tabla))

    reflejada = _reflejar(db, tabla)
    consulta = select(reflejada)
    if tabla == PlantillaCuipo.__tablename__:
        filtro = resolver_dependencia(usuario) if usuario is not None else None
        if filtro == "":
            return []
        if filtro is not None:
            consulta = consulta.where(func.trim(reflejada.c.secretaria) == filtro)
        consulta = consulta.order_by(
            _orden_totales_al_final(reflejada.c.fondo), reflejada.c.id
        )
    elif "id" in reflejada.c:
        consulta = consulta.order_by(reflejada.c.id)

    filas = _filas_como_dict(db.execute(consulta))
    logger.debug("obtener_datos_tabla: tabla='%s' filas=%d", tabla, len(filas))
    return filas


def tablas_disponibles(db: Session) -> list[str]:
    """Tables the execution screen may open.

    The working table, the execution snapshot and every table whose name
    starts with ``PREFIJO_TABLAS_CUIPO``.
    """
    settings = get_settings()
    fijas = {PlantillaCuipo.__tablename__, BaseEjecucionPresupuestal.__tablename__}
    return [
        tabla
        for tabla in listar_tablas(db)
        if tabla in fijas or tabla.startswith(settings.PREFIJO_TABLAS_CUIPO)
    ]


def obtener_tabla_disponible(
    db: Session,
    tabla: str,
    usuario: Usuario | None = None,
) -> list[dict[str, Any]]:
    """Rows of one of the ``tablas_disponibles``.

    Raises:
        TablaNoEncontradaError: If *tabla* is not among them.
    """
    if tabla not in tablas_disponibles(db):
        raise TablaNoEncontradaError(nombre_tabla(tabla))
    return obtener_datos_tabla(db, tabla, usuario)


# ---------------------------------------------------------------------------
# Working table
# ---------------------------------------------------------------------------


def resolver_dependencia(usuario: Usuario, solicitada: str | None = None) -> str | None:
    """Dependency filter that applies to *usuario*.

    ADMIN users see everything unless they ask for one dependency; every
    other role is pinned to its own ``dependencia`` (``""`` if it has none).

    Returns:
        The secretariat name to filter on, or ``None`` for no filter.
    """
    if usuario.rol in _ROLES_SIN_FILTRO:
        return solicitada.strip() if solicitada and solicitada.strip() else None
    return (usuario.dependencia or "").strip()


def listar_plantilla(
    db: Session,
    usuario: Usuario,
    dependencia: str | None = None,
) -> list[PlantillaCuipo]:
    """Working rows visible to *usuario*, Totales last.

    Args:
        db: Active session.
        usuario: Authenticated caller.
        dependencia: Optional secretariat requested by an ADMIN.

    Returns:
        ORM rows ordered by "Totales last, then id".
    """
    filtro = resolver_dependencia(usuario, dependencia)
    query = db.query(PlantillaCuipo)
    if filtro is not None:
        if not filtro:
            logger.warning("Usuario '%s' sin dependencia asignada", usuario.username)
            return []
        query = query.filter(func.trim(PlantillaCuipo.secretaria) == filtro)

    return query.order_by(
        _orden_totales_al_final(PlantillaCuipo.fondo), PlantillaCuipo.id
    ).all()


def actualizar_fila(
    db: Session,
    registro_id: int,
    campos: dict[str, Any],
    usuario: Usuario | None = None,
) -> PlantillaCuipo:
    """Write the manual validation fields of one working row.

    Args:
        db: Active session.
        registro_id: Working-table id.
        campos: Subset of ``CAMPOS_VALIDADOR``; other keys are ignored.
        usuario: When given and not ADMIN/PRESUPUESTO, the row must belong
            to the user's dependency.

    Returns:
        The updated row.

    Raises:
        SinCamposError: No validator field was supplied.
        RegistroNoEncontradoError: No visible row has that id.
    """
    cambios = {k: v for k, v in campos.items() if k in CAMPOS_VALIDADOR}
    if not cambios:
        raise SinCamposError("No se proporcionaron campos para actualizar.")

    fila = db.get(PlantillaCuipo, registro_id)
    if fila is None:
        raise RegistroNoEncontradoError(f"No se encontró el registro con id {registro_id}.")
    if usuario is not None and usuario.rol not in _ROLES_EDICION_GLOBAL:
        if (fila.secretaria or "").strip() != (usuario.dependencia or "").strip():
            raise RegistroNoEncontradoError(f"No se encontró el registro con id {registro_id}.")

    for columna, valor in cambios.items():
        setattr(fila, columna, valor)
    db.commit()
    db.refresh(fila)
    logger.info("actualizar_fila: id=%d campos=%s", registro_id, sorted(cambios))
    return fila


# ---------------------------------------------------------------------------
# Dropdown sources
# ---------------------------------------------------------------------------


def opciones_cpc(db: Session, ultimo_digito: str) -> list[dict[str, str]]:
    """CPC classes whose ``cpc`` column equals *ultimo_digito*.

    Returns:
        ``[{label, value}]`` with the trimmed class code as both.

    Raises:
        ValueError: If *ultimo_digito* is not a single digit.
    """
    if not _UN_DIGITO.match(ultimo_digito or ""):
        raise ValueError("El último dígito debe ser un número del 0 al 9.")
    filas = (
        db.query(func.trim(Cpc.codigo_clase_o_subclase))
        .filter(func.trim(Cpc.cpc) == ultimo_digito)
        .order_by(Cpc.codigo_clase_o_subclase)
        .all()
    )
    return [{"label": codigo, "value": codigo} for (codigo,) in filas if codigo is not None]


def opciones_productos_mga(db: Session, codigo_sap: str | None) -> dict[str, Any]:
    """MGA products registered for an SAP project code.

    Returns:
        ``{"options": [{value, label, producto_codigo}], "cantidad_producto": n}``.

    Raises:
        ValueError: If *codigo_sap* is missing or blank.
    """
    codigo = (codigo_sap or "").strip()
    if not codigo:
        raise ValueError("El parámetro 'codigoSap' es requerido.")
    filas = (
        db.query(ProductoProyecto)
        .filter(func.trim(ProductoProyecto.codigo_sap) == codigo)
        .order_by(ProductoProyecto.id)
        .all()
    )
    opciones = [
        {
            "value": fila.cod_pdto_y_nombre,
            "label": fila.cod_pdto_y_nombre,
            "producto_codigo": fila.productos_del_proyecto,
        }
        for fila in filas
    ]
    return {"options": opciones, "cantidad_producto": len(opciones)}
