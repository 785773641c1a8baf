"""
Dashboard statistics over the enriched working table.

Projects are grouped by secretariat from the working rows and from the
public-establishment catalogue; per-project figures are summed over the
amount columns.  ``func.coalesce(..., 0)`` guards against NULL sums.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.etapas.base_etapa import IndiceReferencia
from app.etapas.reglas import es_vacio, limpiar
from app.models.dependencia import Dependencia
from app.models.establecimiento_publico import EstablecimientoPublico
from app.models.plantilla_cuipo import PlantillaCuipo
from app.models.proyecto import Proyecto
from app.utils.constants import COLUMNAS_MONTOS

logger = logging.getLogger(__name__)

# Project codes in the chart are matched on their first 6 characters.
_LONGITUD_CODIGO_PROYECTO = 6

_TIPO_SECRETARIA = "secretaria"
_TIPO_ESTABLECIMIENTO = "establecimiento"


def _columna(nombre: str) -> Any:
    return next(c for c in PlantillaCuipo.__table__.columns if c.name == nombre)


def _atributo(nombre: str) -> str:
    """ORM attribute mapped to column *nombre* (``_ejecucion`` differs)."""
    return PlantillaCuipo.__mapper__.get_property_by_column(_columna(nombre)).key


def _agregar_proyecto(
    grupos: dict[tuple, dict[str, Any]],
    clave: tuple,
    proyecto: dict[str, Any],
) -> None:
    grupo = grupos.setdefault(
        clave,
        {
            "secretaria": clave[0],
            "centro_gestor": clave[1],
            "dependencia_nombre_completo": clave[2],
            "tipo": clave[3],
            "proyectos": [],
        },
    )
    if proyecto not in grupo["proyectos"]:
        grupo["proyectos"].append(proyecto)


def proyectos_por_secretaria(db: Session, dependencia: str | None = None) -> list[dict[str, Any]]:
    """Projects grouped by secretariat, plus the public establishments.

    Working rows are grouped by trimmed ``secretaria`` together with the
    matching ``dependencias`` row (same secretariat and managing unit).
    Establishments from ``estapublicos`` are appended as their own groups.

    Args:
        db: Active session.
        dependencia: Optional filter matching the secretariat, the managing
            unit or the dependency name.

    Returns:
        One dict per group, ordered by name, with ``total_proyectos`` (number
        of distinct project codes) and ``proyectos`` (code, name, fuente).
    """
    dependencias: dict[tuple[str, str], Dependencia] = {}
    for dep in db.query(Dependencia).order_by(Dependencia.id).all():
        dependencias.setdefault((limpiar(dep.dependencia), limpiar(dep.centro_gestor)), dep)
    proyectos = IndiceReferencia.desde_modelo(db, Proyecto, "p")

    grupos: dict[tuple, dict[str, Any]] = {}
    filas = (
        db.query(
            PlantillaCuipo.secretaria,
            PlantillaCuipo.centro_gestor,
            PlantillaCuipo.proyecto,
            PlantillaCuipo.nombre_proyecto,
            PlantillaCuipo.fuente,
        )
        .filter(PlantillaCuipo.secretaria.isnot(None))
        .order_by(PlantillaCuipo.id)
        .all()
    )
    for fila in filas:
        secretaria = limpiar(fila.secretaria)
        if not secretaria:
            continue
        dep = dependencias.get((secretaria, limpiar(fila.centro_gestor)))
        centro_gestor = limpiar(dep.centro_gestor) if dep else None
        nombre_dependencia = limpiar(dep.dependencia) if dep else None
        if dependencia and dependencia not in (secretaria, centro_gestor, nombre_dependencia):
            continue
        codigo = limpiar(fila.proyecto) or None
        _agregar_proyecto(
            grupos,
            (secretaria, centro_gestor, nombre_dependencia, _TIPO_SECRETARIA),
            {
                "codigo": codigo,
                "nombre": proyectos.valor(codigo, "nombre_proyecto", None)
                or (limpiar(fila.nombre_proyecto) or None),
                "fuente": limpiar(fila.fuente) or None,
            },
        )

    for est in db.query(EstablecimientoPublico).order_by(EstablecimientoPublico.id).all():
        nombre = limpiar(est.establecimiento_publico)
        if not nombre:
            continue
        centro_gestor = limpiar(est.centro_gestor) or None
        if dependencia and dependencia not in (nombre, centro_gestor):
            continue
        _agregar_proyecto(
            grupos,
            (nombre, centro_gestor, nombre, _TIPO_ESTABLECIMIENTO),
            {
                "codigo": limpiar(est.proyecto) or None,
                "nombre": limpiar(est.nombre) or None,
                "fuente": None,
            },
        )

    resultado = []
    for grupo in sorted(grupos.values(), key=lambda g: (g["secretaria"], g["tipo"])):
        grupo["proyectos"].sort(key=lambda p: p["codigo"] or "")
        grupo["total_proyectos"] = len({p["codigo"] for p in grupo["proyectos"] if p["codigo"]})
        resultado.append(grupo)

    logger.debug("proyectos_por_secretaria: dependencia=%s grupos=%d", dependencia, len(resultado))
    return resultado


def detalle_proyecto(db: Session, secretaria: str, proyecto: str) -> list[dict[str, Any]]:
    """One row per project code for a secretariat, with its amounts.

    When a project has several rows, the one with the lowest ``fuente``
    (then lowest id) is returned.
    """
    if es_vacio(secretaria) or es_vacio(proyecto):
        raise ValueError("Los parámetros 'secretaria' y 'proyecto' son requeridos.")
    filas = (
        db.query(PlantillaCuipo)
        .filter(
            func.trim(PlantillaCuipo.secretaria) == secretaria.strip(),
            func.trim(PlantillaCuipo.proyecto) == proyecto.strip(),
        )
        .order_by(func.trim(PlantillaCuipo.fuente), PlantillaCuipo.id)
        .all()
    )

    vistos: set[str] = set()
    detalle = []
    for fila in filas:
        codigo = limpiar(fila.proyecto)
        if codigo in vistos:
            continue
        vistos.add(codigo)
        registro = {
            "fuente": limpiar(fila.fuente) or None,
            "dependencia": limpiar(fila.secretaria),
            "pospre": limpiar(fila.pospre) or None,
            "proyecto": codigo,
            "nombre_proyecto": limpiar(fila.nombre_proyecto) or None,
        }
        for columna in COLUMNAS_MONTOS:
            registro[columna] = getattr(fila, _atributo(columna))
        detalle.append(registro)
    return detalle


def grafica_proyecto(db: Session, secretaria: str, proyecto: str) -> dict[str, Any] | None:
    """Summed amounts of a project, matched on its first 6 characters.

    Returns:
        Dict with ``dependencia``, ``proyecto``, ``nombre_proyecto`` and one
        total per amount column (NULL counts as 0), or ``None`` when no row
        matches.
    """
    if es_vacio(secretaria) or es_vacio(proyecto):
        raise ValueError("Los parámetros 'secretaria' y 'proyecto' son requeridos.")
    codigo = proyecto.strip()[:_LONGITUD_CODIGO_PROYECTO]
    montos = [c for c in COLUMNAS_MONTOS if c != "_ejecucion"]

    fila = (
        db.query(
            func.trim(PlantillaCuipo.secretaria).label("dependencia"),
            func.trim(PlantillaCuipo.proyecto).label("proyecto"),
            func.trim(PlantillaCuipo.nombre_proyecto).label("nombre_proyecto"),
            *(func.coalesce(func.sum(_columna(c)), 0).label(c) for c in montos),
        )
        .filter(
            func.trim(PlantillaCuipo.secretaria) == secretaria.strip(),
            func.substr(func.trim(PlantillaCuipo.proyecto), 1, _LONGITUD_CODIGO_PROYECTO) == codigo,
        )
        .group_by(
            func.trim(PlantillaCuipo.secretaria),
            func.trim(PlantillaCuipo.proyecto),
            func.trim(PlantillaCuipo.nombre_proyecto),
        )
        .first()
    )
    if fila is None:
        return None
    return dict(fila._mapping)
