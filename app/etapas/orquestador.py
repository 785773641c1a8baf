"""
Stage registry and pipeline orchestration.

The stages form the graph ``parte1 → parte2 → {parte3, parte4, parte5} →
parte6`` declared through each stage's ``DEPENDE_DE``.  ``ejecutar_etapa``
refuses to run a stage whose dependencies have not written anything yet,
and ``ejecutar_todo`` runs every stage in topological order, one transaction
per stage, stopping at the first failure.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import partial
from graphlib import TopologicalSorter
from typing import Any

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.etapas.base_etapa import BaseEtapa, EtapaResult, tabla_existe
from app.etapas.errores import DependenciaEtapaError, EtapaError
from app.etapas.parte1_fondo import Parte1Fondo
from app.etapas.parte2_centro_gestor import Parte2CentroGestor
from app.etapas.parte3_pospre import Parte3Pospre
from app.etapas.parte4_proyecto import Parte4Proyecto
from app.etapas.parte5_area_funcional import Parte5AreaFuncional
from app.etapas.parte6_detalle_sectorial import Parte6DetalleSectorial
from app.models.plantilla_cuipo import PlantillaCuipo

logger = logging.getLogger(__name__)

ETAPAS: dict[str, type[BaseEtapa]] = {
    etapa.CLAVE: etapa
    for etapa in (
        Parte1Fondo,
        Parte2CentroGestor,
        Parte3Pospre,
        Parte4Proyecto,
        Parte5AreaFuncional,
        Parte6DetalleSectorial,
    )
}


@dataclass
class EjecucionPipeline:
    """Outcome of ``ejecutar_todo``.

    Attributes:
        completadas: Results of the stages committed before any failure.
        fallida: Key of the stage that failed, ``None`` when all succeeded.
        error: The exception raised by the failing stage.
    """

    completadas: list[EtapaResult] = field(default_factory=list)
    fallida: str | None = None
    error: EtapaError | None = None

    @property
    def exitosa(self) -> bool:
        return self.fallida is None


def obtener_etapa(clave: str) -> type[BaseEtapa]:
    """Registered stage class for *clave*.

    Raises:
        ValueError: If no stage is registered under *clave*.
    """
    try:
        return ETAPAS[clave]
    except KeyError:
        raise ValueError(f"Etapa desconocida: '{clave}'.") from None


def orden_topologico() -> list[str]:
    """Stage keys in dependency order; ties are broken alphabetically."""
    sorter = TopologicalSorter({clave: set(etapa.DEPENDE_DE) for clave, etapa in ETAPAS.items()})
    sorter.prepare()
    orden: list[str] = []
    while sorter.is_active():
        listos = sorted(sorter.get_ready())
        orden.extend(listos)
        sorter.done(*listos)
    return orden


def describir_etapas() -> list[dict[str, Any]]:
    """Contracts of every stage, in execution order."""
    return [
        {
            "clave": etapa.CLAVE,
            "nombre": etapa.NOMBRE,
            "lee": list(etapa.LEE),
            "escribe": list(etapa.ESCRIBE),
            "depende_de": list(etapa.DEPENDE_DE),
            "tablas_requeridas": etapa.tablas_requeridas(),
        }
        for etapa in (ETAPAS[clave] for clave in orden_topologico())
    ]


def verificar_dependencias(db: Session, etapa: type[BaseEtapa]) -> None:
    """Check that every stage *etapa* depends on has written some output.

    A dependency counts as satisfied when at least one working row holds a
    non-null value in any of its ``ESCRIBE`` columns.  The check is skipped
    when the working table is missing or empty; the stage itself reports
    those cases.

    Raises:
        DependenciaEtapaError: Listing the unsatisfied stage keys.
    """
    if not etapa.DEPENDE_DE or not tabla_existe(db, PlantillaCuipo.__tablename__):
        return
    if db.query(PlantillaCuipo.id).first() is None:
        return

    faltantes = []
    for clave in etapa.DEPENDE_DE:
        columnas = [getattr(PlantillaCuipo, c) for c in ETAPAS[clave].ESCRIBE]
        poblada = (
            db.query(PlantillaCuipo.id)
            .filter(or_(*(c.isnot(None) for c in columnas)))
            .first()
        )
        if poblada is None:
            faltantes.append(clave)

    if faltantes:
        nombres = ", ".join(ETAPAS[c].NOMBRE for c in faltantes)
        raise DependenciaEtapaError(
            f"{etapa.NOMBRE} requiere que se ejecute antes: {nombres}.",
            faltantes=faltantes,
            etapa=etapa.NOMBRE,
        )


def ejecutar_etapa(db: Session, clave: str) -> EtapaResult:
    """Run one stage, checking its dependencies under the working-table lock."""
    etapa = obtener_etapa(clave)
    return etapa(db).ejecutar(verificar=partial(verificar_dependencias, etapa=etapa))


def ejecutar_todo(db: Session) -> EjecucionPipeline:
    """Run all stages in topological order, stopping at the first failure."""
    ejecucion = EjecucionPipeline()
    for clave in orden_topologico():
        try:
            ejecucion.completadas.append(ejecutar_etapa(db, clave))
        except EtapaError as exc:
            logger.error("Pipeline detenido en %s: %s", clave, exc)
            ejecucion.fallida = clave
            ejecucion.error = exc
            break
    logger.info(
        "Pipeline: %d etapas completadas%s",
        len(ejecucion.completadas),
        f", falló {ejecucion.fallida}" if ejecucion.fallida else "",
    )
    return ejecucion
