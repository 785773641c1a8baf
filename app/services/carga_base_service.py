"""
Snapshot loader: reset the working table from the execution snapshot.

Replaces every working row with ``id``, ``fondo`` and the amount columns
of the snapshot table.  Every derived column is left NULL, so the pipeline
has to start again at Parte 1; the result says so explicitly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy import delete, insert, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.etapas.base_etapa import bloqueo_plantilla, nombre_tabla, tabla_existe
from app.etapas.errores import EtapaError, FormatoDatoError, TablaNoEncontradaError
from app.etapas.orquestador import ETAPAS, orden_topologico
from app.etapas.reglas import normalizar_monto
from app.models.base_ejecucion import BaseEjecucionPresupuestal
from app.models.plantilla_cuipo import PlantillaCuipo
from app.utils.constants import CAMPOS_VALIDADOR, COLUMNAS_MONTOS

logger = logging.getLogger(__name__)

_ETIQUETA = "Copia de datos presupuestales"


@dataclass
class CargaBaseResult:
    """Outcome of a snapshot load.

    Attributes:
        registros_eliminados: Working rows deleted before the copy.
        registros_insertados: Rows copied from the snapshot.
        columnas_invalidadas: Working columns now NULL that the stages or
            the row edits must fill again.
        siguiente_etapa: Stage the pipeline must restart from.
    """

    registros_eliminados: int = 0
    registros_insertados: int = 0
    columnas_invalidadas: list[str] = field(default_factory=list)
    siguiente_etapa: str = ""


def columnas_invalidadas() -> list[str]:
    """Every working column a snapshot load resets, in stage order."""
    columnas: list[str] = []
    for clave in orden_topologico():
        etapa = ETAPAS[clave]
        for columna in (*etapa.COPIA, *etapa.ESCRIBE):
            if columna not in columnas:
                columnas.append(columna)
    columnas.extend(CAMPOS_VALIDADOR)
    return columnas


def _sincronizar_secuencia(db: Session) -> None:
    """Move the PostgreSQL id sequence past the copied ids."""
    if db.get_bind().dialect.name != "postgresql":
        return
    tabla = nombre_tabla(PlantillaCuipo.__tablename__)
    db.execute(
        text(
            "SELECT setval(pg_get_serial_sequence(:tabla, 'id'), "
            f"(SELECT COALESCE(MAX(id), 0) + 1 FROM {tabla}), false)"
        ),
        {"tabla": tabla},
    )


def copiar_datos_presupuestales(db: Session) -> CargaBaseResult:
    """Replace the working rows with the snapshot's fondo and amounts.

    Runs in one transaction under the same lock as the stages.

    Raises:
        TablaNoEncontradaError: The working or snapshot table is missing.
        FormatoDatoError: An amount cell is not numeric.
        EtapaError: Any other database failure (the delete is rolled back).
    """
    sugerencias = [
        "Verifique que las tablas "
        f"{nombre_tabla(PlantillaCuipo.__tablename__)} y "
        f"{nombre_tabla(BaseEjecucionPresupuestal.__tablename__)} existan.",
        "Cargue primero el archivo de ejecución presupuestal con /upload.",
    ]

    with bloqueo_plantilla(_ETIQUETA):
        logger.info("Iniciando %s...", _ETIQUETA.lower())
        for tabla in (PlantillaCuipo.__tablename__, BaseEjecucionPresupuestal.__tablename__):
            if not tabla_existe(db, tabla):
                raise TablaNoEncontradaError(
                    nombre_tabla(tabla), etapa=_ETIQUETA, sugerencias=sugerencias
                )

        origen = {c.name: c for c in BaseEjecucionPresupuestal.__table__.columns}
        claves = {c.name: c.key for c in PlantillaCuipo.__table__.columns}
        try:
            filas = db.execute(
                select(origen["id"], origen["fondo"], *(origen[c] for c in COLUMNAS_MONTOS))
                .order_by(origen["id"])
            ).all()

            registros = []
            for fila in filas:
                registro = {claves["id"]: fila[0], claves["fondo"]: fila[1]}
                for columna, valor in zip(COLUMNAS_MONTOS, fila[2:]):
                    try:
                        registro[claves[columna]] = normalizar_monto(valor)
                    except ValueError as exc:
                        raise FormatoDatoError(
                            f"Valor no numérico en '{columna}' del registro {fila[0]}: {valor!r}",
                            registro_id=fila[0],
                            etapa=_ETIQUETA,
                            sugerencias=sugerencias,
                        ) from exc
                registros.append(registro)

            eliminados = db.execute(delete(PlantillaCuipo.__table__)).rowcount
            if registros:
                db.execute(insert(PlantillaCuipo.__table__), registros)
            _sincronizar_secuencia(db)
            db.commit()
        except EtapaError:
            db.rollback()
            logger.exception("Error en %s; transacción revertida", _ETIQUETA)
            raise
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("Error de base de datos en %s; transacción revertida", _ETIQUETA)
            raise EtapaError(str(exc), etapa=_ETIQUETA, sugerencias=sugerencias) from exc

    result = CargaBaseResult(
        registros_eliminados=eliminados,
        registros_insertados=len(registros),
        columnas_invalidadas=columnas_invalidadas(),
        siguiente_etapa=orden_topologico()[0],
    )
    logger.info(
        "%s completada: eliminados=%d insertados=%d",
        _ETIQUETA, result.registros_eliminados, result.registros_insertados,
    )
    return result
