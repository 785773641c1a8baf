"""
Excel ingestion: load a workbook as a new TEXT table.

The first sheet of the workbook becomes table ``<normalised file stem>``
in the configured schema.  An existing table with that name is dropped and
recreated, so re-uploading a file replaces its data.  This is how the
execution snapshot and the reference tables reach the database.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from sqlalchemy import Column, Integer, MetaData, Table, Text, insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_settings
from app.models.plantilla_cuipo import PlantillaCuipo
from app.models.usuario import Usuario
from app.parsers.tabla_parser import TablaParser, normalizar_nombre
from app.services.file_storage import guardar_archivo
from app.utils.constants import EXTENSIONES_EXCEL, FILAS_VISTA_PREVIA

logger = logging.getLogger(__name__)

# Tables the loader must never replace.
_TABLAS_PROTEGIDAS = frozenset(
    {PlantillaCuipo.__tablename__, Usuario.__tablename__, "alembic_version"}
)


@dataclass
class IngestaResult:
    """Outcome of an Excel upload.

    Attributes:
        tabla: Name of the created table.
        columnas: TEXT columns created, besides ``id``.
        filas_insertadas: Non-empty rows inserted.
        vista_previa: First rows as inserted, for display.
        advertencias: Non-fatal parser notes.
        archivo_guardado: Path of the stored copy of the upload.
    """

    tabla: str
    columnas: list[str] = field(default_factory=list)
    filas_insertadas: int = 0
    vista_previa: list[dict[str, Any]] = field(default_factory=list)
    advertencias: list[str] = field(default_factory=list)
    archivo_guardado: str | None = None


def validar_extension(filename: str) -> None:
    """Raise ValueError unless *filename* is an ``.xlsx``/``.xlsm`` workbook."""
    if Path(filename).suffix.lower() not in EXTENSIONES_EXCEL:
        raise ValueError(
            "Formato de archivo no válido. Solo se permiten archivos Excel "
            f"({', '.join(EXTENSIONES_EXCEL)})."
        )


def nombre_tabla_desde_archivo(filename: str) -> str:
    """Normalised file stem, e.g. ``"Base Ejecución 31-03.xlsx"`` → ``"base_ejecucion_3103"``."""
    nombre = normalizar_nombre(Path(filename).stem)
    if not nombre:
        raise ValueError(f"No se pudo derivar un nombre de tabla válido de '{filename}'.")
    if nombre in _TABLAS_PROTEGIDAS:
        raise ValueError(f"La tabla '{nombre}' no puede reemplazarse mediante carga de Excel.")
    return nombre


def _construir_tabla(nombre: str, columnas: list[str]) -> Table:
    return Table(
        nombre,
        MetaData(),
        Column("id", Integer, primary_key=True, autoincrement=True),
        *(Column(columna, Text, nullable=True) for columna in columnas),
    )


def cargar_excel(
    db: Session,
    raw_bytes: bytes,
    filename: str,
    username: str = "anonymous",
) -> IngestaResult:
    """Parse an uploaded workbook and (re)create its table.

    Args:
        db: Active session; the drop, create and insert share its transaction.
        raw_bytes: Workbook contents.
        filename: Original file name; its stem names the table.
        username: Uploader, used to partition the stored copy.

    Returns:
        An ``IngestaResult`` with a preview of the first rows.

    Raises:
        ValueError: Wrong extension, empty file or no usable data.
        RuntimeError: The table could not be written.
    """
    validar_extension(filename)
    if not raw_bytes:
        raise ValueError("El archivo está vacío.")
    tabla_nombre = nombre_tabla_desde_archivo(filename)

    settings = get_settings()
    try:
        guardado = guardar_archivo(raw_bytes, filename, settings.UPLOADS_DIR, usuario=username)
        logger.info("Archivo guardado en: %s", guardado)
    except OSError as exc:
        logger.warning("No se pudo guardar el archivo en disco: %s", exc)
        guardado = None

    resultado = TablaParser(raw_bytes).parse()
    if not resultado.ok:
        raise ValueError("; ".join(resultado.errors))

    columnas: list[str] = resultado.metadata["columnas"]
    tabla = _construir_tabla(tabla_nombre, columnas)
    try:
        conexion = db.connection()
        tabla.drop(bind=conexion, checkfirst=True)
        tabla.create(bind=conexion)
        db.execute(insert(tabla), resultado.records)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Error al crear la tabla '%s'", tabla_nombre)
        raise RuntimeError(f"Error al crear la tabla '{tabla_nombre}': {exc}") from exc

    logger.info(
        "cargar_excel: archivo='%s' tabla='%s' columnas=%d filas=%d usuario='%s'",
        filename, tabla_nombre, len(columnas), resultado.record_count, username,
    )
    return IngestaResult(
        tabla=tabla_nombre,
        columnas=columnas,
        filas_insertadas=resultado.record_count,
        vista_previa=resultado.records[:FILAS_VISTA_PREVIA],
        advertencias=resultado.warnings,
        archivo_guardado=str(guardado) if guardado else None,
    )
