"""Abstract base class for all CUIPO enrichment stages.

Provides the shared stage contract: precondition checks on the required
tables, the copy-forward of base columns from the execution snapshot,
first-match reference lookups, change-tracked writes to the working table,
and the all-or-nothing transaction around the whole stage.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, ClassVar

from sqlalchemy import inspect
from sqlalchemy.exc import OperationalError, ProgrammingError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_settings
from app.database import Base
from app.etapas.errores import (
    EsquemaError,
    EtapaEnEjecucionError,
    EtapaError,
    TablaNoEncontradaError,
)
from app.etapas.reglas import limpiar
from app.models.base_ejecucion import BaseEjecucionPresupuestal
from app.models.plantilla_cuipo import PlantillaCuipo

logger = logging.getLogger(__name__)

# One stage (or snapshot load) at a time may hold the working table.
_BLOQUEO_PLANTILLA = threading.Lock()


@contextmanager
def bloqueo_plantilla(etapa: str) -> Iterator[None]:
    """Serialize access to the working table across requests.

    Raises:
        EtapaEnEjecucionError: If the lock is not released within
            ``ETAPA_LOCK_TIMEOUT_SECONDS``.
    """
    timeout = get_settings().ETAPA_LOCK_TIMEOUT_SECONDS
    if not _BLOQUEO_PLANTILLA.acquire(timeout=timeout):
        raise EtapaEnEjecucionError(
            "Otra etapa o carga de datos se está ejecutando sobre la plantilla.",
            etapa=etapa,
            sugerencias=["Espere a que termine el proceso en curso y vuelva a intentarlo."],
        )
    try:
        yield
    finally:
        _BLOQUEO_PLANTILLA.release()


def nombre_tabla(tabla: str) -> str:
    """Qualify *tabla* with the configured schema for messages."""
    schema = get_settings().DB_SCHEMA or None
    return f"{schema}.{tabla}" if schema else tabla


def tabla_existe(db: Session, tabla: str) -> bool:
    """Ask the database whether *tabla* exists in the configured schema."""
    schema = get_settings().DB_SCHEMA or None
    return inspect(db.connection()).has_table(tabla, schema=schema)


# ---------------------------------------------------------------------------
# Result containers
# ---------------------------------------------------------------------------


@dataclass
class PasoResult:
    """Outcome of one internal update of a stage.

    Attributes:
        nombre: Short identifier, e.g. ``"copia_base"``.
        descripcion: What the step does, shown to the operator.
        registros_procesados: Eligible rows evaluated by the step.
        registros_actualizados: Rows whose stored values changed.
    """

    nombre: str
    descripcion: str
    registros_procesados: int = 0
    registros_actualizados: int = 0


@dataclass
class EtapaResult:
    """Container returned by every stage after a committed run."""

    etapa: str
    nombre: str
    pasos: list[PasoResult] = field(default_factory=list)

    @property
    def total_actualizados(self) -> int:
        return sum(p.registros_actualizados for p in self.pasos)

    def summary(self) -> str:
        """One-line human-readable summary of the stage run."""
        conteos = ", ".join(
            f"{p.nombre}={p.registros_actualizados}/{p.registros_procesados}"
            for p in self.pasos
        )
        return f"[OK] etapa={self.etapa} {conteos}"


# ---------------------------------------------------------------------------
# Reference lookups
# ---------------------------------------------------------------------------


class IndiceReferencia:
    """First-match index over a reference table, keyed by trimmed text.

    Rows are indexed in ascending ``id`` order and only the first row per
    key is kept, so duplicated keys always resolve to the lowest id.  Rows
    whose key is NULL never match.
    """

    def __init__(self, filas: Iterable[Any], clave: str) -> None:
        self.clave = clave
        self._filas: dict[str, Any] = {}
        for fila in filas:
            valor = getattr(fila, clave)
            if valor is None:
                continue
            self._filas.setdefault(limpiar(valor), fila)

    @classmethod
    def desde_modelo(cls, db: Session, modelo: type[Base], clave: str) -> IndiceReferencia:
        filas = db.query(modelo).order_by(modelo.id).all()
        return cls(filas, clave)

    def __len__(self) -> int:
        return len(self._filas)

    def __contains__(self, clave: Any) -> bool:
        return clave is not None and limpiar(clave) in self._filas

    def buscar(self, clave: Any) -> Any | None:
        if clave is None:
            return None
        return self._filas.get(limpiar(clave))

    def valor(self, clave: Any, columna: str, defecto: str | None = "") -> str | None:
        """Trimmed *columna* of the first row matching *clave*, or *defecto*.

        A matched row whose column is NULL yields *defecto* as well.
        """
        fila = self.buscar(clave)
        if fila is None:
            return defecto
        valor = getattr(fila, columna)
        if valor is None:
            return defecto
        return limpiar(valor)

    def claves(self) -> set[str]:
        return set(self._filas)


# ---------------------------------------------------------------------------
# Base stage
# ---------------------------------------------------------------------------


class BaseEtapa(ABC):
    """Abstract base for the six enrichment stages.

    Subclasses declare their contract as class attributes and implement
    ``calcular()``:

    * ``CLAVE`` / ``NOMBRE``: identifier (``"parte3"``) and label.
    * ``TABLAS_REFERENCIA``: reference models that must exist.
    * ``REQUIERE_BASE``: whether the snapshot table must exist.
    * ``COPIA``: working column → snapshot column copied forward by id.
    * ``LEE`` / ``ESCRIBE``: working columns read and written.
    * ``DEPENDE_DE``: stages whose output must be present first.

    Attributes:
        db: Session whose transaction spans the whole stage.
        result: Accumulated ``EtapaResult``.
    """

    CLAVE: ClassVar[str] = ""
    NOMBRE: ClassVar[str] = ""
    TABLAS_REFERENCIA: ClassVar[tuple[type[Base], ...]] = ()
    REQUIERE_BASE: ClassVar[bool] = True
    COPIA: ClassVar[dict[str, str]] = {}
    LEE: ClassVar[tuple[str, ...]] = ()
    ESCRIBE: ClassVar[tuple[str, ...]] = ()
    DEPENDE_DE: ClassVar[tuple[str, ...]] = ()
    SUGERENCIAS: ClassVar[list[str]] = []

    def __init__(self, db: Session) -> None:
        self.db = db
        self.result = EtapaResult(etapa=self.CLAVE, nombre=self.NOMBRE)
        self._filas: list[PlantillaCuipo] | None = None

    # ------------------------------------------------------------------
    # Contract helpers
    # ------------------------------------------------------------------

    @classmethod
    def tablas_requeridas(cls) -> list[str]:
        """Working table, snapshot (if used) and reference tables, in order."""
        tablas = [PlantillaCuipo.__tablename__]
        if cls.REQUIERE_BASE:
            tablas.append(BaseEjecucionPresupuestal.__tablename__)
        tablas.extend(modelo.__tablename__ for modelo in cls.TABLAS_REFERENCIA)
        return tablas

    def sugerencias(self) -> list[str]:
        tablas = ", ".join(nombre_tabla(t) for t in self.tablas_requeridas())
        return [f"Verifique que las tablas {tablas} existan.", *self.SUGERENCIAS]

    def validar_tablas(self) -> None:
        """Abort with the first required table that does not exist."""
        for tabla in self.tablas_requeridas():
            if not tabla_existe(self.db, tabla):
                raise TablaNoEncontradaError(
                    nombre_tabla(tabla), etapa=self.NOMBRE, sugerencias=self.sugerencias()
                )

    # ------------------------------------------------------------------
    # Working-table access
    # ------------------------------------------------------------------

    @property
    def filas(self) -> list[PlantillaCuipo]:
        """Working rows ordered by id, loaded once per stage run."""
        if self._filas is None:
            self._filas = (
                self.db.query(PlantillaCuipo).order_by(PlantillaCuipo.id).all()
            )
        return self._filas

    def indice(self, modelo: type[Base], clave: str) -> IndiceReferencia:
        return IndiceReferencia.desde_modelo(self.db, modelo, clave)

    def aplicar(
        self,
        nombre: str,
        descripcion: str,
        valores: dict[int, dict[str, Any]],
    ) -> PasoResult:
        """Write computed values keyed by row id and flush them as one batch.

        Only attributes whose value differs from the stored one are set, so
        ``registros_actualizados`` is zero when re-running on unchanged data.

        Args:
            nombre: Step identifier for the result.
            descripcion: Step description for the result.
            valores: ``{id: {columna: valor}}`` for every eligible row.

        Returns:
            The ``PasoResult`` appended to ``self.result``.
        """
        por_id = {fila.id: fila for fila in self.filas}
        actualizados = 0
        for registro_id, columnas in valores.items():
            fila = por_id[registro_id]
            cambio = False
            for columna, valor in columnas.items():
                if getattr(fila, columna) != valor:
                    setattr(fila, columna, valor)
                    cambio = True
            if cambio:
                actualizados += 1
        self.db.flush()

        paso = PasoResult(
            nombre=nombre,
            descripcion=descripcion,
            registros_procesados=len(valores),
            registros_actualizados=actualizados,
        )
        self.result.pasos.append(paso)
        logger.info(
            "%s: paso '%s' completado. Registros procesados=%d actualizados=%d",
            self.NOMBRE, nombre, paso.registros_procesados, paso.registros_actualizados,
        )
        return paso

    def copiar_desde_base(self) -> PasoResult:
        """Copy ``COPIA`` columns from the snapshot where any of them differ."""
        origen = [getattr(BaseEjecucionPresupuestal, c) for c in self.COPIA.values()]
        base = {
            fila.id: fila
            for fila in self.db.query(BaseEjecucionPresupuestal.id, *origen).all()
        }

        valores: dict[int, dict[str, Any]] = {}
        for fila in self.filas:
            fuente = base.get(fila.id)
            if fuente is None:
                continue
            nuevos = {
                destino: getattr(fuente, columna_origen)
                for destino, columna_origen in self.COPIA.items()
            }
            if any(getattr(fila, d) != v for d, v in nuevos.items()):
                valores[fila.id] = nuevos

        columnas = ", ".join(f"'{c}'" for c in self.COPIA)
        return self.aplicar(
            "copia_base",
            f"Copia de {columnas} desde {BaseEjecucionPresupuestal.__tablename__}.",
            valores,
        )

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    @abstractmethod
    def calcular(self) -> None:
        """Compute the stage's derived columns.

        Implementations should:
        1. Build ``IndiceReferencia`` lookups for their reference tables.
        2. Select the eligible rows from ``self.filas``.
        3. Call ``aplicar`` once per internal update, in dependency order.
        """

    def ejecutar(self, verificar: Callable[[Session], None] | None = None) -> EtapaResult:
        """Run the whole stage in one transaction and commit it.

        Args:
            verificar: Precondition run under the working-table lock before
                anything is read, e.g. the stage dependency check.

        Raises:
            TablaNoEncontradaError: A required table is missing.
            EsquemaError: A query failed on a missing or renamed column.
            FormatoDatoError: A value could not be parsed by a rule.
            EtapaError: Any other database failure.
        """
        with bloqueo_plantilla(self.NOMBRE):
            logger.info("Iniciando procesamiento de %s...", self.NOMBRE)
            try:
                if verificar is not None:
                    verificar(self.db)
                self.validar_tablas()
                if self.COPIA:
                    self.copiar_desde_base()
                self.calcular()
                self.db.commit()
            except EtapaError:
                self.db.rollback()
                logger.exception("Error en %s; transacción revertida", self.NOMBRE)
                raise
            except (ProgrammingError, OperationalError) as exc:
                self.db.rollback()
                logger.exception("Error de esquema en %s; transacción revertida", self.NOMBRE)
                raise EsquemaError(
                    "Error de columna. Posiblemente un nombre de columna incorrecto "
                    f"en la base de datos: {exc.orig}",
                    etapa=self.NOMBRE,
                    sugerencias=self.sugerencias(),
                ) from exc
            except SQLAlchemyError as exc:
                self.db.rollback()
                logger.exception("Error de base de datos en %s; transacción revertida", self.NOMBRE)
                raise EtapaError(str(exc), etapa=self.NOMBRE, sugerencias=self.sugerencias()) from exc

        logger.info("%s completada. %s", self.NOMBRE, self.result.summary())
        return self.result
