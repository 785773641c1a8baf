"""
Exception taxonomy for the CUIPO pipeline and the working-table services.

Services raise these; routers translate them into ``HTTPException`` responses
with the ``{success, error, detalles, solucion_sugerida}`` envelope.
"""

from __future__ import annotations


class EtapaError(RuntimeError):
    """Base failure of a pipeline stage or of the snapshot loader.

    Attributes:
        etapa: Human label of the failing unit, e.g. ``"Parte 3"``.
        sugerencias: Hints shown to the operator as ``solucion_sugerida``.
    """

    def __init__(
        self,
        mensaje: str,
        *,
        etapa: str = "",
        sugerencias: list[str] | None = None,
    ) -> None:
        super().__init__(mensaje)
        self.etapa = etapa
        self.sugerencias = list(sugerencias or [])


class TablaNoEncontradaError(EtapaError):
    """A required table or relation does not exist in the schema."""

    def __init__(self, tabla: str, *, etapa: str = "", sugerencias: list[str] | None = None) -> None:
        super().__init__(
            f'Tabla "{tabla}" no existe en la base de datos o en el esquema.',
            etapa=etapa,
            sugerencias=sugerencias,
        )
        self.tabla = tabla


class EsquemaError(EtapaError):
    """A query failed because of a missing or renamed column."""


class FormatoDatoError(EtapaError):
    """A value does not have the shape a string rule expects.

    Attributes:
        registro_id: Working-table id of the offending row, when known.
    """

    def __init__(
        self,
        mensaje: str,
        *,
        registro_id: int | None = None,
        etapa: str = "",
        sugerencias: list[str] | None = None,
    ) -> None:
        super().__init__(mensaje, etapa=etapa, sugerencias=sugerencias)
        self.registro_id = registro_id


class DependenciaEtapaError(EtapaError):
    """A stage was requested before the stages it reads from have run."""

    def __init__(self, mensaje: str, *, faltantes: list[str], etapa: str = "") -> None:
        super().__init__(mensaje, etapa=etapa)
        self.faltantes = faltantes


class EtapaEnEjecucionError(EtapaError):
    """Another stage or snapshot load holds the working table."""


class RegistroNoEncontradoError(LookupError):
    """No working row matches the requested id."""


class SinCamposError(ValueError):
    """A row edit was requested without any field to update."""
