"""Parte 6: sector detail for the education and health secretariats."""

from __future__ import annotations

from app.etapas.base_etapa import BaseEtapa
from app.etapas.reglas import extraer_codigo_detalle, limpiar
from app.models.detalle_sectorial import (
    CodigoDetalleEducacion,
    CodigoDetalleSalud,
    DetalleSectorialEducacion,
    DetalleSectorialSalud,
    SaludGastoMapping,
)
from app.utils.constants import (
    SECRETARIA_EDUCACION,
    SECRETARIA_SALUD,
    SECTOR_EDUCACION,
    SECTOR_SALUD,
)


class Parte6DetalleSectorial(BaseEtapa):
    """Secretaria → detalle_sectorial, extrae_detalle_sectorial, detalle_sectorial_prog_gasto.

    Only reads ``secretaria`` (written by Parte 2); there is no copy from the
    execution snapshot.  Rows outside education and health keep an empty
    ``detalle_sectorial_prog_gasto``.
    """

    CLAVE = "parte6"
    NOMBRE = "Parte 6"
    REQUIERE_BASE = False
    TABLAS_REFERENCIA = (
        DetalleSectorialEducacion,
        DetalleSectorialSalud,
        CodigoDetalleEducacion,
        CodigoDetalleSalud,
        SaludGastoMapping,
    )
    LEE = ("secretaria",)
    ESCRIBE = ("detalle_sectorial", "extrae_detalle_sectorial", "detalle_sectorial_prog_gasto")
    DEPENDE_DE = ("parte2",)
    SUGERENCIAS = [
        "Asegúrese de que los nombres de las columnas ('secretaria', 'sector', "
        "'detalle_sectorial', 'codigo', 'codigo_ejecucion', 'codigo_programacion') "
        "sean correctos en todas las tablas involucradas.",
    ]

    def calcular(self) -> None:
        detalle_educacion = self.indice(DetalleSectorialEducacion, "sector").valor(
            SECTOR_EDUCACION, "detalle_sectorial", None
        )
        detalle_salud = self.indice(DetalleSectorialSalud, "sector").valor(
            SECTOR_SALUD, "detalle_sectorial", None
        )
        codigos_educacion = self.indice(CodigoDetalleEducacion, "codigo").claves()
        codigos_salud = self.indice(CodigoDetalleSalud, "codigo").claves()
        codigos_ocho = codigos_educacion | codigos_salud
        gasto_salud = self.indice(SaludGastoMapping, "codigo_ejecucion")

        valores = {}
        for fila in self.filas:
            secretaria = limpiar(fila.secretaria)
            if secretaria == SECRETARIA_EDUCACION:
                detalle = detalle_educacion
            elif secretaria == SECRETARIA_SALUD:
                detalle = detalle_salud
            else:
                detalle = None

            codigo = extraer_codigo_detalle(detalle, codigos_ocho, codigos_salud)
            prog_gasto = ""
            if secretaria == SECRETARIA_SALUD:
                prog_gasto = gasto_salud.valor(codigo, "codigo_programacion")

            valores[fila.id] = {
                "detalle_sectorial": detalle,
                "extrae_detalle_sectorial": codigo,
                "detalle_sectorial_prog_gasto": prog_gasto,
            }

        self.aplicar(
            "detalle_sectorial",
            "Cálculo de 'detalle_sectorial', 'extrae_detalle_sectorial' y "
            "'detalle_sectorial_prog_gasto' para educación y salud.",
            valores,
        )
