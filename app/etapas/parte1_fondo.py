"""Parte 1: fund and funding-source classification.

Derives ``fuente`` and ``vigencia_gasto`` from the fondo code, then maps the
fuente to its CUIPO code and funds status through ``fuentes_cuipo``.
"""

from __future__ import annotations

import logging

from app.etapas.base_etapa import BaseEtapa
from app.etapas.reglas import calcular_vigencia_gasto, extraer_fuente
from app.models.fuente_cuipo import FuenteCuipo

logger = logging.getLogger(__name__)


class Parte1Fondo(BaseEtapa):
    """Fondo → fuente, vigencia_gasto, fuente_cuipo, situacion_de_fondos."""

    CLAVE = "parte1"
    NOMBRE = "Parte 1"
    TABLAS_REFERENCIA = (FuenteCuipo,)
    LEE = ("fondo",)
    ESCRIBE = ("fuente", "vigencia_gasto", "fuente_cuipo", "situacion_de_fondos")
    SUGERENCIAS = [
        "Asegúrese de que los nombres de las columnas ('fondo', 'fuente', 'cod', "
        "'cod_cuipo', 'situacion_de_fondos', 'vigencia_gasto') sean correctos en "
        "todas las tablas involucradas.",
    ]

    def calcular(self) -> None:
        elegibles = [fila for fila in self.filas if fila.fondo is not None]
        self.aplicar(
            "fuente_vigencia",
            "Cálculo y validación del campo 'fuente' y 'vigencia_gasto'.",
            {
                fila.id: {
                    "fuente": extraer_fuente(fila.fondo),
                    "vigencia_gasto": calcular_vigencia_gasto(fila.fondo),
                }
                for fila in elegibles
            },
        )

        # Reads the fuente written just above.
        fuentes = self.indice(FuenteCuipo, "cod")
        logger.debug("Parte 1: %d códigos en fuentes_cuipo", len(fuentes))
        self.aplicar(
            "fuente_cuipo",
            "Cálculo de 'fuente_cuipo' y 'situacion_de_fondos' (búsqueda en "
            "'fuentes_cuipo' por 'fuente').",
            {
                fila.id: {
                    "fuente_cuipo": fuentes.valor(fila.fuente, "cod_cuipo"),
                    "situacion_de_fondos": fuentes.valor(fila.fuente, "situacion_de_fondos"),
                }
                for fila in self.filas
                if fila.fuente is not None
            },
        )
