"""Parte 3: budget position (pospre) classification."""

from __future__ import annotations

from app.etapas.base_etapa import BaseEtapa
from app.etapas.reglas import es_vacio, pospre_sin_sufijo
from app.models.pospre_cpc import PospreCpc
from app.utils.constants import TIENE_CPC_NO_APLICA


class Parte3Pospre(BaseEtapa):
    """Pospre → validacion_pospre, pospre_cuipo, tiene_cpc."""

    CLAVE = "parte3"
    NOMBRE = "Parte 3"
    TABLAS_REFERENCIA = (PospreCpc,)
    COPIA = {"pospre": "posicion_presupuestaria"}
    LEE = ("pospre",)
    ESCRIBE = ("validacion_pospre", "pospre_cuipo", "tiene_cpc")
    DEPENDE_DE = ("parte2",)
    SUGERENCIAS = [
        "Asegúrese de que los nombres de las columnas ('pospre', 'posicion_presupuestaria', "
        "'pospre_cuipo') sean correctos en todas las tablas involucradas.",
    ]

    def calcular(self) -> None:
        por_pospre = self.indice(PospreCpc, "pospre")
        por_cuipo = self.indice(PospreCpc, "pospre_cuipo")

        valores = {}
        for fila in self.filas:
            if es_vacio(fila.pospre):
                continue
            clasificacion = por_pospre.valor(fila.pospre, "pospre_cuipo", None)
            if clasificacion is None:
                clasificacion = por_pospre.valor(pospre_sin_sufijo(fila.pospre), "pospre_cuipo")
            valores[fila.id] = {
                "validacion_pospre": clasificacion,
                "pospre_cuipo": clasificacion,
            }
        self.aplicar(
            "pospre_cuipo",
            "Cálculo de 'validacion_pospre' y 'pospre_cuipo' (basado en 'pospre' y la "
            "tabla 'pospre_con_cpc_y_listas').",
            valores,
        )

        self.aplicar(
            "tiene_cpc",
            "Cálculo del campo 'tiene_cpc' (basado en 'pospre_cuipo' y la tabla "
            "'pospre_con_cpc_y_listas').",
            {
                fila.id: {
                    "tiene_cpc": por_cuipo.valor(fila.pospre_cuipo, "pospre_cuipo", TIENE_CPC_NO_APLICA),
                }
                for fila in self.filas
                if not es_vacio(fila.pospre_cuipo)
            },
        )
