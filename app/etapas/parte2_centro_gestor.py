"""Parte 2: managing unit, secretariat and third party."""

from __future__ import annotations

from app.etapas.base_etapa import BaseEtapa
from app.etapas.reglas import es_establecimiento_publico, es_vacio
from app.models.dependencia import Dependencia
from app.models.establecimiento_publico import EstablecimientoPublico
from app.models.tercero import Tercero
from app.utils.constants import SECRETARIA_HACIENDA, TERCERO_POR_DEFECTO


class Parte2CentroGestor(BaseEtapa):
    """Centro gestor → seccion_ptal_cuipo, secretaria, tercero_cuipo.

    Units whose code starts with ``704`` are public establishments: their
    secretariat comes from ``estapublicos`` keyed by project.  Every other
    unit resolves through ``dependencias``.  Unknown units fall back to the
    treasury secretariat.
    """

    CLAVE = "parte2"
    NOMBRE = "Parte 2"
    TABLAS_REFERENCIA = (Dependencia, Tercero, EstablecimientoPublico)
    COPIA = {"centro_gestor": "centro_gestor", "proyecto": "proyecto"}
    LEE = ("centro_gestor", "proyecto")
    ESCRIBE = ("seccion_ptal_cuipo", "secretaria", "tercero_cuipo")
    DEPENDE_DE = ("parte1",)
    SUGERENCIAS = [
        "Asegúrese de que los nombres de las columnas ('centro_gestor', 'proyecto', "
        "'seccion_ptal_cuipo', 'secretaria', 'tercero_cuipo', 'establecimientos_publicos', "
        "'codigo', 'seccion_presupuestal', 'dependencia') sean correctos en todas las "
        "tablas involucradas.",
    ]

    def calcular(self) -> None:
        dependencias = self.indice(Dependencia, "centro_gestor")
        establecimientos = self.indice(EstablecimientoPublico, "proyecto")
        terceros = self.indice(Tercero, "establecimientos_publicos")

        valores = {}
        for fila in self.filas:
            if es_vacio(fila.centro_gestor):
                continue
            if es_establecimiento_publico(fila.centro_gestor):
                secretaria = establecimientos.valor(
                    fila.proyecto, "establecimiento_publico", SECRETARIA_HACIENDA
                )
            else:
                secretaria = dependencias.valor(
                    fila.centro_gestor, "dependencia", SECRETARIA_HACIENDA
                )
            valores[fila.id] = {
                "seccion_ptal_cuipo": dependencias.valor(fila.centro_gestor, "seccion_presupuestal"),
                "secretaria": secretaria,
                "tercero_cuipo": terceros.valor(secretaria, "codigo", TERCERO_POR_DEFECTO),
            }

        self.aplicar(
            "centro_gestor",
            "Cálculo de 'seccion_ptal_cuipo', 'secretaria' (tablas 'dependencias' / "
            "'estapublicos') y 'tercero_cuipo' (tabla 'terceros', valor por defecto '1').",
            valores,
        )
