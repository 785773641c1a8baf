"""Parte 4: investment project."""

from __future__ import annotations

from app.etapas.base_etapa import BaseEtapa
from app.etapas.reglas import es_vacio
from app.models.proyecto import Proyecto


class Parte4Proyecto(BaseEtapa):
    """Proyecto → bpin, nombre_proyecto."""

    CLAVE = "parte4"
    NOMBRE = "Parte 4"
    TABLAS_REFERENCIA = (Proyecto,)
    COPIA = {"proyecto": "proyecto"}
    LEE = ("proyecto",)
    ESCRIBE = ("bpin", "nombre_proyecto")
    DEPENDE_DE = ("parte2",)
    SUGERENCIAS = [
        "Asegúrese de que los nombres de las columnas ('proyecto', 'p', 'distrito_m1', "
        "'nombre_proyecto') sean correctos en todas las tablas involucradas.",
    ]

    def calcular(self) -> None:
        proyectos = self.indice(Proyecto, "p")
        self.aplicar(
            "proyecto",
            "Cálculo de 'bpin' y 'nombre_proyecto' (basado en 'proyecto' y la tabla 'proyectos').",
            {
                fila.id: {
                    "bpin": proyectos.valor(fila.proyecto, "distrito_m1"),
                    "nombre_proyecto": proyectos.valor(fila.proyecto, "nombre_proyecto"),
                }
                for fila in self.filas
                if not es_vacio(fila.proyecto)
            },
        )
