"""Parte 5: functional area and product."""

from __future__ import annotations

from dataclasses import asdict

from app.etapas.base_etapa import BaseEtapa
from app.etapas.errores import FormatoDatoError
from app.etapas.reglas import descomponer_area_funcional, es_vacio


class Parte5AreaFuncional(BaseEtapa):
    """Área funcional → sector_cuipo, producto_ppal, cantidad_producto, producto_a_reportar.

    No reference table is involved: every output is a substring of the
    functional-area code.  A row whose position 13 is not a digit aborts
    the whole stage.
    """

    CLAVE = "parte5"
    NOMBRE = "Parte 5"
    COPIA = {"area_funcional": "area_funcional"}
    LEE = ("area_funcional",)
    ESCRIBE = ("sector_cuipo", "producto_ppal", "cantidad_producto", "producto_a_reportar")
    DEPENDE_DE = ("parte2",)
    SUGERENCIAS = [
        "Asegúrese de que los nombres de las columnas ('area_funcional', 'sector_cuipo', "
        "'producto_ppal', 'cantidad_producto', 'producto_a_reportar') sean correctos.",
        "Confirme que los datos en 'area_funcional' sigan el formato esperado para las "
        "extracciones de subcadenas.",
    ]

    def calcular(self) -> None:
        valores = {}
        for fila in self.filas:
            if es_vacio(fila.area_funcional):
                continue
            try:
                area = descomponer_area_funcional(fila.area_funcional)
            except ValueError as exc:
                raise FormatoDatoError(
                    "Error de formato al convertir a número en el registro "
                    f"{fila.id}: {exc}",
                    registro_id=fila.id,
                    etapa=self.NOMBRE,
                    sugerencias=self.sugerencias(),
                ) from exc
            valores[fila.id] = asdict(area)

        self.aplicar(
            "area_funcional",
            "Cálculo de 'sector_cuipo', 'producto_ppal', 'cantidad_producto' y "
            "'producto_a_reportar' a partir de 'area_funcional'.",
            valores,
        )
