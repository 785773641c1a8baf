"""Parser for free-form tabular workbooks loaded as database tables.

The first sheet is read with its first row as header.  Headers are turned
into SQL-safe column names and every data row becomes a dict of trimmed
strings.  Used to load the execution snapshot and the reference tables.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from typing import Any

import pandas as pd

from app.parsers.base_parser import BaseParser, ParseResult

logger = logging.getLogger(__name__)

_ESPACIOS = re.compile(r"\s+")
_NO_PERMITIDOS = re.compile(r"[^a-z0-9_]")
# Placeholders emitted for blank header cells.
_ENCABEZADOS_VACIOS = ("__empty", "unnamed")

# Column names reserved by the generated table.
COLUMNAS_RESERVADAS = frozenset({"id"})


def normalizar_nombre(nombre: Any) -> str:
    """Turn a header or file name into a SQL identifier.

    Accents are folded, the text is lowercased, runs of whitespace become
    ``_`` and every character outside ``[a-z0-9_]`` is removed.

    >>> normalizar_nombre("Posición Presupuestaria")
    'posicion_presupuestaria'
    """
    texto = unicodedata.normalize("NFKD", str(nombre))
    texto = "".join(c for c in texto if not unicodedata.combining(c))
    texto = _ESPACIOS.sub("_", texto.strip().lower())
    return _NO_PERMITIDOS.sub("", texto)


class TablaParser(BaseParser):
    """Reads the first sheet of a workbook into TEXT records.

    ``result.metadata["columnas"]`` holds the normalised column names in
    sheet order; blank cells become ``None``.  Blank-header columns are
    dropped; duplicated or reserved names get a numeric suffix.
    """

    FORMAT_NAME = "TABLA"

    def validate_structure(self, df: pd.DataFrame) -> list[str]:
        errors: list[str] = []
        if df.empty or len(df.columns) == 0:
            errors.append("El archivo Excel está vacío o no tiene datos.")
        return errors

    def _mapear_columnas(self, encabezados: list[Any]) -> dict[Any, str]:
        """Original header → unique normalised column name."""
        mapeo: dict[Any, str] = {}
        usados: set[str] = set(COLUMNAS_RESERVADAS)
        for encabezado in encabezados:
            crudo = self._clean_str(encabezado)
            if not crudo or crudo.lower().startswith(_ENCABEZADOS_VACIOS):
                self.result.warnings.append(f"Columna sin encabezado omitida: '{crudo}'")
                continue
            nombre = normalizar_nombre(crudo)
            if not nombre:
                self.result.warnings.append(f"Encabezado sin caracteres válidos omitido: '{crudo}'")
                continue
            candidato, sufijo = nombre, 1
            while candidato in usados:
                sufijo += 1
                candidato = f"{nombre}_{sufijo}"
            if candidato != nombre:
                self.result.warnings.append(f"Columna '{crudo}' renombrada a '{candidato}'")
            usados.add(candidato)
            mapeo[encabezado] = candidato
        return mapeo

    def parse(self) -> ParseResult:
        df = self._load_sheet(sheet_name=0, header=0)
        if not self.result.ok:
            return self.result

        self.result.errors.extend(self.validate_structure(df))
        if not self.result.ok:
            return self.result

        mapeo = self._mapear_columnas(list(df.columns))
        if not mapeo:
            self.result.errors.append("El archivo Excel no tiene encabezados válidos.")
            return self.result

        omitidas = 0
        for _, row in df.iterrows():
            if self._is_empty_row(row):
                omitidas += 1
                continue
            self.result.records.append(
                {
                    columna: self._clean_str(row[original]) or None
                    for original, columna in mapeo.items()
                }
            )

        if not self.result.records:
            self.result.errors.append("El archivo Excel está vacío o no tiene datos.")
        self.result.metadata["columnas"] = list(mapeo.values())
        self.result.metadata["filas_vacias_omitidas"] = omitidas
        logger.info("TablaParser: %s", self.result.summary())
        return self.result
