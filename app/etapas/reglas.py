"""
String-position business rules applied by the enrichment stages.

Every function here is pure: it takes raw column values and returns the
derived value, so the rules can be exercised without a database.  Positions
in the docstrings are 1-indexed, as in the budget office's spreadsheet
formulas the rules come from.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from app.utils.constants import (
    DETALLE_SIN_CODIGO,
    FONDO_TOTALES,
    PREFIJO_ESTABLECIMIENTO_PUBLICO,
    PRODUCTO_SELECCIONAR,
    SEPARADOR_DETALLE,
    VIGENCIA_ANTERIOR,
)

_CINCO_DIGITOS = re.compile(r"^[0-9]{5}$")
_SOLO_DIGITOS = re.compile(r"^[0-9]+$")
_UN_DIGITO = re.compile(r"^[0-9]$")
_NO_NUMERICO = re.compile(r"[^0-9.\-]")


# ---------------------------------------------------------------------------
# Generic helpers
# ---------------------------------------------------------------------------


def limpiar(valor: Any) -> str:
    """Return the value as a stripped string; ``None`` becomes ``""``."""
    if valor is None:
        return ""
    return str(valor).strip()


def es_vacio(valor: Any) -> bool:
    """True when the value is NULL or blank after trimming."""
    return limpiar(valor) == ""


def normalizar_monto(valor: Any) -> Decimal | None:
    """Parse an amount cell exported as text.

    Every character other than digits, ``.`` and ``-`` is removed first, so
    ``"$ 1,250,000.50"`` becomes ``Decimal("1250000.50")``.

    Raises:
        ValueError: If what remains is not a number (e.g. ``"1.2.3"``).
    """
    if valor is None:
        return None
    if isinstance(valor, Decimal):
        return valor
    if isinstance(valor, (int, float)):
        return Decimal(str(valor))
    limpio = _NO_NUMERICO.sub("", str(valor))
    if limpio == "":
        return None
    try:
        return Decimal(limpio)
    except InvalidOperation as exc:
        raise ValueError(f"Monto no numérico: {valor!r}") from exc


# ---------------------------------------------------------------------------
# Parte 1: fondo
# ---------------------------------------------------------------------------


def es_fila_totales(fondo: str | None) -> bool:
    return fondo == FONDO_TOTALES


def extraer_fuente(fondo: str | None) -> str | None:
    """Funding-source code embedded in a fondo.

    The five characters at positions 5–9 when the fondo has at least nine
    characters and those five are all digits; ``None`` otherwise and for
    the Totales row.
    """
    if fondo is None or es_fila_totales(fondo):
        return None
    if len(fondo) < 9:
        return None
    candidato = fondo[4:9]
    if _CINCO_DIGITOS.match(candidato):
        return candidato
    return None


def calcular_vigencia_gasto(fondo: str | None) -> str | None:
    """``"2"`` for prior-year fondos (prefix 16), ``"1"`` otherwise.

    The Totales row and NULL fondos have no vigencia.
    """
    if fondo is None or es_fila_totales(fondo):
        return None
    prefijo = fondo[:2]
    if _SOLO_DIGITOS.match(prefijo) and int(prefijo) == VIGENCIA_ANTERIOR:
        return "2"
    return "1"


# ---------------------------------------------------------------------------
# Parte 2: centro gestor
# ---------------------------------------------------------------------------


def es_establecimiento_publico(centro_gestor: str | None) -> bool:
    """Managing units starting with 704 are public establishments."""
    return limpiar(centro_gestor)[:3] == PREFIJO_ESTABLECIMIENTO_PUBLICO


# ---------------------------------------------------------------------------
# Parte 3: pospre
# ---------------------------------------------------------------------------


def pospre_sin_sufijo(pospre: str | None) -> str | None:
    """Pospre without its last two characters, trimmed.

    Used as the fallback key when the full pospre has no classification.
    Returns ``None`` when the trimmed pospre has fewer than 3 characters.
    """
    if pospre is None or len(pospre.strip()) < 3:
        return None
    return pospre[: len(pospre) - 2].strip()


# ---------------------------------------------------------------------------
# Parte 5: área funcional
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AreaFuncional:
    """Fields encoded in a functional-area code."""

    sector_cuipo: str
    producto_ppal: str
    cantidad_producto: int
    producto_a_reportar: str


def descomponer_area_funcional(area_funcional: str) -> AreaFuncional:
    """Split a functional-area code into its CUIPO fields.

    * ``sector_cuipo``: characters 1–4.
    * ``producto_ppal``: characters 1–4 followed by characters 10–12.
    * ``cantidad_producto``: the digit at position 13.
    * ``producto_a_reportar``: ``producto_ppal`` when exactly one product,
      otherwise ``"SELECCIONAR"``.

    Raises:
        ValueError: If position 13 is missing or is not a digit.
    """
    valor = limpiar(area_funcional)
    sector = valor[:4]
    producto_ppal = sector + valor[9:12]
    caracter = valor[12:13]
    if not _UN_DIGITO.match(caracter):
        raise ValueError(
            f"El carácter en la posición 13 de '{valor}' no es un dígito "
            f"(encontrado: {caracter!r})."
        )
    cantidad = int(caracter)
    return AreaFuncional(
        sector_cuipo=sector,
        producto_ppal=producto_ppal,
        cantidad_producto=cantidad,
        producto_a_reportar=producto_ppal if cantidad == 1 else PRODUCTO_SELECCIONAR,
    )


# ---------------------------------------------------------------------------
# Parte 6: detalle sectorial
# ---------------------------------------------------------------------------


def prefijo_detalle(detalle_sectorial: str | None) -> str:
    """Text before the first ``" - "``; the whole value if there is none."""
    texto = limpiar(detalle_sectorial)
    return texto.split(SEPARADOR_DETALLE, 1)[0].strip()


def extraer_codigo_detalle(
    detalle_sectorial: str | None,
    codigos_ocho: set[str],
    codigos_nueve: set[str],
) -> str:
    """Validated sector-detail code, or ``"0"``.

    Args:
        detalle_sectorial: Value such as ``"19.02.100 - ATENCIÓN …"``.
        codigos_ocho: Codes accepted with 8 characters (education ∪ health).
        codigos_nueve: Codes accepted with 9 characters (health).

    Returns:
        The prefix when it is an 8-character code in ``codigos_ocho`` or a
        9-character code in ``codigos_nueve``; ``"0"`` otherwise.
    """
    if es_vacio(detalle_sectorial):
        return DETALLE_SIN_CODIGO
    prefijo = prefijo_detalle(detalle_sectorial)
    if len(prefijo) == 8 and prefijo in codigos_ocho:
        return prefijo
    if len(prefijo) == 9 and prefijo in codigos_nueve:
        return prefijo
    return DETALLE_SIN_CODIGO
