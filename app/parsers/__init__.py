"""Excel workbook parsers.

Public API
----------
BaseParser        Abstract base; inherit to create a new parser.
ParseResult       Dataclass returned by every ``parser.parse()`` call.
TablaParser       First sheet → TEXT records with normalised headers.
normalizar_nombre Header / file name → SQL identifier.
"""

from app.parsers.base_parser import BaseParser, ParseResult
from app.parsers.tabla_parser import TablaParser, normalizar_nombre

__all__ = ["BaseParser", "ParseResult", "TablaParser", "normalizar_nombre"]
