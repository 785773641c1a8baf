"""Shared machinery for the workbook parsers.

Uploads arrive as raw bytes from ``UploadFile.read()``; a parser opens them
with pandas (openpyxl engine), collects rows as dicts of strings and reports
fatal problems and non-fatal notes separately, so the caller decides whether
anything may be written to the database.
"""

from __future__ import annotations

import io
import logging
import zipfile
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import pandas as pd

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result container
# ---------------------------------------------------------------------------


@dataclass
class ParseResult:
    """What a parser extracted from one workbook.

    Attributes:
        records: Row dicts keyed by column name, in sheet order.
        errors: Fatal problems; nothing may be persisted when present.
        warnings: Dropped or renamed headers and similar notes.
        metadata: Parser-specific extras (column list, skipped rows).
        format_name: ``FORMAT_NAME`` of the parser that produced it.
    """

    records: list[dict[str, Any]] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    format_name: str = ""

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def record_count(self) -> int:
        return len(self.records)

    def summary(self) -> str:
        estado = "OK" if self.ok else "ERROR"
        return (
            f"[{estado}] {self.format_name}: {self.record_count} filas, "
            f"{len(self.errors)} errores, {len(self.warnings)} advertencias"
        )


# ---------------------------------------------------------------------------
# Base parser
# ---------------------------------------------------------------------------


class BaseParser(ABC):
    """Parser over the bytes of an uploaded ``.xlsx``/``.xlsm`` file.

    Subclasses set ``FORMAT_NAME`` and implement ``validate_structure`` and
    ``parse``; problems go to ``self.result`` instead of being raised.
    """

    FORMAT_NAME: str = ""

    def __init__(self, contenido: bytes) -> None:
        self.contenido = contenido
        self.result = ParseResult(format_name=self.FORMAT_NAME)

    def _load_sheet(
        self,
        sheet_name: str | int = 0,
        header: int | None = 0,
        dtype: type | dict | None = str,
    ) -> pd.DataFrame:
        """Read one sheet with every cell as text.

        Codes such as fondos or project numbers keep their leading zeros
        because nothing is converted to a number.  An unreadable workbook
        yields an empty frame and an entry in ``result.errors``.
        """
        try:
            return pd.read_excel(
                io.BytesIO(self.contenido),
                sheet_name=sheet_name,
                header=header,
                dtype=dtype,
                engine="openpyxl",
            )
        except (ValueError, OSError, KeyError, zipfile.BadZipFile) as exc:
            mensaje = f"No se pudo leer el archivo Excel (hoja {sheet_name!r}): {exc}"
            logger.error(mensaje)
            self.result.errors.append(mensaje)
            return pd.DataFrame()

    # ------------------------------------------------------------------
    # Cell helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _clean_str(value: Any) -> str:
        """Trimmed text of a cell; missing values (None, NaN, NA) give ``""``."""
        if value is None:
            return ""
        if not isinstance(value, str) and pd.isna(value):
            return ""
        return str(value).strip()

    @classmethod
    def _is_empty_row(cls, row: pd.Series) -> bool:
        return not any(cls._clean_str(valor) for valor in row)

    # ------------------------------------------------------------------
    # Interface
    # ------------------------------------------------------------------

    @abstractmethod
    def validate_structure(self, df: pd.DataFrame) -> list[str]:
        """Structural errors of the loaded sheet; empty when usable."""

    @abstractmethod
    def parse(self) -> ParseResult:
        """Fill and return ``self.result``."""
