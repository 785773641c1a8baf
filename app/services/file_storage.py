"""
On-disk copies of the uploaded workbooks.

Every upload is kept under ``UPLOADS_DIR`` so a table can be traced back to
the exact file that created it.
"""

from __future__ import annotations

import re
import uuid
from datetime import datetime
from pathlib import Path

_CARACTERES_INVALIDOS = re.compile(r"[^\w.\-]")


def nombre_seguro(nombre: str) -> str:
    """Spaces become ``_``; anything outside ``[\\w.-]`` is dropped."""
    return _CARACTERES_INVALIDOS.sub("", nombre.replace(" ", "_"))


def guardar_archivo(
    contenido: bytes,
    filename: str,
    directorio: Path,
    usuario: str = "anonymous",
) -> Path:
    """Write an uploaded workbook and return its path.

    Files land in ``directorio/{año}/{mes}/{usuario}/`` with a random prefix,
    so uploading the same name twice keeps both copies.
    """
    ahora = datetime.now()
    destino = directorio / str(ahora.year) / f"{ahora.month:02d}" / (nombre_seguro(usuario) or "anonymous")
    destino.mkdir(parents=True, exist_ok=True)

    ruta = destino / f"{uuid.uuid4().hex[:12]}_{nombre_seguro(filename)}"
    ruta.write_bytes(contenido)
    return ruta
