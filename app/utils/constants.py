"""
Application-wide constants for the CUIPO backend.

Defines domain literals, role names and column lists used across the
pipeline stages, services and routers.
"""

from typing import Final

# ---------------------------------------------------------------------------
# User roles
# ---------------------------------------------------------------------------

ROLES: Final[list[str]] = [
    "ADMIN",
    "PRESUPUESTO",
    "DEPENDENCIA",
    "CONSULTA",
]

ROLES_PIPELINE: Final[tuple[str, ...]] = ("ADMIN", "PRESUPUESTO")
ROLES_EDICION: Final[tuple[str, ...]] = ("ADMIN", "PRESUPUESTO", "DEPENDENCIA")

# ---------------------------------------------------------------------------
# Working table literals
# ---------------------------------------------------------------------------

FONDO_TOTALES: Final[str] = "Totales"

SECRETARIA_HACIENDA: Final[str] = "SECRETARÍA DE HACIENDA"
SECRETARIA_EDUCACION: Final[str] = "SECRETARÍA DE EDUCACIÓN"
SECRETARIA_SALUD: Final[str] = "SECRETARÍA DE SALUD"

PREFIJO_ESTABLECIMIENTO_PUBLICO: Final[str] = "704"
TERCERO_POR_DEFECTO: Final[str] = "1"
VIGENCIA_ANTERIOR: Final[int] = 16  # fondos "16…" are reserves from the prior year

SECTOR_EDUCACION: Final[str] = "EDUCACION"
SECTOR_SALUD: Final[str] = "SALUD"
SEPARADOR_DETALLE: Final[str] = " - "
DETALLE_SIN_CODIGO: Final[str] = "0"

TIENE_CPC_NO_APLICA: Final[str] = "NO APLICA"
PRODUCTO_SELECCIONAR: Final[str] = "SELECCIONAR"

# ---------------------------------------------------------------------------
# Column groups
# ---------------------------------------------------------------------------

# Amount columns copied by the snapshot loader; ``_ejecucion`` is the
# execution percentage.
COLUMNAS_MONTOS: Final[tuple[str, ...]] = (
    "ppto_inicial",
    "reducciones",
    "adiciones",
    "creditos",
    "contracreditos",
    "total_ppto_actual",
    "disponibilidad",
    "compromiso",
    "factura",
    "pagos",
    "disponible_neto",
    "ejecucion",
    "_ejecucion",
)

# Fields editable only through ``actualizar-fila``.
CAMPOS_VALIDADOR: Final[tuple[str, ...]] = (
    "codigo_y_nombre_del_cpc",
    "cpc_cuipo",
    "validador_cpc",
    "codigo_y_nombre_del_producto_mga",
    "producto_cuipo",
    "validador_del_producto",
)

EXTENSIONES_EXCEL: Final[tuple[str, ...]] = (".xlsx", ".xlsm")
FILAS_VISTA_PREVIA: Final[int] = 10
