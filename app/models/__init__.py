"""SQLAlchemy models package for the CUIPO backend.

Importing all models here ensures that SQLAlchemy's mapper registry is
populated before ``Base.metadata.create_all()`` or Alembic migrations run.

Usage from other modules:
    from app.models import PlantillaCuipo, Dependencia
"""

# Reference tables (read-only for the pipeline)
from app.models.fuente_cuipo import FuenteCuipo  # noqa: F401
from app.models.dependencia import Dependencia  # noqa: F401
from app.models.establecimiento_publico import EstablecimientoPublico  # noqa: F401
from app.models.tercero import Tercero  # noqa: F401
from app.models.pospre_cpc import PospreCpc  # noqa: F401
from app.models.proyecto import Proyecto  # noqa: F401
from app.models.detalle_sectorial import (  # noqa: F401
    CodigoDetalleEducacion,
    CodigoDetalleSalud,
    DetalleSectorialEducacion,
    DetalleSectorialSalud,
    SaludGastoMapping,
)
from app.models.cpc import Cpc  # noqa: F401
from app.models.producto_proyecto import ProductoProyecto  # noqa: F401

# Snapshot source and working table
from app.models.base_ejecucion import BaseEjecucionPresupuestal  # noqa: F401
from app.models.plantilla_cuipo import PlantillaCuipo  # noqa: F401

# Cross-cutting concerns
from app.models.usuario import Usuario  # noqa: F401

__all__ = [
    "FuenteCuipo",
    "Dependencia",
    "EstablecimientoPublico",
    "Tercero",
    "PospreCpc",
    "Proyecto",
    "DetalleSectorialEducacion",
    "DetalleSectorialSalud",
    "CodigoDetalleEducacion",
    "CodigoDetalleSalud",
    "SaludGastoMapping",
    "Cpc",
    "ProductoProyecto",
    "BaseEjecucionPresupuestal",
    "PlantillaCuipo",
    "Usuario",
]
