"""Sector-detail reference tables for education and health (Parte 6)."""

from sqlalchemy import Column, Integer, String, Text

from app.database import Base


class DetalleSectorialEducacion(Base):
    """Sector-detail value reported for the education secretariat."""

    __tablename__ = "detalle_sectorial_educacion"

    id = Column(Integer, primary_key=True, autoincrement=True)
    sector = Column(String(50), nullable=True)
    detalle_sectorial = Column(Text, nullable=True)


class DetalleSectorialSalud(Base):
    """Sector-detail value reported for the health secretariat."""

    __tablename__ = "detalle_sectorial_salud"

    id = Column(Integer, primary_key=True, autoincrement=True)
    sector = Column(String(50), nullable=True)
    detalle_sectorial = Column(Text, nullable=True)


class CodigoDetalleEducacion(Base):
    """Valid 8-character education sector-detail codes."""

    __tablename__ = "codigos_detalle_educacion"

    id = Column(Integer, primary_key=True, autoincrement=True)
    codigo = Column(String(20), nullable=True)
    descripcion = Column(Text, nullable=True)


class CodigoDetalleSalud(Base):
    """Valid 8- or 9-character health sector-detail codes."""

    __tablename__ = "codigos_detalle_salud"

    id = Column(Integer, primary_key=True, autoincrement=True)
    codigo = Column(String(20), nullable=True)
    descripcion = Column(Text, nullable=True)


class SaludGastoMapping(Base):
    """Health execution code to spending-programme code.

    Attributes:
        id: Primary key.
        codigo_ejecucion: Code extracted from ``detalle_sectorial``.
        codigo_programacion: Programming code reported as
            ``detalle_sectorial_prog_gasto``.
    """

    __tablename__ = "salud_gasto_mapping"

    id = Column(Integer, primary_key=True, autoincrement=True)
    codigo_ejecucion = Column(String(20), nullable=True)
    codigo_programacion = Column(String(100), nullable=True)
