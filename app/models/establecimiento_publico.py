"""EstablecimientoPublico model: public establishments funded through 704 units."""

from sqlalchemy import Column, Integer, String, Text

from app.database import Base


class EstablecimientoPublico(Base):
    """Public establishment reached through a ``704…`` centro gestor.

    Rows under a ``704`` managing unit get their secretariat from this table,
    matched on the SAP project code.

    Attributes:
        id: Primary key.
        proyecto: SAP project code.
        establecimiento_publico: Establishment name used as ``secretaria``.
        centro_gestor: Managing unit the establishment belongs to.
        nombre: Project name as registered by the establishment.
    """

    __tablename__ = "estapublicos"

    id = Column(Integer, primary_key=True, autoincrement=True)
    proyecto = Column(String(100), nullable=True)
    establecimiento_publico = Column(String(300), nullable=True)
    centro_gestor = Column(String(100), nullable=True)
    nombre = Column(Text, nullable=True)
