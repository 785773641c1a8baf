"""Tercero model: third-party codes keyed by establishment name."""

from sqlalchemy import Column, Integer, String

from app.database import Base


class Tercero(Base):
    """Third-party code reported as ``tercero_cuipo``.

    Attributes:
        id: Primary key.
        establecimientos_publicos: Secretariat / establishment name.
        codigo: CUIPO third-party code.
    """

    __tablename__ = "terceros"

    id = Column(Integer, primary_key=True, autoincrement=True)
    establecimientos_publicos = Column(String(300), nullable=True)
    codigo = Column(String(50), nullable=True)
