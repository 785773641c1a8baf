"""Proyecto model: district investment project registry (Parte 4)."""

from sqlalchemy import Column, Integer, String, Text

from app.database import Base


class Proyecto(Base):
    """Investment project registered in the district bank of projects.

    Attributes:
        id: Primary key.
        p: SAP project code (matched against ``proyecto``).
        distrito_m1: District BPIN identifier.
        nombre_proyecto: Project name.
    """

    __tablename__ = "proyectos"

    id = Column(Integer, primary_key=True, autoincrement=True)
    p = Column(String(100), nullable=True)
    distrito_m1 = Column(String(100), nullable=True)
    nombre_proyecto = Column(Text, nullable=True)
