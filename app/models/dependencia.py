"""Dependencia model: managing-unit (centro gestor) to secretariat mapping."""

from sqlalchemy import Column, Integer, String

from app.database import Base


class Dependencia(Base):
    """District dependency that owns one or more centros gestores.

    Attributes:
        id: Primary key.
        centro_gestor: Managing-unit code, e.g. ``"7010000000"``.
        seccion_presupuestal: Budget section reported as ``seccion_ptal_cuipo``.
        dependencia: Secretariat name, e.g. ``"SECRETARÍA DE SALUD"``.
    """

    __tablename__ = "dependencias"

    id = Column(Integer, primary_key=True, autoincrement=True)
    centro_gestor = Column(String(100), nullable=True)
    seccion_presupuestal = Column(String(100), nullable=True)
    dependencia = Column(String(300), nullable=True)
