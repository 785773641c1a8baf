"""Cpc model: central product classification options for manual validation."""

from sqlalchemy import Column, Integer, String

from app.database import Base


class Cpc(Base):
    """CPC class/subclass grouped by the last digit of the budget line.

    Attributes:
        id: Primary key.
        cpc: Single-digit group the option belongs to.
        codigo_clase_o_subclase: Option shown in the CPC selector.
    """

    __tablename__ = "cpc"

    id = Column(Integer, primary_key=True, autoincrement=True)
    cpc = Column(String(5), nullable=True)
    codigo_clase_o_subclase = Column(String(300), nullable=True)
