"""PospreCpc model: budget-position classification with CPC lists (Parte 3)."""

from sqlalchemy import Column, Integer, String

from app.database import Base


class PospreCpc(Base):
    """Budget position (pospre) to CUIPO classification mapping.

    Attributes:
        id: Primary key.
        pospre: District budget position code.
        pospre_cuipo: CUIPO budget-line code.
    """

    __tablename__ = "pospre_con_cpc_y_listas"

    id = Column(Integer, primary_key=True, autoincrement=True)
    pospre = Column(String(100), nullable=True)
    pospre_cuipo = Column(String(100), nullable=True)
