"""FuenteCuipo model: funding-source code mapping used by Parte 1."""

from sqlalchemy import Column, Integer, String

from app.database import Base


class FuenteCuipo(Base):
    """Maps the 5-digit ``fuente`` extracted from a fondo to its CUIPO code.

    Attributes:
        id: Primary key; lowest id wins when ``cod`` is duplicated.
        cod: 5-digit funding-source code as it appears inside ``fondo``.
        cod_cuipo: Code reported to CUIPO.
        situacion_de_fondos: Funds status label ("CSF", "SSF" …).
    """

    __tablename__ = "fuentes_cuipo"

    id = Column(Integer, primary_key=True, autoincrement=True)
    cod = Column(String(20), nullable=True)
    cod_cuipo = Column(String(100), nullable=True)
    situacion_de_fondos = Column(String(200), nullable=True)
