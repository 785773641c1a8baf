"""BaseEjecucionPresupuestal model: the externally supplied execution snapshot."""

from sqlalchemy import Column, Integer, Text

from app.config import get_settings
from app.database import Base


class BaseEjecucionPresupuestal(Base):
    """Budget-execution snapshot uploaded from the SAP spreadsheet.

    The table is normally (re)created by the Excel loader, so every column
    is TEXT exactly as it came from the workbook.  The pipeline only reads
    it: the snapshot loader copies ``fondo`` and the amounts, and the stages
    copy the remaining base columns forward joined on ``id``.
    """

    __tablename__ = get_settings().TABLA_BASE_EJECUCION

    id = Column(Integer, primary_key=True, autoincrement=True)
    fondo = Column(Text, nullable=True)
    centro_gestor = Column(Text, nullable=True)
    proyecto = Column(Text, nullable=True)
    posicion_presupuestaria = Column(Text, nullable=True)
    area_funcional = Column(Text, nullable=True)

    ppto_inicial = Column(Text, nullable=True)
    reducciones = Column(Text, nullable=True)
    adiciones = Column(Text, nullable=True)
    creditos = Column(Text, nullable=True)
    contracreditos = Column(Text, nullable=True)
    total_ppto_actual = Column(Text, nullable=True)
    disponibilidad = Column(Text, nullable=True)
    compromiso = Column(Text, nullable=True)
    factura = Column(Text, nullable=True)
    pagos = Column(Text, nullable=True)
    disponible_neto = Column(Text, nullable=True)
    ejecucion = Column(Text, nullable=True)
    porcentaje_ejecucion = Column("_ejecucion", Text, nullable=True)
