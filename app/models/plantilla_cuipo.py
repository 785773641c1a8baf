"""PlantillaCuipo model: the working table enriched by the pipeline stages."""

from sqlalchemy import Column, Integer, Numeric, String, Text

from app.config import get_settings
from app.database import Base


class PlantillaCuipo(Base):
    """One budget line of the CUIPO reporting template.

    Base columns are copied from the execution snapshot (``fondo`` and the
    amounts by the snapshot loader, the rest by the stages' copy-forward
    step).  Derived columns stay NULL until the stage that owns them runs.
    A single row carries ``fondo = "Totales"``: the grand total line.

    Attributes:
        id: Primary key, identical to the snapshot source id.
        fondo: Fund code, or ``"Totales"`` for the aggregate row.
        centro_gestor: Managing-unit code.
        proyecto: SAP project code.
        pospre: Budget position (``posicion_presupuestaria`` in the source).
        area_funcional: Functional-area code (sector + product + quantity).
        fuente, vigencia_gasto, fuente_cuipo, situacion_de_fondos: Parte 1.
        seccion_ptal_cuipo, secretaria, tercero_cuipo: Parte 2.
        validacion_pospre, pospre_cuipo, tiene_cpc: Parte 3.
        bpin, nombre_proyecto: Parte 4.
        sector_cuipo, producto_ppal, cantidad_producto,
            producto_a_reportar: Parte 5.
        detalle_sectorial, extrae_detalle_sectorial,
            detalle_sectorial_prog_gasto: Parte 6.
        codigo_y_nombre_del_cpc … validador_del_producto: manual validation
            fields, written only by row edits.
    """

    __tablename__ = get_settings().TABLA_PLANTILLA

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Base columns
    fondo = Column(String(100), nullable=True)
    centro_gestor = Column(String(100), nullable=True)
    proyecto = Column(String(100), nullable=True)
    pospre = Column(String(100), nullable=True)
    area_funcional = Column(String(100), nullable=True)

    ppto_inicial = Column(Numeric(20, 2), nullable=True)
    reducciones = Column(Numeric(20, 2), nullable=True)
    adiciones = Column(Numeric(20, 2), nullable=True)
    creditos = Column(Numeric(20, 2), nullable=True)
    contracreditos = Column(Numeric(20, 2), nullable=True)
    total_ppto_actual = Column(Numeric(20, 2), nullable=True)
    disponibilidad = Column(Numeric(20, 2), nullable=True)
    compromiso = Column(Numeric(20, 2), nullable=True)
    factura = Column(Numeric(20, 2), nullable=True)
    pagos = Column(Numeric(20, 2), nullable=True)
    disponible_neto = Column(Numeric(20, 2), nullable=True)
    ejecucion = Column(Numeric(20, 2), nullable=True)
    porcentaje_ejecucion = Column("_ejecucion", Numeric(20, 4), nullable=True)

    # Parte 1: fondo
    fuente = Column(String(20), nullable=True)
    vigencia_gasto = Column(String(5), nullable=True)
    fuente_cuipo = Column(String(100), nullable=True)
    situacion_de_fondos = Column(String(200), nullable=True)

    # Parte 2: centro gestor
    seccion_ptal_cuipo = Column(String(100), nullable=True)
    secretaria = Column(String(300), nullable=True)
    tercero_cuipo = Column(String(50), nullable=True)

    # Parte 3: pospre
    validacion_pospre = Column(String(100), nullable=True)
    pospre_cuipo = Column(String(100), nullable=True)
    tiene_cpc = Column(String(100), nullable=True)

    # Parte 4: proyecto
    bpin = Column(String(100), nullable=True)
    nombre_proyecto = Column(Text, nullable=True)

    # Parte 5: área funcional
    sector_cuipo = Column(String(10), nullable=True)
    producto_ppal = Column(String(20), nullable=True)
    cantidad_producto = Column(Integer, nullable=True)
    producto_a_reportar = Column(String(50), nullable=True)

    # Parte 6: detalle sectorial
    detalle_sectorial = Column(Text, nullable=True)
    extrae_detalle_sectorial = Column(String(50), nullable=True)
    detalle_sectorial_prog_gasto = Column(String(100), nullable=True)

    # Manual validation
    codigo_y_nombre_del_cpc = Column(Text, nullable=True)
    cpc_cuipo = Column(String(100), nullable=True)
    validador_cpc = Column(String(100), nullable=True)
    codigo_y_nombre_del_producto_mga = Column(Text, nullable=True)
    producto_cuipo = Column(String(100), nullable=True)
    validador_del_producto = Column(String(100), nullable=True)
