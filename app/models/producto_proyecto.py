"""ProductoProyecto model: MGA products registered for each SAP project."""

from sqlalchemy import Column, Integer, String

from app.database import Base


class ProductoProyecto(Base):
    """MGA product of a project, offered when validating ``producto_cuipo``.

    Attributes:
        id: Primary key.
        codigo_sap: SAP project code.
        productos_del_proyecto: Product code written to ``producto_cuipo``.
        cod_pdto_y_nombre: "code - name" label shown in the selector.
    """

    __tablename__ = "productos_por_proyecto"

    id = Column(Integer, primary_key=True, autoincrement=True)
    codigo_sap = Column(String(100), nullable=True)
    productos_del_proyecto = Column(String(100), nullable=True)
    cod_pdto_y_nombre = Column(String(500), nullable=True)
