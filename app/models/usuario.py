"""Usuario model: accounts of the CUIPO API."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.sql import func

from app.database import Base


class Usuario(Base):
    """API account with a role and, for non-admin roles, a dependency.

    ``rol`` is one of ``constants.ROLES``:

    * ADMIN sees every secretariat and can filter by any of them.
    * PRESUPUESTO loads files, copies the snapshot and runs the stages.
    * DEPENDENCIA reads and validates the rows of ``dependencia``.
    * CONSULTA only reads the rows of ``dependencia``.

    ``dependencia`` holds a secretariat name exactly as the stages write it
    to ``secretaria`` in the working table.
    """

    __tablename__ = "usuario"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), unique=True, nullable=False)
    email = Column(String(200), unique=True, nullable=False)
    password_hash = Column(String(200), nullable=False)  # bcrypt
    nombre_completo = Column(String(300), nullable=True)
    rol = Column(String(50), nullable=True)
    dependencia = Column(String(300), nullable=True)
    activo = Column(Boolean, default=True, nullable=False)
    ultimo_acceso = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
