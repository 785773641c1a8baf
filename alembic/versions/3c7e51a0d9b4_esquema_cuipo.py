"""esquema_cuipo

Crea el esquema CUIPO: plantilla de trabajo, base de ejecución, tablas de
referencia y usuarios.  La base de ejecución y las tablas de referencia
pueden volver a crearse después mediante la carga de Excel.

Revision ID: 3c7e51a0d9b4
Revises:
Create Date: 2026-03-31 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from app.config import get_settings

# revision identifiers, used by Alembic.
revision: str = '3c7e51a0d9b4'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

settings = get_settings()
SCHEMA = settings.DB_SCHEMA or None

MONTOS = (
    'ppto_inicial', 'reducciones', 'adiciones', 'creditos', 'contracreditos',
    'total_ppto_actual', 'disponibilidad', 'compromiso', 'factura', 'pagos',
    'disponible_neto', 'ejecucion',
)

# tabla -> columnas de texto
REFERENCIAS = {
    'fuentes_cuipo': ('cod', 'cod_cuipo', 'situacion_de_fondos'),
    'dependencias': ('centro_gestor', 'seccion_presupuestal', 'dependencia'),
    'estapublicos': ('proyecto', 'establecimiento_publico', 'centro_gestor', 'nombre'),
    'terceros': ('establecimientos_publicos', 'codigo'),
    'pospre_con_cpc_y_listas': ('pospre', 'pospre_cuipo'),
    'proyectos': ('p', 'distrito_m1', 'nombre_proyecto'),
    'detalle_sectorial_educacion': ('sector', 'detalle_sectorial'),
    'detalle_sectorial_salud': ('sector', 'detalle_sectorial'),
    'codigos_detalle_educacion': ('codigo', 'descripcion'),
    'codigos_detalle_salud': ('codigo', 'descripcion'),
    'salud_gasto_mapping': ('codigo_ejecucion', 'codigo_programacion'),
    'cpc': ('cpc', 'codigo_clase_o_subclase'),
    'productos_por_proyecto': ('codigo_sap', 'productos_del_proyecto', 'cod_pdto_y_nombre'),
}

DERIVADAS = (
    'fuente', 'vigencia_gasto', 'fuente_cuipo', 'situacion_de_fondos',
    'seccion_ptal_cuipo', 'secretaria', 'tercero_cuipo',
    'validacion_pospre', 'pospre_cuipo', 'tiene_cpc',
    'bpin', 'nombre_proyecto',
    'sector_cuipo', 'producto_ppal', 'producto_a_reportar',
    'detalle_sectorial', 'extrae_detalle_sectorial', 'detalle_sectorial_prog_gasto',
    'codigo_y_nombre_del_cpc', 'cpc_cuipo', 'validador_cpc',
    'codigo_y_nombre_del_producto_mga', 'producto_cuipo', 'validador_del_producto',
)


def upgrade() -> None:
    if SCHEMA and op.get_bind().dialect.name == 'postgresql':
        op.execute(sa.text(f'CREATE SCHEMA IF NOT EXISTS {SCHEMA}'))

    for tabla, columnas in REFERENCIAS.items():
        op.create_table(
            tabla,
            sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
            *(sa.Column(c, sa.Text(), nullable=True) for c in columnas),
            schema=SCHEMA,
        )

    op.create_table(
        settings.TABLA_BASE_EJECUCION,
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('fondo', sa.Text(), nullable=True),
        sa.Column('centro_gestor', sa.Text(), nullable=True),
        sa.Column('proyecto', sa.Text(), nullable=True),
        sa.Column('posicion_presupuestaria', sa.Text(), nullable=True),
        sa.Column('area_funcional', sa.Text(), nullable=True),
        *(sa.Column(c, sa.Text(), nullable=True) for c in MONTOS),
        sa.Column('_ejecucion', sa.Text(), nullable=True),
        schema=SCHEMA,
    )

    op.create_table(
        settings.TABLA_PLANTILLA,
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('fondo', sa.String(100), nullable=True),
        sa.Column('centro_gestor', sa.String(100), nullable=True),
        sa.Column('proyecto', sa.String(100), nullable=True),
        sa.Column('pospre', sa.String(100), nullable=True),
        sa.Column('area_funcional', sa.String(100), nullable=True),
        *(sa.Column(c, sa.Numeric(20, 2), nullable=True) for c in MONTOS),
        sa.Column('_ejecucion', sa.Numeric(20, 4), nullable=True),
        *(sa.Column(c, sa.Text(), nullable=True) for c in DERIVADAS),
        sa.Column('cantidad_producto', sa.Integer(), nullable=True),
        schema=SCHEMA,
    )

    op.create_table(
        'usuario',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('username', sa.String(100), nullable=False, unique=True),
        sa.Column('email', sa.String(200), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(200), nullable=False),
        sa.Column('nombre_completo', sa.String(300), nullable=True),
        sa.Column('rol', sa.String(50), nullable=True),
        sa.Column('dependencia', sa.String(300), nullable=True),
        sa.Column('activo', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('ultimo_acceso', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        schema=SCHEMA,
    )


def downgrade() -> None:
    op.drop_table('usuario', schema=SCHEMA)
    op.drop_table(settings.TABLA_PLANTILLA, schema=SCHEMA)
    op.drop_table(settings.TABLA_BASE_EJECUCION, schema=SCHEMA)
    for tabla in reversed(list(REFERENCIAS)):
        op.drop_table(tabla, schema=SCHEMA)
