"""
Pytest fixtures for the CUIPO backend tests.

Provides an in-memory SQLite database with every table created, reference
fixtures with deliberately duplicated keys, a four-row execution snapshot
(including the Totales row) and a FastAPI TestClient authenticated with
real JWTs.
"""

import os

# Settings are cached on first import; point them at SQLite before that.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DB_SCHEMA"] = ""

import pytest  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import app.models  # noqa: E402,F401
from app.database import Base, build_engine, get_db  # noqa: E402
from app.models import (  # noqa: E402
    BaseEjecucionPresupuestal,
    CodigoDetalleEducacion,
    CodigoDetalleSalud,
    Cpc,
    Dependencia,
    DetalleSectorialEducacion,
    DetalleSectorialSalud,
    EstablecimientoPublico,
    FuenteCuipo,
    PospreCpc,
    ProductoProyecto,
    Proyecto,
    SaludGastoMapping,
    Tercero,
    Usuario,
)
from app.services.auth_service import claims_token  # noqa: E402
from app.utils.security import create_access_token, hash_password  # noqa: E402


# ── Snapshot rows ─────────────────────────────────────────────────────────────
#
# id 1: education row, fondo 1101345670 → fuente 34567, vigencia 1.
# id 2: public establishment (704…), prior-year fondo (16…), pospre that
#       only matches without its last two characters, 3 products.
# id 3: the Totales row.
# id 4: health row with a 2-character pospre (no fallback).

SNAPSHOT = [
    {
        "id": 1,
        "fondo": "1101345670",
        "centro_gestor": "701000",
        "proyecto": "2024P00101",
        "posicion_presupuestaria": "2.1.2.02.01.001",
        "area_funcional": "19010000012310",
        "ppto_inicial": "$ 1,000.50",
        "total_ppto_actual": "1200",
        "compromiso": "300.25",
        "ejecucion": "250",
    },
    {
        "id": 2,
        "fondo": "1600112340",
        "centro_gestor": " 704100 ",
        "proyecto": "P-EST-1",
        "posicion_presupuestaria": "2302020201",
        "area_funcional": "1905000000453",
        "ppto_inicial": "500",
        "total_ppto_actual": "500",
    },
    {
        "id": 3,
        "fondo": "Totales",
        "ppto_inicial": "5000",
        "total_ppto_actual": "5000",
    },
    {
        "id": 4,
        "fondo": "1102345670",
        "centro_gestor": "702000",
        "proyecto": "2024P00202",
        "posicion_presupuestaria": "99",
        "area_funcional": "1906000000011",
        "ppto_inicial": "2000",
        "total_ppto_actual": "1800",
        "compromiso": "",
    },
]

SECRETARIA_EDUCACION = "SECRETARÍA DE EDUCACIÓN"
SECRETARIA_SALUD = "SECRETARÍA DE SALUD"


# ── Database ──────────────────────────────────────────────────────────────────

@pytest.fixture()
def engine():
    eng = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def referencias(db):
    """Reference tables used by Partes 1–6 and the dropdown endpoints."""
    db.add_all([
        FuenteCuipo(id=1, cod="34567", cod_cuipo="1.2.1.0.00", situacion_de_fondos="C"),
        FuenteCuipo(id=2, cod=" 34567 ", cod_cuipo="DUPLICADO", situacion_de_fondos="X"),
        FuenteCuipo(id=3, cod="12345", cod_cuipo=None, situacion_de_fondos="S"),

        Dependencia(id=1, centro_gestor="701000", seccion_presupuestal="SP-701",
                    dependencia=SECRETARIA_EDUCACION),
        Dependencia(id=2, centro_gestor="702000", seccion_presupuestal="SP-702",
                    dependencia=SECRETARIA_SALUD),
        Dependencia(id=3, centro_gestor="703000", seccion_presupuestal="SP-703",
                    dependencia=None),
        Dependencia(id=4, centro_gestor="704100", seccion_presupuestal="SP-704",
                    dependencia="NO USAR PARA 704"),

        EstablecimientoPublico(id=1, proyecto="P-EST-1", establecimiento_publico="HOSPITAL GENERAL",
                               centro_gestor="704100", nombre="Dotación hospitalaria"),

        Tercero(id=1, establecimientos_publicos=SECRETARIA_EDUCACION, codigo="900"),
        Tercero(id=2, establecimientos_publicos="HOSPITAL GENERAL", codigo="901"),

        PospreCpc(id=1, pospre="2.1.2.02.01.001", pospre_cuipo="2.1.2.02.01.001"),
        PospreCpc(id=2, pospre="23020202", pospre_cuipo="2.3.2.02.02.008"),

        Proyecto(id=1, p="2024P00101", distrito_m1="2024000100001",
                 nombre_proyecto="Mejoramiento de la calidad educativa"),
        Proyecto(id=2, p="2024P00202", distrito_m1="2024000200002",
                 nombre_proyecto="Atención integral en salud"),

        DetalleSectorialEducacion(id=1, sector="EDUCACION",
                                  detalle_sectorial="22010100 - CALIDAD EDUCATIVA"),
        DetalleSectorialEducacion(id=2, sector="EDUCACION", detalle_sectorial="99999999 - OTRO"),
        DetalleSectorialSalud(id=1, sector="SALUD",
                              detalle_sectorial="190200100 - ATENCIÓN EN SALUD"),
        CodigoDetalleEducacion(id=1, codigo="22010100", descripcion="Calidad educativa"),
        CodigoDetalleSalud(id=1, codigo="190200100", descripcion="Atención en salud"),
        SaludGastoMapping(id=1, codigo_ejecucion="190200100", codigo_programacion="1902001"),

        Cpc(id=1, cpc="2", codigo_clase_o_subclase="21112 - Carne de porcino"),
        Cpc(id=2, cpc="2", codigo_clase_o_subclase="21111 - Carne de bovino"),
        Cpc(id=3, cpc="3", codigo_clase_o_subclase="31000 - Madera"),
        Cpc(id=4, cpc=" 4 ", codigo_clase_o_subclase=" 41000 - Acero  "),

        ProductoProyecto(id=1, codigo_sap="2024P00101", productos_del_proyecto="2201001",
                         cod_pdto_y_nombre="2201001 - Servicio educativo"),
        ProductoProyecto(id=2, codigo_sap="2024P00101", productos_del_proyecto="2201002",
                         cod_pdto_y_nombre="2201002 - Infraestructura educativa"),
    ])
    db.commit()
    return db


@pytest.fixture()
def snapshot(db):
    """Execution snapshot rows, all amounts as text."""
    db.add_all(BaseEjecucionPresupuestal(**fila) for fila in SNAPSHOT)
    db.commit()
    return db


@pytest.fixture()
def plantilla_cargada(referencias, snapshot):
    """Reference data plus a working table freshly loaded from the snapshot."""
    from app.services.carga_base_service import copiar_datos_presupuestales

    copiar_datos_presupuestales(snapshot)
    return snapshot


# ── Users and HTTP client ─────────────────────────────────────────────────────

def _crear_usuario(db, username, rol, dependencia=None):
    usuario = Usuario(
        username=username,
        email=f"{username}@cuipo.test",
        password_hash=hash_password("Secreta123!"),
        nombre_completo=username.title(),
        rol=rol,
        dependencia=dependencia,
        activo=True,
    )
    db.add(usuario)
    db.commit()
    db.refresh(usuario)
    return usuario


@pytest.fixture()
def usuarios(db):
    return {
        "admin": _crear_usuario(db, "admin", "ADMIN"),
        "presupuesto": _crear_usuario(db, "analista", "PRESUPUESTO"),
        "educacion": _crear_usuario(db, "educacion", "DEPENDENCIA", SECRETARIA_EDUCACION),
        "consulta": _crear_usuario(db, "consulta", "CONSULTA", SECRETARIA_SALUD),
    }


@pytest.fixture()
def headers(usuarios):
    """Authorization headers per user key."""
    return {
        clave: {"Authorization": f"Bearer {create_access_token(claims_token(u))}"}
        for clave, u in usuarios.items()
    }


@pytest.fixture()
def client(session_factory, tmp_path, monkeypatch):
    from fastapi.testclient import TestClient

    from app.config import get_settings
    from app.main import app

    monkeypatch.setattr(get_settings(), "UPLOADS_DIR", tmp_path / "uploads")

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
