"""
HTTP tests through the FastAPI TestClient: authentication, roles, the
pipeline endpoints and the error envelope.
"""

import io

import openpyxl
import pytest
from sqlalchemy import text

from app.config import get_settings
from app.models import BaseEjecucionPresupuestal, PlantillaCuipo
from app.utils.constants import SECRETARIA_EDUCACION

API = get_settings().API_PREFIX
EJECUCION = f"{API}/ejecucion"
ESTADISTICAS = f"{API}/estadisticas"


def _libro(*filas) -> bytes:
    wb = openpyxl.Workbook()
    for fila in filas:
        wb.active.append(list(fila))
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


# ── Health and auth ───────────────────────────────────────────────────────────

class TestAuth:
    def test_health(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"

    def test_login_and_me(self, client, usuarios):
        resp = client.post("/api/auth/login", data={"username": "educacion", "password": "Secreta123!"})
        assert resp.status_code == 200
        token = resp.json()["access_token"]

        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["dependencia"] == SECRETARIA_EDUCACION
        assert me.json()["rol"] == "DEPENDENCIA"

    def test_wrong_password(self, client, usuarios):
        resp = client.post("/api/auth/login", data={"username": "admin", "password": "otra"})
        assert resp.status_code == 401

    def test_refresh(self, client, headers):
        resp = client.post("/api/auth/refresh", headers=headers["consulta"])
        assert resp.status_code == 200
        assert resp.json()["token_type"] == "bearer"

    def test_missing_token(self, client):
        assert client.get(f"{EJECUCION}/plantilla").status_code == 401

    def test_invalid_token(self, client):
        resp = client.get(f"{EJECUCION}/plantilla", headers={"Authorization": "Bearer basura"})
        assert resp.status_code == 401


# ── Stages ────────────────────────────────────────────────────────────────────

class TestProcesar:
    def test_role_required(self, client, headers, plantilla_cargada):
        resp = client.post(f"{EJECUCION}/procesar/parte1", headers=headers["consulta"])
        assert resp.status_code == 403

    def test_single_stage(self, client, headers, plantilla_cargada):
        resp = client.post(f"{EJECUCION}/procesar/parte1", headers=headers["presupuesto"])
        assert resp.status_code == 200
        body = resp.json()
        assert body["etapa"] == "parte1"
        assert [p["nombre"] for p in body["pasos"]] == ["fuente_vigencia", "fuente_cuipo"]
        assert body["total_actualizados"] == 6

    def test_unknown_stage(self, client, headers):
        resp = client.post(f"{EJECUCION}/procesar/parte7", headers=headers["admin"])
        assert resp.status_code == 404

    def test_dependency_conflict(self, client, headers, plantilla_cargada):
        resp = client.post(f"{EJECUCION}/procesar/parte6", headers=headers["admin"])
        assert resp.status_code == 409
        detalle = resp.json()["detail"]
        assert detalle["success"] is False
        assert "Parte 2" in detalle["detalles"]

    def test_format_error(self, client, headers, plantilla_cargada):
        db = plantilla_cargada
        db.query(BaseEjecucionPresupuestal).filter_by(id=2).update({"area_funcional": "190500000045"})
        db.commit()
        for etapa in ("parte1", "parte2"):
            assert client.post(f"{EJECUCION}/procesar/{etapa}", headers=headers["admin"]).status_code == 200

        resp = client.post(f"{EJECUCION}/procesar/parte5", headers=headers["admin"])
        assert resp.status_code == 422
        detalle = resp.json()["detail"]
        assert "registro 2" in detalle["detalles"]
        assert detalle["solucion_sugerida"]

    def test_missing_table(self, client, headers, plantilla_cargada):
        db = plantilla_cargada
        db.execute(text("DROP TABLE fuentes_cuipo"))
        db.commit()
        resp = client.post(f"{EJECUCION}/procesar/parte1", headers=headers["admin"])
        assert resp.status_code == 500
        assert "fuentes_cuipo" in resp.json()["detail"]["detalles"]

    def test_todo(self, client, headers, plantilla_cargada):
        resp = client.post(f"{EJECUCION}/procesar/todo", headers=headers["admin"])
        assert resp.status_code == 200
        assert [e["etapa"] for e in resp.json()["etapas"]] == [
            "parte1", "parte2", "parte3", "parte4", "parte5", "parte6",
        ]

    def test_todo_reports_completed_stages(self, client, headers, plantilla_cargada):
        db = plantilla_cargada
        db.execute(text("DROP TABLE proyectos"))
        db.commit()
        resp = client.post(f"{EJECUCION}/procesar/todo", headers=headers["admin"])
        assert resp.status_code == 500
        extra = resp.json()["detail"]["extra"]
        assert extra["etapa_fallida"] == "parte4"
        assert [e["etapa"] for e in extra["etapas_completadas"]] == ["parte1", "parte2", "parte3"]

    def test_etapas(self, client, headers):
        resp = client.get(f"{EJECUCION}/etapas", headers=headers["consulta"])
        assert resp.status_code == 200
        assert resp.json()[1]["depende_de"] == ["parte1"]


# ── Snapshot and working table ────────────────────────────────────────────────

class TestPlantilla:
    def test_copiar_datos(self, client, headers, referencias, snapshot):
        resp = client.post(f"{EJECUCION}/copiar-datos-presupuestales", headers=headers["presupuesto"])
        assert resp.status_code == 200
        body = resp.json()
        assert body["registros_insertados"] == 4
        assert body["siguiente_etapa"] == "parte1"
        assert "secretaria" in body["columnas_invalidadas"]

    def test_plantilla_for_admin(self, client, headers, plantilla_cargada):
        client.post(f"{EJECUCION}/procesar/todo", headers=headers["admin"])
        resp = client.get(f"{EJECUCION}/plantilla", headers=headers["admin"])
        data = resp.json()["data"]
        assert [f["id"] for f in data] == [1, 2, 4, 3]
        assert "_ejecucion" in data[0]

    def test_plantilla_for_dependency(self, client, headers, plantilla_cargada):
        client.post(f"{EJECUCION}/procesar/todo", headers=headers["admin"])
        resp = client.get(f"{EJECUCION}/plantilla", headers=headers["educacion"])
        assert [f["id"] for f in resp.json()["data"]] == [1]

    def test_actualizar_fila(self, client, headers, plantilla_cargada):
        client.post(f"{EJECUCION}/procesar/todo", headers=headers["admin"])
        resp = client.post(
            f"{EJECUCION}/actualizar-fila",
            json={"id": 1, "cpc_cuipo": "21111", "validador_cpc": "OK"},
            headers=headers["educacion"],
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["cpc_cuipo"] == "21111"

    def test_actualizar_fila_errors(self, client, headers, plantilla_cargada):
        sin_campos = client.post(f"{EJECUCION}/actualizar-fila", json={"id": 1}, headers=headers["admin"])
        assert sin_campos.status_code == 400
        inexistente = client.post(
            f"{EJECUCION}/actualizar-fila", json={"id": 999, "cpc_cuipo": "1"}, headers=headers["admin"]
        )
        assert inexistente.status_code == 404
        consulta = client.post(
            f"{EJECUCION}/actualizar-fila", json={"id": 1, "cpc_cuipo": "1"}, headers=headers["consulta"]
        )
        assert consulta.status_code == 403

    def test_tablas_disponibles(self, client, headers, plantilla_cargada):
        resp = client.get(f"{EJECUCION}/obtener-tablas-disponibles", headers=headers["consulta"])
        assert BaseEjecucionPresupuestal.__tablename__ in resp.json()["tablas"]

        params = {"tabla": BaseEjecucionPresupuestal.__tablename__}
        resp = client.get(f"{EJECUCION}/obtener-tablas-disponibles", params=params, headers=headers["presupuesto"])
        assert len(resp.json()["data"]) == 4
        resp = client.get(f"{EJECUCION}/obtener-tablas-disponibles", params=params, headers=headers["consulta"])
        assert resp.status_code == 403

        resp = client.get(
            f"{EJECUCION}/obtener-tablas-disponibles", params={"tabla": "usuario"}, headers=headers["admin"]
        )
        assert resp.status_code == 404

    def test_dropdowns(self, client, headers, referencias):
        cpc = client.get(f"{EJECUCION}/cpc-options/2", headers=headers["consulta"])
        assert cpc.json()["data"][0] == {"label": "21111 - Carne de bovino", "value": "21111 - Carne de bovino"}
        assert client.get(f"{EJECUCION}/cpc-options/x", headers=headers["consulta"]).status_code == 400

        mga = client.get(
            f"{EJECUCION}/productos-mga-options", params={"codigoSap": "2024P00101"}, headers=headers["consulta"]
        )
        assert mga.json()["cantidad_producto"] == 2
        sin_codigo = client.get(f"{EJECUCION}/productos-mga-options", headers=headers["consulta"])
        assert sin_codigo.status_code == 400


# ── Upload and tables ─────────────────────────────────────────────────────────

class TestTablas:
    def test_upload(self, client, headers):
        contenido = _libro(["Cod", "Nombre"], ["1", "uno"])
        resp = client.post(
            f"{API}/upload",
            files={"file": ("Catalogo Nuevo.xlsx", contenido, "application/octet-stream")},
            headers=headers["presupuesto"],
        )
        assert resp.status_code == 200
        assert resp.json()["tabla"] == "catalogo_nuevo"

        datos = client.get(f"{API}/tables/catalogo_nuevo", headers=headers["presupuesto"])
        assert datos.json()["data"] == [{"id": 1, "cod": "1", "nombre": "uno"}]

    def test_upload_requires_role(self, client, headers):
        resp = client.post(
            f"{API}/upload",
            files={"file": ("datos.xlsx", _libro(["A"], ["1"]), "application/octet-stream")},
            headers=headers["educacion"],
        )
        assert resp.status_code == 403

    def test_upload_rejects_csv(self, client, headers):
        resp = client.post(
            f"{API}/upload",
            files={"file": ("datos.csv", b"a,b\n1,2\n", "text/csv")},
            headers=headers["admin"],
        )
        assert resp.status_code == 400

    def test_list_and_missing_table(self, client, headers):
        tablas = client.get(f"{API}/tables", headers=headers["admin"]).json()["tablas"]
        assert "fuentes_cuipo" in tablas
        assert "usuario" not in tablas
        assert client.get(f"{API}/tables/no_existe", headers=headers["admin"]).status_code == 404

    def test_accounts_table_not_served(self, client, headers):
        assert client.get(f"{API}/tables/usuario", headers=headers["admin"]).status_code == 404
        assert client.get(f"{API}/tables/usuario", headers=headers["consulta"]).status_code == 403

    @pytest.mark.parametrize("usuario", ["consulta", "educacion"])
    def test_tables_require_pipeline_role(self, client, headers, usuario):
        assert client.get(f"{API}/tables", headers=headers[usuario]).status_code == 403
        resp = client.get(f"{API}/tables/fuentes_cuipo", headers=headers[usuario])
        assert resp.status_code == 403

    def test_working_table_is_scoped(self, client, headers, plantilla_cargada):
        client.post(f"{EJECUCION}/procesar/todo", headers=headers["admin"])
        ruta = f"{API}/tables/{PlantillaCuipo.__tablename__}"
        assert client.get(ruta, headers=headers["admin"]).json()["total"] == 4
        assert client.get(ruta, headers=headers["presupuesto"]).json()["data"] == []


# ── Statistics ────────────────────────────────────────────────────────────────

class TestEstadisticas:
    @pytest.fixture(autouse=True)
    def _procesar(self, client, headers, plantilla_cargada):
        client.post(f"{EJECUCION}/procesar/todo", headers=headers["admin"])

    def test_dependency_user_is_scoped(self, client, headers):
        resp = client.get(f"{ESTADISTICAS}/proyectos-por-secretaria", headers=headers["educacion"])
        assert [g["secretaria"] for g in resp.json()["data"]] == [SECRETARIA_EDUCACION]

    def test_user_without_dependency(self, client, headers):
        resp = client.get(f"{ESTADISTICAS}/proyectos-por-secretaria", headers=headers["presupuesto"])
        assert resp.json()["data"] == []

    def test_detalle_forces_own_dependency(self, client, headers):
        resp = client.get(
            f"{ESTADISTICAS}/detalle-proyecto",
            params={"secretaria": "SECRETARÍA DE SALUD", "proyecto": "2024P00101"},
            headers=headers["educacion"],
        )
        assert resp.json()["total"] == 1

    def test_grafica(self, client, headers):
        resp = client.get(
            f"{ESTADISTICAS}/grafica-proyecto",
            params={"secretaria": SECRETARIA_EDUCACION, "proyecto": "2024P00101"},
            headers=headers["admin"],
        )
        assert resp.status_code == 200
        assert float(resp.json()["data"]["ppto_inicial"]) == 1000.5

        vacia = client.get(
            f"{ESTADISTICAS}/grafica-proyecto",
            params={"secretaria": SECRETARIA_EDUCACION, "proyecto": "999999"},
            headers=headers["admin"],
        )
        assert vacia.json()["data"] is None
