"""
Working-table service tests: visibility by role, row edits, table reads and
the dropdown sources.
"""

import pytest

from app.etapas.errores import RegistroNoEncontradoError, SinCamposError, TablaNoEncontradaError
from app.etapas.orquestador import ejecutar_todo
from app.models import PlantillaCuipo
from app.services import plantilla_service as svc
from app.utils.constants import SECRETARIA_EDUCACION, SECRETARIA_SALUD


@pytest.fixture()
def procesada(plantilla_cargada):
    ejecutar_todo(plantilla_cargada)
    return plantilla_cargada


# ── Visibility ────────────────────────────────────────────────────────────────

class TestListarPlantilla:
    def test_admin_sees_all_with_totales_last(self, procesada, usuarios):
        filas = svc.listar_plantilla(procesada, usuarios["admin"])
        assert [f.id for f in filas] == [1, 2, 4, 3]

    def test_admin_can_filter(self, procesada, usuarios):
        filas = svc.listar_plantilla(procesada, usuarios["admin"], SECRETARIA_SALUD)
        assert [f.id for f in filas] == [4]

    def test_dependency_user_is_pinned(self, procesada, usuarios):
        filas = svc.listar_plantilla(procesada, usuarios["educacion"], SECRETARIA_SALUD)
        assert [f.id for f in filas] == [1]

    def test_user_without_dependency_sees_nothing(self, procesada, usuarios):
        assert svc.listar_plantilla(procesada, usuarios["presupuesto"]) == []

    def test_resolver_dependencia(self, usuarios):
        assert svc.resolver_dependencia(usuarios["admin"]) is None
        assert svc.resolver_dependencia(usuarios["admin"], "  ") is None
        assert svc.resolver_dependencia(usuarios["admin"], " X ") == "X"
        assert svc.resolver_dependencia(usuarios["consulta"], "X") == SECRETARIA_SALUD


# ── Row edits ─────────────────────────────────────────────────────────────────

class TestActualizarFila:
    def test_updates_validator_fields_only(self, procesada):
        fila = svc.actualizar_fila(
            procesada, 1, {"cpc_cuipo": "21111", "secretaria": "OTRA", "validador_cpc": "OK"}
        )
        assert fila.cpc_cuipo == "21111"
        assert fila.validador_cpc == "OK"
        assert fila.secretaria == SECRETARIA_EDUCACION

    def test_no_fields(self, procesada):
        with pytest.raises(SinCamposError):
            svc.actualizar_fila(procesada, 1, {"secretaria": "OTRA"})

    def test_missing_row(self, procesada):
        with pytest.raises(RegistroNoEncontradoError):
            svc.actualizar_fila(procesada, 999, {"cpc_cuipo": "1"})

    def test_dependency_user_cannot_edit_other_rows(self, procesada, usuarios):
        with pytest.raises(RegistroNoEncontradoError):
            svc.actualizar_fila(procesada, 4, {"cpc_cuipo": "1"}, usuarios["educacion"])
        fila = svc.actualizar_fila(procesada, 1, {"cpc_cuipo": "1"}, usuarios["educacion"])
        assert fila.cpc_cuipo == "1"

    def test_validator_fields_survive_stage_reruns(self, procesada):
        svc.actualizar_fila(procesada, 1, {"producto_cuipo": "2201001"})
        ejecutar_todo(procesada)
        procesada.expire_all()
        assert procesada.get(PlantillaCuipo, 1).producto_cuipo == "2201001"


# ── Tables ────────────────────────────────────────────────────────────────────

class TestTablas:
    def test_listar_tablas(self, db):
        tablas = svc.listar_tablas(db)
        assert "fuentes_cuipo" in tablas
        assert tablas == sorted(tablas)

    def test_accounts_are_not_readable(self, db, usuarios):
        assert "usuario" not in svc.listar_tablas(db)
        with pytest.raises(TablaNoEncontradaError):
            svc.obtener_datos_tabla(db, "usuario")

    def test_working_table_rows(self, procesada):
        filas = svc.obtener_datos_tabla(procesada, PlantillaCuipo.__tablename__)
        assert [f["id"] for f in filas] == [1, 2, 4, 3]
        assert "_ejecucion" in filas[0]

    def test_working_table_rows_follow_dependency_filter(self, procesada, usuarios):
        tabla = PlantillaCuipo.__tablename__
        admin = svc.obtener_datos_tabla(procesada, tabla, usuarios["admin"])
        assert [f["id"] for f in admin] == [1, 2, 4, 3]
        educacion = svc.obtener_datos_tabla(procesada, tabla, usuarios["educacion"])
        assert [f["id"] for f in educacion] == [1]
        assert svc.obtener_datos_tabla(procesada, tabla, usuarios["presupuesto"]) == []
        disponible = svc.obtener_tabla_disponible(procesada, tabla, usuarios["consulta"])
        assert [f["id"] for f in disponible] == [4]

    def test_unknown_table(self, db):
        with pytest.raises(TablaNoEncontradaError):
            svc.obtener_datos_tabla(db, "no_existe; DROP TABLE usuario")

    def test_tablas_disponibles(self, db):
        disponibles = svc.tablas_disponibles(db)
        assert PlantillaCuipo.__tablename__ in disponibles
        assert "usuario" not in disponibles
        with pytest.raises(TablaNoEncontradaError):
            svc.obtener_tabla_disponible(db, "usuario")


# ── Dropdown sources ──────────────────────────────────────────────────────────

class TestOpciones:
    def test_cpc_options_sorted(self, referencias):
        assert svc.opciones_cpc(referencias, "2") == [
            {"label": "21111 - Carne de bovino", "value": "21111 - Carne de bovino"},
            {"label": "21112 - Carne de porcino", "value": "21112 - Carne de porcino"},
        ]

    def test_cpc_options_trimmed(self, referencias):
        assert svc.opciones_cpc(referencias, "4") == [
            {"label": "41000 - Acero", "value": "41000 - Acero"},
        ]

    def test_cpc_options_empty(self, referencias):
        assert svc.opciones_cpc(referencias, "9") == []

    @pytest.mark.parametrize("valor", ["", "12", "a"])
    def test_cpc_invalid_digit(self, referencias, valor):
        with pytest.raises(ValueError):
            svc.opciones_cpc(referencias, valor)

    def test_productos_mga(self, referencias):
        resultado = svc.opciones_productos_mga(referencias, " 2024P00101 ")
        assert resultado["cantidad_producto"] == 2
        assert resultado["options"][0] == {
            "value": "2201001 - Servicio educativo",
            "label": "2201001 - Servicio educativo",
            "producto_codigo": "2201001",
        }

    def test_productos_mga_requires_code(self, referencias):
        with pytest.raises(ValueError, match="codigoSap"):
            svc.opciones_productos_mga(referencias, None)
