"""
Pipeline orchestration tests: stage ordering, dependency checks and the
run-all sequence.
"""

from contextlib import contextmanager

import pytest
from sqlalchemy import text

from app.etapas import base_etapa
from app.etapas.errores import DependenciaEtapaError, TablaNoEncontradaError
from app.etapas.orquestador import (
    ETAPAS,
    describir_etapas,
    ejecutar_etapa,
    ejecutar_todo,
    obtener_etapa,
    orden_topologico,
)
from app.models import PlantillaCuipo
from app.services.carga_base_service import copiar_datos_presupuestales


# ── Stage graph ───────────────────────────────────────────────────────────────

class TestOrden:
    def test_topological_order(self):
        assert orden_topologico() == ["parte1", "parte2", "parte3", "parte4", "parte5", "parte6"]

    def test_every_dependency_runs_first(self):
        orden = orden_topologico()
        for clave, etapa in ETAPAS.items():
            for dependencia in etapa.DEPENDE_DE:
                assert orden.index(dependencia) < orden.index(clave)

    def test_describir_etapas(self):
        contratos = describir_etapas()
        assert [c["clave"] for c in contratos] == orden_topologico()
        parte6 = contratos[-1]
        assert parte6["lee"] == ["secretaria"]
        assert parte6["depende_de"] == ["parte2"]
        assert "base_de_ejecucion_presupuestal_31032025" not in parte6["tablas_requeridas"]
        assert "fuentes_cuipo" in contratos[0]["tablas_requeridas"]

    def test_unknown_stage(self):
        with pytest.raises(ValueError, match="parte9"):
            obtener_etapa("parte9")


# ── Dependency checks ─────────────────────────────────────────────────────────

class TestDependencias:
    def test_parte6_requires_parte2(self, plantilla_cargada):
        with pytest.raises(DependenciaEtapaError) as info:
            ejecutar_etapa(plantilla_cargada, "parte6")
        assert info.value.faltantes == ["parte2"]
        assert "Parte 2" in str(info.value)

    def test_parte2_requires_parte1(self, plantilla_cargada):
        with pytest.raises(DependenciaEtapaError) as info:
            ejecutar_etapa(plantilla_cargada, "parte2")
        assert info.value.faltantes == ["parte1"]

    def test_satisfied_after_running_dependencies(self, plantilla_cargada):
        db = plantilla_cargada
        ejecutar_etapa(db, "parte1")
        ejecutar_etapa(db, "parte2")
        result = ejecutar_etapa(db, "parte6")
        assert result.etapa == "parte6"

    def test_empty_working_table_skips_check(self, referencias):
        result = ejecutar_etapa(referencias, "parte6")
        assert result.total_actualizados == 0

    def test_checked_after_waiting_for_lock(self, plantilla_cargada, monkeypatch):
        db = plantilla_cargada
        ejecutar_etapa(db, "parte1")
        ejecutar_etapa(db, "parte2")

        @contextmanager
        def _recarga_mientras_espera(etapa):
            # a snapshot reload commits while the stage waits for the lock
            copiar_datos_presupuestales(db)
            yield

        monkeypatch.setattr(base_etapa, "bloqueo_plantilla", _recarga_mientras_espera)
        with pytest.raises(DependenciaEtapaError) as info:
            ejecutar_etapa(db, "parte6")
        assert info.value.faltantes == ["parte2"]
        assert db.query(PlantillaCuipo).filter(PlantillaCuipo.detalle_sectorial.isnot(None)).count() == 0


# ── Run all ───────────────────────────────────────────────────────────────────

class TestEjecutarTodo:
    def test_full_run(self, plantilla_cargada):
        db = plantilla_cargada
        ejecucion = ejecutar_todo(db)
        assert ejecucion.exitosa
        assert [r.etapa for r in ejecucion.completadas] == orden_topologico()

        db.expire_all()
        fila = db.get(PlantillaCuipo, 1)
        assert fila.fuente_cuipo == "1.2.1.0.00"
        assert fila.secretaria == "SECRETARÍA DE EDUCACIÓN"
        assert fila.pospre_cuipo == "2.1.2.02.01.001"
        assert fila.bpin == "2024000100001"
        assert fila.producto_a_reportar == "1901123"
        assert fila.extrae_detalle_sectorial == "22010100"

    def test_second_run_changes_nothing(self, plantilla_cargada):
        ejecutar_todo(plantilla_cargada)
        ejecucion = ejecutar_todo(plantilla_cargada)
        assert ejecucion.exitosa
        assert sum(r.total_actualizados for r in ejecucion.completadas) == 0

    def test_stops_at_first_failure(self, plantilla_cargada):
        db = plantilla_cargada
        db.execute(text("DROP TABLE proyectos"))
        db.commit()

        ejecucion = ejecutar_todo(db)
        assert not ejecucion.exitosa
        assert ejecucion.fallida == "parte4"
        assert isinstance(ejecucion.error, TablaNoEncontradaError)
        assert [r.etapa for r in ejecucion.completadas] == ["parte1", "parte2", "parte3"]

        db.expire_all()
        fila = db.get(PlantillaCuipo, 1)
        assert fila.pospre_cuipo == "2.1.2.02.01.001"
        assert fila.sector_cuipo is None
        assert fila.detalle_sectorial is None
