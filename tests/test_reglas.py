"""
Unit tests for the pure string-position rules in app.etapas.reglas.
"""

from decimal import Decimal

import pytest

from app.etapas.reglas import (
    AreaFuncional,
    calcular_vigencia_gasto,
    descomponer_area_funcional,
    es_establecimiento_publico,
    extraer_codigo_detalle,
    extraer_fuente,
    normalizar_monto,
    pospre_sin_sufijo,
    prefijo_detalle,
)


# ── fuente ────────────────────────────────────────────────────────────────────

class TestExtraerFuente:
    def test_five_digits_from_position_five(self):
        assert extraer_fuente("AB1234567CD") == "34567"

    def test_exactly_nine_characters(self):
        assert extraer_fuente("XXXX12345") == "12345"

    def test_short_fondo_is_null(self):
        assert extraer_fuente("12345678") is None

    def test_non_digit_in_window_is_null(self):
        assert extraer_fuente("ABCD12A45XYZ") is None

    def test_totales_and_none(self):
        assert extraer_fuente("Totales") is None
        assert extraer_fuente(None) is None


class TestVigenciaGasto:
    def test_prior_year_prefix(self):
        assert calcular_vigencia_gasto("1600112340") == "2"

    def test_other_numeric_prefix(self):
        assert calcular_vigencia_gasto("1101345670") == "1"

    def test_non_numeric_prefix(self):
        assert calcular_vigencia_gasto("AB1234567") == "1"

    def test_single_character(self):
        assert calcular_vigencia_gasto("1") == "1"

    def test_totales_is_null(self):
        assert calcular_vigencia_gasto("Totales") is None


# ── centro gestor / pospre ────────────────────────────────────────────────────

def test_establecimiento_publico_uses_trimmed_prefix():
    assert es_establecimiento_publico("  704100")
    assert not es_establecimiento_publico("7014")
    assert not es_establecimiento_publico(None)


class TestPospreSinSufijo:
    def test_drops_last_two_characters(self):
        assert pospre_sin_sufijo("2302020201") == "23020202"

    def test_result_is_trimmed(self):
        assert pospre_sin_sufijo("2.3 01") == "2.3"

    def test_too_short(self):
        assert pospre_sin_sufijo(" 99 ") is None
        assert pospre_sin_sufijo(None) is None


# ── área funcional ────────────────────────────────────────────────────────────

class TestAreaFuncional:
    def test_single_product(self):
        assert descomponer_area_funcional("19010000012310") == AreaFuncional(
            sector_cuipo="1901",
            producto_ppal="1901123",
            cantidad_producto=1,
            producto_a_reportar="1901123",
        )

    def test_several_products_need_selection(self):
        area = descomponer_area_funcional(" 1905000000453 ")
        assert area.producto_ppal == "1905045"
        assert area.cantidad_producto == 3
        assert area.producto_a_reportar == "SELECCIONAR"

    def test_zero_products(self):
        assert descomponer_area_funcional("1905000000450").producto_a_reportar == "SELECCIONAR"

    @pytest.mark.parametrize("valor", ["190500000045", "190500000045X"])
    def test_missing_or_non_digit_position_13(self, valor):
        with pytest.raises(ValueError):
            descomponer_area_funcional(valor)


# ── detalle sectorial ─────────────────────────────────────────────────────────

class TestDetalleSectorial:
    def test_prefix_without_separator_is_whole_value(self):
        assert prefijo_detalle(" 22010100 ") == "22010100"

    def test_eight_character_code(self):
        assert extraer_codigo_detalle("22010100 - CALIDAD", {"22010100"}, set()) == "22010100"

    def test_nine_character_code_needs_health_set(self):
        assert extraer_codigo_detalle("190200100 - SALUD", {"190200100"}, set()) == "0"
        assert extraer_codigo_detalle("190200100 - SALUD", set(), {"190200100"}) == "190200100"

    def test_unknown_or_empty(self):
        assert extraer_codigo_detalle("12345678 - X", {"22010100"}, set()) == "0"
        assert extraer_codigo_detalle(None, {"22010100"}, set()) == "0"
        assert extraer_codigo_detalle("   ", {"22010100"}, set()) == "0"


# ── montos ────────────────────────────────────────────────────────────────────

class TestNormalizarMonto:
    def test_strips_currency_and_separators(self):
        assert normalizar_monto("$ 1,250,000.50") == Decimal("1250000.50")

    def test_negative(self):
        assert normalizar_monto("-300") == Decimal("-300")

    def test_blank_is_null(self):
        assert normalizar_monto("") is None
        assert normalizar_monto(None) is None

    def test_invalid(self):
        with pytest.raises(ValueError):
            normalizar_monto("1.2.3")
