"""
test_area_engine.py — Carcass and face areas (m²) from template formulas and
the legacy fallback geometry.

Reference base cabinet 600 x 720 x 560 mm:
  carcass fallback = 0.6*(0.56 + 0.72 + 0.1) + 2*0.56*0.72 = 1.6344 m²
"""

import logging

import pytest

from app.services.area_engine import (
    CabinetDimensions,
    carcass_area_sqm,
    evaluate_area_formula,
    face_area_sqm,
    fallback_carcass_area_sqm,
    fallback_face_area_sqm,
)

BASE = CabinetDimensions(width=600, height=720, depth=560, shelf_qty=1, door_qty=2, category="Base", type="door")


class TestAreaFormula:

    def test_formula_result_is_mm2_converted_to_m2(self):
        """(2*560*720 + 600*720) / 1e6 = 1.2384"""
        area = evaluate_area_formula("(2 * depth * height) + (width * height)", BASE)
        assert area == pytest.approx(1.2384, abs=1e-9)

    @pytest.mark.parametrize("formula", [None, "", "   ", "0", " 0 "])
    def test_missing_or_zero_formula_gives_zero(self, formula):
        assert evaluate_area_formula(formula, BASE) == 0.0

    @pytest.mark.parametrize("formula", [
        "width *",
        "width * length",
        "width / drawer_qty",
        "import os",
        "(" * 400 + "width" + ")" * 400,
        "+".join(["width"] * 5000),
    ])
    def test_malformed_formula_fails_soft(self, formula, caplog):
        with caplog.at_level(logging.WARNING, logger="joinery-pricing.formula"):
            assert evaluate_area_formula(formula, BASE) == 0.0
        assert any(getattr(r, "formula", None) == formula for r in caplog.records)
        assert all(len(r.getMessage()) < 1000 for r in caplog.records)

    def test_counts_are_bound(self):
        """(1.1 + shelf_qty) * width * depth = 2.1 * 600 * 560 / 1e6 = 0.7056"""
        area = evaluate_area_formula("(1.1 + shelf_qty) * width * depth", BASE)
        assert area == pytest.approx(0.7056)


class TestCarcassFallback:

    def test_base_cabinet(self):
        assert fallback_carcass_area_sqm(BASE) == pytest.approx(1.6344, abs=1e-6)

    @pytest.mark.parametrize("category, type_", [("Tall", "door"), ("Wall", "door"), ("", "tall pantry")])
    def test_tall_or_wall(self, category, type_):
        """0.6*(2*0.56 + 2.1) + 2*0.56*2.1 = 1.932 + 2.352 = 4.284"""
        dims = CabinetDimensions(width=600, height=2100, depth=560, category=category, type=type_)
        assert fallback_carcass_area_sqm(dims) == pytest.approx(4.284, abs=1e-6)

    def test_no_formula_uses_fallback(self):
        assert carcass_area_sqm(None, BASE) == pytest.approx(1.6344, abs=1e-6)
        assert carcass_area_sqm("", BASE) == pytest.approx(1.6344, abs=1e-6)

    def test_zero_formula_is_not_fallback(self):
        assert carcass_area_sqm("0", BASE) == 0.0

    def test_formula_takes_precedence(self):
        assert carcass_area_sqm("width * height", BASE) == pytest.approx(0.432)


class TestFaceFallback:

    def test_door_front(self):
        """0.6 * 0.72 = 0.432"""
        assert fallback_face_area_sqm(BASE) == pytest.approx(0.432)

    def test_end_panels_add_depth_by_height(self):
        """0.432 + 0.56*0.72*2 = 0.432 + 0.8064 = 1.2384"""
        dims = CabinetDimensions(width=600, height=720, depth=560, end_panels_qty=2)
        assert fallback_face_area_sqm(dims) == pytest.approx(1.2384)

    def test_open_cabinet_faced_like_carcass(self):
        dims = CabinetDimensions(width=600, height=720, depth=560, type="open", category="Base")
        assert fallback_face_area_sqm(dims) == pytest.approx(1.6344, abs=1e-6)

    def test_no_formula_uses_fallback(self):
        assert face_area_sqm(None, BASE) == pytest.approx(0.432)

    def test_formula_replaces_fallback(self):
        assert face_area_sqm("width * height * 2", BASE) == pytest.approx(0.864)


class TestCabinetDimensions:

    def test_geometry_requires_all_three(self):
        assert BASE.has_geometry()
        assert not CabinetDimensions(width=600, height=720, depth=0).has_geometry()
        assert not CabinetDimensions(width=600, height=-1, depth=560).has_geometry()

    def test_bindings_cover_area_variables(self):
        assert BASE.bindings() == {
            "width": 600.0, "height": 720.0, "depth": 560.0,
            "shelf_qty": 1.0, "drawer_qty": 0.0, "door_qty": 2.0, "end_panels_qty": 0.0,
        }

    def test_type_keywords_are_case_insensitive(self):
        assert CabinetDimensions(category="TALL").is_tall
        assert CabinetDimensions(type="Open Shelf").is_open
        assert not BASE.is_tall_or_wall
