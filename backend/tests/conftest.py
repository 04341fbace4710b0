"""
conftest.py — Shared pytest fixtures for the Joinery Estimator backend test suite.

No database or external service fixtures are defined here.  Engine tests are
pure unit tests; route tests use FastAPI's TestClient with the database
dependency overridden where a route needs one.

Import-path bootstrapping:
    The ``backend/`` directory is inserted into sys.path so that all
    ``app.*`` imports resolve correctly regardless of where pytest is invoked.
"""

import sys
import os
import pytest

# ---------------------------------------------------------------------------
# Ensure ``backend/`` is on the import path before any app imports occur.
# ---------------------------------------------------------------------------
_BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)


# ---------------------------------------------------------------------------
# Materials & hardware
# ---------------------------------------------------------------------------

@pytest.fixture
def carcass_board():
    """
    White melamine carcass sheet, 2400 x 1200 mm at 100 per sheet.

    rate = (100 + 110) / 2.88 = 72.9166... per m²
    """
    from app.models.pricing_schema import Material
    return Material(
        id="mat-carcass",
        name="16mm White Melamine",
        material_type="Board/Laminate",
        cost_per_unit=100.0,
        length_mm=2400.0,
        width_mm=1200.0,
        thickness_mm=16.0,
    )


@pytest.fixture
def face_board():
    """
    Laminate face sheet, 3600 x 1800 mm at 538 per sheet.

    rate = (538 + 110) / 6.48 = 100.0 per m²
    """
    from app.models.pricing_schema import Material
    return Material(
        id="mat-face",
        name="Polytec Ravine",
        material_type="Board/Laminate",
        cost_per_unit=538.0,
        length_mm=3600.0,
        width_mm=1800.0,
        thickness_mm=18.0,
    )


@pytest.fixture
def edge_tape():
    from app.models.pricing_schema import Material
    return Material(
        id="mat-edge",
        name="1mm ABS Edge",
        material_type="Edgetape",
        cost_per_unit=45.0,
        length_mm=100_000.0,
        width_mm=21.0,
    )


@pytest.fixture
def hinge():
    from app.models.pricing_schema import Hardware
    return Hardware(id="hw-hinge", name="Soft-close hinge", cost_per_unit=4.5)


@pytest.fixture
def runner():
    from app.models.pricing_schema import Hardware
    return Hardware(id="hw-runner", name="Full extension runner", cost_per_unit=22.0)


# ---------------------------------------------------------------------------
# Cabinets & joinery items
# ---------------------------------------------------------------------------

@pytest.fixture
def base_template():
    """Two-door base cabinet, 600 x 720 x 560, hinges 'door_qty*2', no area formulas."""
    from app.models.pricing_schema import TemplateCabinet
    return TemplateCabinet(
        id="tpl-base-600",
        name="Base 600 2-door",
        category="Base",
        type="door",
        width_mm=600.0,
        height_mm=720.0,
        depth_mm=560.0,
        door_qty=2,
        shelf_qty=1,
        hinge_qty_formula="door_qty*2",
        assigned_face_material=1,
    )


@pytest.fixture
def scenario_cabinet():
    """Cabinet from the reference quote: 600 x 720 x 560, quantity 2, no template."""
    from app.models.pricing_schema import CabinetInstance
    return CabinetInstance(
        id="cab-1",
        quantity=2,
        width_mm=600.0,
        height_mm=720.0,
        depth_mm=560.0,
    )


@pytest.fixture
def scenario_item(carcass_board, scenario_cabinet):
    """
    Reference joinery item: one scenario cabinet on the carcass board, no face
    material or hardware, 2 factory hours and 1 install hour.

      cabinet_cost = 72.9166 * 1.6344 * 2 = 238.35
      hours_cost   = 2*50 + 1*80          = 180
      item_total                          = 418.35
    """
    from app.models.pricing_schema import JoineryItem
    return JoineryItem(
        id="ji-kitchen",
        name="Kitchen Cabinets",
        carcass_material=carcass_board,
        factory_hours=2.0,
        install_hours=1.0,
        cabinets=[scenario_cabinet],
    )


@pytest.fixture(scope="session")
def cabinet_engine():
    """CabinetCostingEngine with default settings (surcharge 110, formula hardware policy)."""
    from app.services.cabinet_costing_engine import CabinetCostingEngine
    return CabinetCostingEngine()
