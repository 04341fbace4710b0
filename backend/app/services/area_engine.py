"""
area_engine.py — Carcass and face surface areas for a cabinet.

Template formulas are written over millimetre dimensions and evaluate to mm²;
results are returned in m².  Cabinets whose template has no formula use the
legacy fixed geometry below.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from app.services.formula_parser import AREA_VARIABLES, FormulaError, evaluate_formula
from app.services.logging_config import clip_formula
from app.services.pricing_config import MM2_PER_M2, MM_PER_M

logger = logging.getLogger("joinery-pricing.formula")

# Allowance (m) added to the carcass girth of base cabinets for the kick/rail strip
_BASE_CARCASS_ALLOWANCE_M: float = 0.1


@dataclass(frozen=True)
class CabinetDimensions:
    """Effective dimensions (mm) and feature counts for one cabinet."""
    width: float = 0.0
    height: float = 0.0
    depth: float = 0.0
    shelf_qty: int = 0
    drawer_qty: int = 0
    door_qty: int = 0
    end_panels_qty: int = 0
    type: str = ""
    category: str = ""

    def has_geometry(self) -> bool:
        return self.width > 0 and self.height > 0 and self.depth > 0

    def bindings(self) -> Dict[str, float]:
        return {name: float(getattr(self, name)) for name in AREA_VARIABLES}

    def _describes(self, *keywords: str) -> bool:
        text = f"{self.type} {self.category}".lower()
        return any(word in text for word in keywords)

    @property
    def is_tall_or_wall(self) -> bool:
        return self._describes("tall", "wall")

    @property
    def is_tall(self) -> bool:
        return self._describes("tall")

    @property
    def is_open(self) -> bool:
        return self._describes("open", "shelf")


def evaluate_area_formula(formula: Optional[str], dims: CabinetDimensions) -> float:
    """
    Area in m² from a template formula.

    A missing, blank or ``"0"`` formula gives 0.  A formula that fails to
    evaluate also gives 0 and is logged, so one bad template never blocks
    the rest of a quote from pricing.
    """
    if formula is None or formula.strip() in ("", "0"):
        return 0.0
    try:
        area_mm2 = evaluate_formula(formula, dims.bindings(), AREA_VARIABLES)
    except FormulaError as e:
        logger.warning(
            "Area formula %r could not be evaluated: %s", clip_formula(formula), e,
            extra={"formula_kind": "area", "formula": formula},
        )
        return 0.0
    return area_mm2 / MM2_PER_M2


def _box_area_sqm(dims: CabinetDimensions) -> float:
    width_m = dims.width / MM_PER_M
    height_m = dims.height / MM_PER_M
    depth_m = dims.depth / MM_PER_M
    if dims.is_tall_or_wall:
        return width_m * (2 * depth_m + height_m) + 2 * depth_m * height_m
    return width_m * (depth_m + height_m + _BASE_CARCASS_ALLOWANCE_M) + 2 * depth_m * height_m


def fallback_carcass_area_sqm(dims: CabinetDimensions) -> float:
    """
    Legacy carcass geometry (m²):
      tall / wall:  w·(2d + h) + 2·d·h
      otherwise:    w·(d + h + 0.1) + 2·d·h
    """
    return _box_area_sqm(dims)


def fallback_face_area_sqm(dims: CabinetDimensions) -> float:
    """
    Legacy face geometry (m²).  Open / shelf cabinets are faced like a
    carcass; all others get a single w·h front.  End panels add d·h each.
    """
    if dims.is_open:
        area = _box_area_sqm(dims)
    else:
        area = (dims.width / MM_PER_M) * (dims.height / MM_PER_M)
    if dims.end_panels_qty > 0 and dims.depth > 0 and dims.height > 0:
        area += (dims.depth / MM_PER_M) * (dims.height / MM_PER_M) * dims.end_panels_qty
    return area


def carcass_area_sqm(formula: Optional[str], dims: CabinetDimensions) -> float:
    if not formula:
        return fallback_carcass_area_sqm(dims)
    return evaluate_area_formula(formula, dims)


def face_area_sqm(formula: Optional[str], dims: CabinetDimensions) -> float:
    # A configured face formula is expected to include its own end panels.
    if not formula:
        return fallback_face_area_sqm(dims)
    return evaluate_area_formula(formula, dims)
