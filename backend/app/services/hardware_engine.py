"""
hardware_engine.py — Hinge and drawer-hardware quantities per cabinet.

Quantities come from the template's (or the cabinet's overriding) formula
string.  When no formula is configured, two fallback policies exist and are
kept separate:

  FormulaBasedHardwarePolicy  hinges default to 0; drawer hardware 1:1 with drawers
  TypeLookupHardwarePolicy    hinges from a per-door table keyed on cabinet
                              type and height; drawer hardware 1:1 with drawers

Which one is authoritative for new cabinets has not been settled, so each
engine instance selects its policy explicitly.
"""

import logging
import math
import re
from typing import Dict, Optional

from app.services.area_engine import CabinetDimensions
from app.services.formula_parser import QUANTITY_VARIABLES, FormulaError, evaluate_formula
from app.services.logging_config import clip_formula
from app.services.pricing_config import (
    HARDWARE_POLICY_FORMULA,
    HARDWARE_POLICY_TYPE_LOOKUP,
    SHORT_DOOR_MAX_HEIGHT_MM,
    SHORT_HINGES_PER_DOOR,
    STANDARD_HINGES_PER_DOOR,
    TALL_HINGES_PER_DOOR,
)

logger = logging.getLogger("joinery-pricing.formula")

_INTEGER_LITERAL = re.compile(r"^\d+$")


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def evaluate_quantity_formula(formula: Optional[str], door_qty: int, drawer_qty: int) -> int:
    """
    Evaluate a hardware quantity formula such as ``"door_qty*2"`` or ``"4"``.

    Bare integer literals are returned as-is.  Otherwise the result is rounded
    to the nearest integer (halves up) and clamped at 0.  Missing or failing
    formulas give 0.
    """
    if not formula:
        return 0
    text = formula.strip()
    if _INTEGER_LITERAL.match(text):
        return int(text)
    try:
        value = evaluate_formula(
            text,
            {"door_qty": float(door_qty), "drawer_qty": float(drawer_qty)},
            QUANTITY_VARIABLES,
        )
    except FormulaError as e:
        logger.warning(
            "Quantity formula %r could not be evaluated: %s", clip_formula(formula), e,
            extra={"formula_kind": "quantity", "formula": formula},
        )
        return 0
    return max(0, round_half_up(value))


class FormulaBasedHardwarePolicy:
    """Formula when configured; otherwise no hinges and one runner set per drawer."""

    name: str = HARDWARE_POLICY_FORMULA

    def hinges_per_cabinet(self, formula: Optional[str], dims: CabinetDimensions) -> int:
        if formula:
            return evaluate_quantity_formula(formula, dims.door_qty, dims.drawer_qty)
        return 0

    def drawer_hardware_per_cabinet(self, formula: Optional[str], dims: CabinetDimensions) -> int:
        if formula:
            # Drawer hardware formulas see no doors.
            return evaluate_quantity_formula(formula, 0, dims.drawer_qty)
        return max(0, dims.drawer_qty)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class TypeLookupHardwarePolicy(FormulaBasedHardwarePolicy):
    """
    Formula when configured; otherwise hinges per door from the cabinet type:

      tall cabinets            5 per door
      height <= 900 mm         2 per door
      taller than 900 mm       3 per door
    """

    name: str = HARDWARE_POLICY_TYPE_LOOKUP

    @staticmethod
    def hinges_per_door(dims: CabinetDimensions) -> int:
        if dims.is_tall:
            return TALL_HINGES_PER_DOOR
        if dims.height <= SHORT_DOOR_MAX_HEIGHT_MM:
            return SHORT_HINGES_PER_DOOR
        return STANDARD_HINGES_PER_DOOR

    def hinges_per_cabinet(self, formula: Optional[str], dims: CabinetDimensions) -> int:
        if formula:
            return evaluate_quantity_formula(formula, dims.door_qty, dims.drawer_qty)
        return max(0, dims.door_qty) * self.hinges_per_door(dims)


HARDWARE_POLICIES: Dict[str, FormulaBasedHardwarePolicy] = {
    HARDWARE_POLICY_FORMULA: FormulaBasedHardwarePolicy(),
    HARDWARE_POLICY_TYPE_LOOKUP: TypeLookupHardwarePolicy(),
}


def get_hardware_policy(name: str) -> FormulaBasedHardwarePolicy:
    try:
        return HARDWARE_POLICIES[name]
    except KeyError:
        raise ValueError(f"Unknown hardware policy '{name}'") from None
