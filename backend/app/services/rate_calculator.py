"""Square-meter rate for sheet materials (purchase cost + cut-and-edge surcharge over sheet area)."""
from typing import Optional

from app.models.pricing_schema import Material
from app.services.pricing_config import (
    BOARD_LAMINATE,
    DEFAULT_CUT_AND_EDGE_COST_PER_SHEET,
    MM2_PER_M2,
)


def sheet_area_sqm(material: Material) -> Optional[float]:
    """Sheet area in m², or None when either dimension is missing or not positive."""
    if material.length_mm is None or material.width_mm is None:
        return None
    if material.length_mm <= 0 or material.width_mm <= 0:
        return None
    return (material.length_mm * material.width_mm) / MM2_PER_M2


def square_meter_rate(
    material: Optional[Material],
    cut_and_edge_cost_per_sheet: float = DEFAULT_CUT_AND_EDGE_COST_PER_SHEET,
) -> Optional[float]:
    """
    Cost per m² of a Board/Laminate sheet.

        rate = (cost_per_unit + cut_and_edge_cost_per_sheet) / sheet_area_sqm

    Returns None for any other material type, a missing cost, or a sheet
    without positive length and width.
    """
    if material is None or material.material_type != BOARD_LAMINATE:
        return None
    if material.cost_per_unit is None:
        return None
    area_sqm = sheet_area_sqm(material)
    if area_sqm is None:
        return None
    return (material.cost_per_unit + cut_and_edge_cost_per_sheet) / area_sqm
