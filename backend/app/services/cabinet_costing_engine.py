"""
CabinetCostingEngine — per-cabinet cost breakdown for joinery quotes.

Covers:
  - Effective dimensions (cabinet override, else template default, else 0)
  - Carcass material cost from the joinery item's carcass sheet rate
  - Face material cost from the cabinet's assigned face-material slot (1-4)
  - Hinge and drawer-hardware cost from formula / policy quantities

Every missing input degrades to a zero contribution; nothing here raises
for incomplete data.
"""

import logging
from typing import Any, Dict, Optional

from app.models.pricing_schema import CabinetInstance, Hardware, JoineryItem, Material
from app.services.area_engine import CabinetDimensions, carcass_area_sqm, face_area_sqm
from app.services.hardware_engine import FormulaBasedHardwarePolicy, get_hardware_policy
from app.services.pricing_config import PricingSettings
from app.services.rate_calculator import square_meter_rate

logger = logging.getLogger("joinery-pricing.cabinet")


def _first_set(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return 0


def resolve_dimensions(cabinet: CabinetInstance) -> CabinetDimensions:
    """Instance value ?? template value ?? 0 for each dimension and count."""
    template = cabinet.template

    def pick(field: str) -> Any:
        return _first_set(getattr(cabinet, field), getattr(template, field, None) if template else None)

    return CabinetDimensions(
        width=float(pick("width_mm")),
        height=float(pick("height_mm")),
        depth=float(pick("depth_mm")),
        shelf_qty=int(pick("shelf_qty")),
        drawer_qty=int(pick("drawer_qty")),
        door_qty=int(pick("door_qty")),
        end_panels_qty=int(pick("end_panels_qty")),
        type=cabinet.type or (template.type if template else None) or "",
        category=cabinet.category or (template.category if template else None) or "",
    )


class CabinetCostingEngine:
    """
    Prices one cabinet instance against the materials and hardware of its
    joinery item.

    The engine holds only configuration (surcharge and hardware policy); all
    cabinet and material data is passed in per call.
    """

    def __init__(
        self,
        settings: Optional[PricingSettings] = None,
        hardware_policy: Optional[FormulaBasedHardwarePolicy] = None,
    ) -> None:
        self.settings = settings or PricingSettings()
        self.hardware_policy = hardware_policy or get_hardware_policy(self.settings.hardware_policy)

    # ------------------------------------------------------------------
    # Rates & formulas
    # ------------------------------------------------------------------

    def material_rate(self, material: Optional[Material]) -> Optional[float]:
        return square_meter_rate(material, self.settings.cut_and_edge_cost_per_sheet)

    @staticmethod
    def hinge_formula(cabinet: CabinetInstance) -> Optional[str]:
        template = cabinet.template
        return cabinet.hinge_qty_formula or (template.hinge_qty_formula if template else None)

    @staticmethod
    def drawer_hardware_formula(cabinet: CabinetInstance) -> Optional[str]:
        template = cabinet.template
        return cabinet.drawer_hardware_qty_formula or (
            template.drawer_hardware_qty_formula if template else None
        )

    # ------------------------------------------------------------------
    # Components
    # ------------------------------------------------------------------

    def calculate_carcass_cost(
        self,
        cabinet: CabinetInstance,
        dims: CabinetDimensions,
        carcass_rate: Optional[float],
    ) -> Dict[str, float]:
        if not carcass_rate or not dims.has_geometry():
            return {"area_sqm": 0.0, "cost": 0.0}
        formula = cabinet.template.carcass_area_formula if cabinet.template else None
        area = carcass_area_sqm(formula, dims)
        return {"area_sqm": area, "cost": carcass_rate * area * cabinet.quantity}

    def calculate_face_cost(
        self,
        cabinet: CabinetInstance,
        dims: CabinetDimensions,
        face_material: Optional[Material],
    ) -> Dict[str, float]:
        face_rate = self.material_rate(face_material)
        if not face_rate or not dims.has_geometry():
            return {"area_sqm": 0.0, "cost": 0.0}
        formula = cabinet.template.face_area_formula if cabinet.template else None
        area = face_area_sqm(formula, dims)
        return {"area_sqm": area, "cost": face_rate * area * cabinet.quantity}

    def _hardware_cost(self, hardware: Optional[Hardware], per_cabinet: int, extra: int, quantity: int) -> Dict[str, float]:
        total_units = (per_cabinet + (extra or 0)) * quantity
        if hardware is None or not hardware.cost_per_unit or total_units == 0:
            return {"per_cabinet": per_cabinet, "total_units": total_units, "cost": 0.0}
        return {
            "per_cabinet": per_cabinet,
            "total_units": total_units,
            "cost": total_units * hardware.cost_per_unit,
        }

    def calculate_hinge_cost(
        self, cabinet: CabinetInstance, dims: CabinetDimensions, hinge: Optional[Hardware]
    ) -> Dict[str, float]:
        per_cabinet = self.hardware_policy.hinges_per_cabinet(self.hinge_formula(cabinet), dims)
        return self._hardware_cost(hinge, per_cabinet, cabinet.extra_hinges, cabinet.quantity)

    def calculate_drawer_hardware_cost(
        self, cabinet: CabinetInstance, dims: CabinetDimensions, drawer_hardware: Optional[Hardware]
    ) -> Dict[str, float]:
        per_cabinet = self.hardware_policy.drawer_hardware_per_cabinet(
            self.drawer_hardware_formula(cabinet), dims
        )
        return self._hardware_cost(drawer_hardware, per_cabinet, cabinet.extra_drawers, cabinet.quantity)

    # ------------------------------------------------------------------
    # Rollup
    # ------------------------------------------------------------------

    def calculate_cabinet_cost(
        self,
        cabinet: CabinetInstance,
        joinery_item: JoineryItem,
        carcass_rate: Optional[float] = None,
    ) -> Dict[str, Any]:
        """
        Full breakdown for one cabinet.

        ``carcass_rate`` may be passed in when pricing many cabinets of the
        same item; otherwise it is derived from the item's carcass material.

        Returns carcass_cost, face_cost, hinge_cost, drawer_hardware_cost and
        total_cost (their sum), plus the areas and hardware counts used.
        """
        if carcass_rate is None:
            carcass_rate = self.material_rate(joinery_item.carcass_material)

        dims = resolve_dimensions(cabinet)
        face_material = joinery_item.face_material(cabinet.assigned_face_material)

        carcass = self.calculate_carcass_cost(cabinet, dims, carcass_rate)
        face = self.calculate_face_cost(cabinet, dims, face_material)
        hinges = self.calculate_hinge_cost(cabinet, dims, joinery_item.hinge)
        drawers = self.calculate_drawer_hardware_cost(cabinet, dims, joinery_item.drawer_hardware)

        total = carcass["cost"] + face["cost"] + hinges["cost"] + drawers["cost"]
        logger.debug(
            "cabinet %s x%d priced at %.2f", cabinet.id, cabinet.quantity, total,
            extra={"cabinet_id": cabinet.id, "joinery_item_id": joinery_item.id},
        )

        return {
            "cabinet_id": cabinet.id,
            "quantity": cabinet.quantity,
            "assigned_face_material": cabinet.assigned_face_material,
            "carcass_area_sqm": carcass["area_sqm"],
            "face_area_sqm": face["area_sqm"],
            "hinges_per_cabinet": hinges["per_cabinet"],
            "hinges_total": hinges["total_units"],
            "drawer_hardware_per_cabinet": drawers["per_cabinet"],
            "drawer_hardware_total": drawers["total_units"],
            "carcass_cost": carcass["cost"],
            "face_cost": face["cost"],
            "hinge_cost": hinges["cost"],
            "drawer_hardware_cost": drawers["cost"],
            "total_cost": total,
        }
