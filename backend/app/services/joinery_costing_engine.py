"""
joinery_costing_engine.py — Subtotal for one joinery item (e.g. "Kitchen Cabinets").

  cabinet_cost_total     = Σ cabinet total_cost
  specialized_cost_total = Σ specialized item total_cost
  hours_cost_total       = factory_hours × 50 + install_hours × 80
  item_total             = sum of the three (pre-markup)
"""

from typing import Any, Dict, List, Optional

from app.models.pricing_schema import CabinetInstance, JoineryItem
from app.services.cabinet_costing_engine import CabinetCostingEngine
from app.services.pricing_config import FACE_MATERIAL_SLOTS, FACTORY_RATE, INSTALL_RATE

# Display bucket for cabinets without a face material
NO_FACE_MATERIAL: str = "none"


def calculate_hours_cost(factory_hours: Optional[float], install_hours: Optional[float]) -> Dict[str, float]:
    factory_cost = (factory_hours or 0.0) * FACTORY_RATE
    install_cost = (install_hours or 0.0) * INSTALL_RATE
    return {
        "factory_hours": factory_hours or 0.0,
        "install_hours": install_hours or 0.0,
        "factory_cost": factory_cost,
        "install_cost": install_cost,
        "hours_cost_total": factory_cost + install_cost,
    }


def group_cabinets_by_face_material(cabinets: List[CabinetInstance]) -> Dict[str, List[CabinetInstance]]:
    """
    Buckets for display: "none", "1", "2", "3", "4".

    Order within a bucket follows the input order; grouping never affects totals.
    """
    groups: Dict[str, List[CabinetInstance]] = {NO_FACE_MATERIAL: []}
    for slot in FACE_MATERIAL_SLOTS:
        groups[str(slot)] = []
    for cabinet in cabinets:
        slot = cabinet.assigned_face_material
        key = str(slot) if slot in FACE_MATERIAL_SLOTS else NO_FACE_MATERIAL
        groups[key].append(cabinet)
    return groups


def calculate_joinery_item_cost(
    joinery_item: JoineryItem,
    cabinet_engine: Optional[CabinetCostingEngine] = None,
    markup_percentage: Optional[float] = None,
) -> Dict[str, Any]:
    """
    Aggregate one joinery item.

    When ``markup_percentage`` is given the result also carries
    ``item_total_with_markup`` for per-item display.
    """
    engine = cabinet_engine or CabinetCostingEngine()
    carcass_rate = engine.material_rate(joinery_item.carcass_material)

    cabinet_costs = [
        engine.calculate_cabinet_cost(cabinet, joinery_item, carcass_rate=carcass_rate)
        for cabinet in joinery_item.cabinets
    ]
    cabinet_cost_total = sum(c["total_cost"] for c in cabinet_costs)
    specialized_cost_total = sum(
        item.total_cost or 0.0 for item in joinery_item.specialized_items
    )
    hours = calculate_hours_cost(joinery_item.factory_hours, joinery_item.install_hours)
    item_total = cabinet_cost_total + specialized_cost_total + hours["hours_cost_total"]

    face_groups = group_cabinets_by_face_material(joinery_item.cabinets)

    result: Dict[str, Any] = {
        "joinery_item_id": joinery_item.id,
        "name": joinery_item.name,
        "carcass_rate_per_sqm": carcass_rate,
        "cabinets": cabinet_costs,
        "face_material_groups": {
            key: [c.id for c in group] for key, group in face_groups.items()
        },
        "hours": hours,
        "cabinet_cost_total": cabinet_cost_total,
        "specialized_cost_total": specialized_cost_total,
        "hours_cost_total": hours["hours_cost_total"],
        "item_total": item_total,
    }
    if markup_percentage is not None:
        result["item_total_with_markup"] = item_total * (1 + markup_percentage / 100)
    return result
