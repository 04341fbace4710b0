"""
quote_recalculation.py — DB-backed recompute for persisted quotes.

Loads a quote graph from Postgres, prices it with the in-memory engines and
writes the cached cost columns back:

  joinery_items.calculated_cabinet_cost / _specialized_cost / _hours_cost / _total_cost
  quotes.total_amount  (grand total incl. markup)

Cached values are rounded to cents; engine outputs stay unrounded.
"""
import logging
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models import orm_models
from app.models.pricing_schema import (
    CabinetInstance,
    Hardware,
    JoineryItem,
    Material,
    Quote,
    SpecializedItem,
    TemplateCabinet,
)
from app.services.pricing_config import (
    CUT_AND_EDGE_SETTING_KEY,
    DEFAULT_MARKUP_PERCENTAGE,
    PricingSettings,
    PricingValidationError,
    update_cut_and_edge_cost,
    validate_markup_percentage,
)
from app.services.quote_costing_engine import recompute_quote

logger = logging.getLogger("joinery-pricing.quote")


class QuoteNotFoundError(LookupError):
    def __init__(self, quote_id: str) -> None:
        self.quote_id = quote_id
        super().__init__(f"Quote {quote_id} not found")


def _f(value: Any) -> Optional[float]:
    return float(value) if value is not None else None


def _money(value: float) -> float:
    return round(value, 2)


# ─── ORM → pricing schema ───────────────────────────────────────────────────

def _material(row: Optional[orm_models.Material]) -> Optional[Material]:
    if row is None:
        return None
    return Material(
        id=row.id,
        name=row.name,
        material_type=row.material_type,
        cost_per_unit=_f(row.cost_per_unit),
        length_mm=_f(row.length),
        width_mm=_f(row.width),
        thickness_mm=_f(row.thickness),
        supplier_id=row.supplier_id,
    )


def _hardware(row: Optional[orm_models.Hardware]) -> Optional[Hardware]:
    if row is None:
        return None
    return Hardware(
        id=row.id,
        name=row.name,
        cost_per_unit=_f(row.cost_per_unit),
        supplier_id=row.supplier_id,
    )


def _template(row: Optional[orm_models.TemplateCabinet]) -> Optional[TemplateCabinet]:
    if row is None:
        return None
    return TemplateCabinet(
        id=row.id,
        name=row.name,
        category=row.category,
        type=row.type,
        width_mm=_f(row.width),
        height_mm=_f(row.height),
        depth_mm=_f(row.depth),
        door_qty=row.door_qty or 0,
        drawer_qty=row.drawer_qty or 0,
        shelf_qty=row.shelf_qty or 0,
        end_panels_qty=row.end_panels_qty or 0,
        hinge_qty_formula=row.hinge_qty,
        drawer_hardware_qty_formula=row.drawer_hardware_qty,
        carcass_area_formula=row.carcass_calculation,
        face_area_formula=row.face_calculation,
        assigned_face_material=row.assigned_face_material or 1,
    )


def _cabinet(row: orm_models.Cabinet) -> CabinetInstance:
    return CabinetInstance(
        id=row.id,
        template_id=row.template_id,
        template=_template(row.template),
        name=row.name,
        category=row.category,
        type=row.type,
        quantity=row.quantity if row.quantity is not None else 1,
        width_mm=_f(row.width),
        height_mm=_f(row.height),
        depth_mm=_f(row.depth),
        door_qty=row.door_qty,
        drawer_qty=row.drawer_qty,
        shelf_qty=row.shelf_qty,
        end_panels_qty=row.end_panels_qty,
        extra_hinges=row.extra_hinges or 0,
        extra_drawers=row.extra_drawers or 0,
        hinge_qty_formula=row.hinge_qty,
        drawer_hardware_qty_formula=row.drawer_hardware_qty,
        assigned_face_material=row.assigned_face_material,
    )


def _specialized_item(row: orm_models.SpecializedItem) -> SpecializedItem:
    return SpecializedItem(
        id=row.id,
        item_type=row.item_type,
        item_id=row.item_id,
        quantity=_f(row.quantity) or 0.0,
        unit_cost=_f(row.unit_cost) or 0.0,
        total_cost=_f(row.total_cost),
        notes=row.notes,
    )


def quote_to_schema(row: orm_models.Quote) -> Quote:
    """Convert a fully loaded ORM quote graph into pricing input records."""
    items = [
        JoineryItem(
            id=item.id,
            name=item.name,
            carcass_material=_material(item.carcass_material),
            face_material_1=_material(item.face_material_1),
            face_material_2=_material(item.face_material_2),
            face_material_3=_material(item.face_material_3),
            face_material_4=_material(item.face_material_4),
            hinge=_hardware(item.hinge),
            drawer_hardware=_hardware(item.drawer_hardware),
            factory_hours=_f(item.factory_hours),
            install_hours=_f(item.install_hours),
            cabinets=[_cabinet(c) for c in item.cabinets],
            specialized_items=[_specialized_item(s) for s in item.specialized_items],
        )
        for item in row.joinery_items
    ]
    markup = _f(row.markup_percentage)
    return Quote(
        id=row.id,
        name=row.name or "",
        markup_percentage=DEFAULT_MARKUP_PERCENTAGE if markup is None else markup,
        joinery_items=items,
    )


# ─── Cached columns ─────────────────────────────────────────────────────────

def apply_quote_costs(row: orm_models.Quote, settings: Optional[PricingSettings] = None) -> Dict[str, Any]:
    """
    Recompute ``row`` and write the cached cost columns in place.

    Does not flush or commit; the caller owns the session.
    """
    totals = recompute_quote(quote_to_schema(row), settings)
    # Breakdowns come back in joinery_items order
    for item, costs in zip(row.joinery_items, totals["items"]):
        item.calculated_cabinet_cost = _money(costs["cabinet_cost_total"])
        item.calculated_specialized_cost = _money(costs["specialized_cost_total"])
        item.calculated_hours_cost = _money(costs["hours_cost_total"])
        item.calculated_total_cost = _money(costs["item_total"])
    row.total_amount = _money(totals["grand_total"])
    return totals


# ─── Async DB entry points ──────────────────────────────────────────────────

async def load_pricing_settings(db: AsyncSession) -> PricingSettings:
    result = await db.execute(select(orm_models.Setting))
    values = {s.key: s.value for s in result.scalars().all()}
    return PricingSettings.from_setting_values(values)


async def _load_quote(db: AsyncSession, quote_id: str) -> orm_models.Quote:
    JI = orm_models.JoineryItem
    stmt = (
        select(orm_models.Quote)
        .where(orm_models.Quote.id == quote_id)
        .options(
            selectinload(orm_models.Quote.joinery_items).options(
                selectinload(JI.carcass_material),
                selectinload(JI.face_material_1),
                selectinload(JI.face_material_2),
                selectinload(JI.face_material_3),
                selectinload(JI.face_material_4),
                selectinload(JI.hinge),
                selectinload(JI.drawer_hardware),
                selectinload(JI.cabinets).selectinload(orm_models.Cabinet.template),
                selectinload(JI.specialized_items),
            )
        )
    )
    result = await db.execute(stmt)
    quote = result.scalar_one_or_none()
    if quote is None:
        raise QuoteNotFoundError(quote_id)
    return quote


async def recalculate_quote(
    db: AsyncSession,
    quote_id: str,
    settings: Optional[PricingSettings] = None,
) -> Dict[str, Any]:
    """Reload quote ``quote_id``, reprice it and persist the cached totals."""
    quote = await _load_quote(db, quote_id)
    if settings is None:
        settings = await load_pricing_settings(db)
    totals = apply_quote_costs(quote, settings)
    await db.commit()
    logger.info(
        "Recalculated quote %s: %d items, grand total %.2f",
        quote_id, len(totals["items"]), totals["grand_total"],
        extra={"quote_id": quote_id},
    )
    return totals


async def update_quote_markup(db: AsyncSession, quote_id: str, value: Any) -> Dict[str, Any]:
    """
    Store a new markup and reprice the quote.

    An out-of-range value raises PricingValidationError before the quote is
    even loaded, so the stored markup is unchanged.
    """
    try:
        markup = validate_markup_percentage(value)
    except PricingValidationError:
        logger.info(
            "Rejected markup %r for quote %s", value, quote_id,
            extra={"quote_id": quote_id},
        )
        raise
    quote = await _load_quote(db, quote_id)
    quote.markup_percentage = markup
    settings = await load_pricing_settings(db)
    totals = apply_quote_costs(quote, settings)
    await db.commit()
    return totals


async def update_cut_and_edge_setting(db: AsyncSession, value: Any) -> PricingSettings:
    """Validate and persist the per-sheet surcharge. Existing quotes keep their cached totals until recalculated."""
    current = await load_pricing_settings(db)
    updated = update_cut_and_edge_cost(current, value)

    result = await db.execute(
        select(orm_models.Setting).where(orm_models.Setting.key == CUT_AND_EDGE_SETTING_KEY)
    )
    row = result.scalar_one_or_none()
    if row is None:
        row = orm_models.Setting(key=CUT_AND_EDGE_SETTING_KEY)
        db.add(row)
    row.value = str(updated.cut_and_edge_cost_per_sheet)
    await db.commit()
    logger.info("Updated %s to %s", CUT_AND_EDGE_SETTING_KEY, row.value)
    return updated
