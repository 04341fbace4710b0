"""Pricing routes — stateless cost breakdowns plus recalculation of stored quotes."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import get_db
from app.models.pricing_schema import CabinetInstance, JoineryItem, Material, Quote
from app.services.cabinet_costing_engine import CabinetCostingEngine
from app.services.joinery_costing_engine import calculate_joinery_item_cost
from app.services.pricing_config import (
    DEFAULT_CUT_AND_EDGE_COST_PER_SHEET,
    DEFAULT_HARDWARE_POLICY,
    MARKUP_MAX,
    MARKUP_MIN,
    PricingSettings,
    PricingValidationError,
)
from app.services.quote_costing_engine import recompute_quote
from app.services.quote_recalculation import QuoteNotFoundError, recalculate_quote

router = APIRouter(prefix="/api/pricing", tags=["Pricing"])
logger = logging.getLogger("joinery-api")


# ─── Pydantic schemas ────────────────────────────────────────────────────────

class PricingOptions(BaseModel):
    cut_and_edge_cost_per_sheet: float = Field(DEFAULT_CUT_AND_EDGE_COST_PER_SHEET, ge=0)
    hardware_policy: str = DEFAULT_HARDWARE_POLICY

    def settings(self) -> PricingSettings:
        try:
            return PricingSettings(
                cut_and_edge_cost_per_sheet=self.cut_and_edge_cost_per_sheet,
                hardware_policy=self.hardware_policy,
            )
        except PricingValidationError as e:
            raise HTTPException(status_code=422, detail=str(e))


class MaterialRateRequest(PricingOptions):
    material: Material


class CabinetCostRequest(PricingOptions):
    cabinet: CabinetInstance
    joinery_item: JoineryItem


class JoineryItemCostRequest(PricingOptions):
    joinery_item: JoineryItem
    markup_percentage: Optional[float] = Field(None, ge=MARKUP_MIN, le=MARKUP_MAX)


class QuoteTotalRequest(PricingOptions):
    quote: Quote


# ─── Endpoints ──────────────────────────────────────────────────────────────

@router.post("/material-rate")
async def material_rate(payload: MaterialRateRequest):
    """Per-m² rate of one sheet material, or null when it has none."""
    engine = CabinetCostingEngine(payload.settings())
    return {"rate_per_sqm": engine.material_rate(payload.material)}


@router.post("/cabinet-cost")
async def cabinet_cost(payload: CabinetCostRequest):
    engine = CabinetCostingEngine(payload.settings())
    return engine.calculate_cabinet_cost(payload.cabinet, payload.joinery_item)


@router.post("/joinery-item-cost")
async def joinery_item_cost(payload: JoineryItemCostRequest):
    engine = CabinetCostingEngine(payload.settings())
    return calculate_joinery_item_cost(
        payload.joinery_item, engine, markup_percentage=payload.markup_percentage
    )


@router.post("/quote-total")
async def quote_total(payload: QuoteTotalRequest):
    return recompute_quote(payload.quote, payload.settings())


@router.post("/quotes/{quote_id}/recalculate")
async def recalculate_stored_quote(quote_id: str, db: AsyncSession = Depends(get_db)):
    """Reprice a stored quote and rewrite its cached cost columns."""
    try:
        totals = await recalculate_quote(db, quote_id)
    except QuoteNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {
        "quote_id": quote_id,
        "subtotal": round(totals["subtotal"], 2),
        "markup_percentage": totals["markup_percentage"],
        "markup_amount": round(totals["markup_amount"], 2),
        "grand_total": round(totals["grand_total"], 2),
        "items": [
            {
                "joinery_item_id": item["joinery_item_id"],
                "name": item["name"],
                "cabinet_cost_total": round(item["cabinet_cost_total"], 2),
                "specialized_cost_total": round(item["specialized_cost_total"], 2),
                "hours_cost_total": round(item["hours_cost_total"], 2),
                "item_total": round(item["item_total"], 2),
            }
            for item in totals["items"]
        ],
    }
