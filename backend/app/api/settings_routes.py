"""Settings routes — cut-and-edge surcharge and per-quote markup."""
import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import get_db
from app.services.pricing_config import CUT_AND_EDGE_SETTING_KEY, PricingValidationError
from app.services.quote_recalculation import (
    QuoteNotFoundError,
    load_pricing_settings,
    update_cut_and_edge_setting,
    update_quote_markup,
)

router = APIRouter(prefix="/api/settings", tags=["Settings"])
logger = logging.getLogger("joinery-api")


# ─── Pydantic schemas ────────────────────────────────────────────────────────
# Values stay untyped here so that range and type errors come from the
# pricing validators with one consistent message.

class CutAndEdgeCostUpdate(BaseModel):
    value: Any


class MarkupUpdate(BaseModel):
    markup_percentage: Any


# ─── Endpoints ──────────────────────────────────────────────────────────────

@router.get("/cut-and-edge-cost")
async def get_cut_and_edge_cost(db: AsyncSession = Depends(get_db)):
    settings = await load_pricing_settings(db)
    return {"key": CUT_AND_EDGE_SETTING_KEY, "value": settings.cut_and_edge_cost_per_sheet}


@router.put("/cut-and-edge-cost")
async def put_cut_and_edge_cost(payload: CutAndEdgeCostUpdate, db: AsyncSession = Depends(get_db)):
    """Store a new per-sheet surcharge; negative or non-numeric values are rejected with 422."""
    try:
        settings = await update_cut_and_edge_setting(db, payload.value)
    except PricingValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return {"key": CUT_AND_EDGE_SETTING_KEY, "value": settings.cut_and_edge_cost_per_sheet}


@router.put("/quotes/{quote_id}/markup")
async def put_quote_markup(quote_id: str, payload: MarkupUpdate, db: AsyncSession = Depends(get_db)):
    """Store a markup in [0, 1000] and reprice the quote; anything else leaves it unchanged."""
    try:
        totals = await update_quote_markup(db, quote_id, payload.markup_percentage)
    except QuoteNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PricingValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return {
        "quote_id": quote_id,
        "markup_percentage": totals["markup_percentage"],
        "subtotal": round(totals["subtotal"], 2),
        "markup_amount": round(totals["markup_amount"], 2),
        "grand_total": round(totals["grand_total"], 2),
    }
