"""
quote_costing_engine.py — Quote grand total and the recompute entry points
the host calls whenever a material, cabinet, item or markup changes.

  subtotal      = Σ item_total
  markup_amount = subtotal × markup% / 100
  grand_total   = subtotal + markup_amount
"""

import logging
from typing import Any, Dict, Iterable, Optional

from app.models.pricing_schema import CabinetInstance, JoineryItem, Quote
from app.services.cabinet_costing_engine import CabinetCostingEngine
from app.services.joinery_costing_engine import calculate_joinery_item_cost
from app.services.pricing_config import (
    PricingSettings,
    PricingValidationError,
    validate_markup_percentage,
)

logger = logging.getLogger("joinery-pricing.quote")


def apply_markup(subtotal: float, markup_percentage: float) -> Dict[str, float]:
    markup_amount = subtotal * markup_percentage / 100
    return {
        "subtotal": subtotal,
        "markup_percentage": markup_percentage,
        "markup_amount": markup_amount,
        "grand_total": subtotal + markup_amount,
    }


def calculate_quote_total(item_totals: Iterable[float], markup_percentage: float) -> Dict[str, float]:
    """Sum pre-markup item totals and apply one validated markup."""
    markup = validate_markup_percentage(markup_percentage)
    return apply_markup(sum(item_totals), markup)


def recompute_cabinet(
    cabinet: CabinetInstance,
    joinery_item: JoineryItem,
    settings: Optional[PricingSettings] = None,
) -> Dict[str, Any]:
    return CabinetCostingEngine(settings).calculate_cabinet_cost(cabinet, joinery_item)


def recompute_joinery_item(
    joinery_item: JoineryItem,
    settings: Optional[PricingSettings] = None,
    markup_percentage: Optional[float] = None,
) -> Dict[str, Any]:
    return calculate_joinery_item_cost(
        joinery_item, CabinetCostingEngine(settings), markup_percentage=markup_percentage
    )


def recompute_quote(quote: Quote, settings: Optional[PricingSettings] = None) -> Dict[str, Any]:
    """
    Price every joinery item of ``quote`` and roll them up.

    Returns subtotal, markup_amount and grand_total, the three cost-category
    totals across all items, and the per-item breakdowns.
    """
    engine = CabinetCostingEngine(settings)
    items = [
        calculate_joinery_item_cost(item, engine, markup_percentage=quote.markup_percentage)
        for item in quote.joinery_items
    ]
    totals = calculate_quote_total((i["item_total"] for i in items), quote.markup_percentage)
    totals.update({
        "quote_id": quote.id,
        "cabinet_cost_total": sum(i["cabinet_cost_total"] for i in items),
        "specialized_cost_total": sum(i["specialized_cost_total"] for i in items),
        "hours_cost_total": sum(i["hours_cost_total"] for i in items),
        "items": items,
    })
    return totals


class QuotePricer:
    """
    Holds one quote and its current totals.

    ``set_markup`` is the edit boundary for markup: an out-of-range value is
    rejected and both the stored markup and the last totals stay as they were.
    """

    def __init__(self, quote: Quote, settings: Optional[PricingSettings] = None) -> None:
        self.quote = quote
        self.settings = settings or PricingSettings()
        self.totals = recompute_quote(self.quote, self.settings)

    @property
    def markup_percentage(self) -> float:
        return self.quote.markup_percentage

    def recompute(self) -> Dict[str, Any]:
        self.totals = recompute_quote(self.quote, self.settings)
        return self.totals

    def set_markup(self, value: Any) -> Dict[str, Any]:
        try:
            markup = validate_markup_percentage(value)
        except PricingValidationError:
            logger.info("Rejected markup %r for quote %s — keeping %s", value, self.quote.id, self.markup_percentage)
            raise
        self.quote = self.quote.model_copy(update={"markup_percentage": markup})
        return self.recompute()

    def set_settings(self, settings: PricingSettings) -> Dict[str, Any]:
        self.settings = settings
        return self.recompute()
