"""
test_quote_costing_engine.py — Quote totals, markup and recompute entry points.

  subtotal      = Σ item_total
  markup_amount = subtotal * markup / 100
  grand_total   = subtotal + markup_amount
"""

import random

import pytest

from app.models.pricing_schema import JoineryItem, Quote
from app.services.pricing_config import PricingSettings, PricingValidationError
from app.services.quote_costing_engine import (
    QuotePricer,
    apply_markup,
    calculate_quote_total,
    recompute_cabinet,
    recompute_joinery_item,
    recompute_quote,
)


@pytest.fixture
def scenario_quote(scenario_item):
    return Quote(id="q-1", name="Smith Kitchen", markup_percentage=40, joinery_items=[scenario_item])


class TestMarkup:

    def test_reference_markup(self):
        """418.35 * 40% = 167.34 -> 585.69"""
        totals = apply_markup(418.35, 40)
        assert totals["markup_amount"] == pytest.approx(167.34)
        assert totals["grand_total"] == pytest.approx(585.69)

    @pytest.mark.parametrize("subtotal", [0.0, 0.1, 418.35, 123456.789])
    def test_zero_markup_is_identity(self, subtotal):
        assert calculate_quote_total([subtotal], 0)["grand_total"] == subtotal

    @pytest.mark.parametrize("seed", range(10))
    def test_grand_total_monotonic_in_markup(self, seed):
        rng = random.Random(seed)
        subtotal = rng.uniform(0, 50_000)
        markups = sorted(rng.uniform(0, 1000) for _ in range(25))
        totals = [calculate_quote_total([subtotal], m)["grand_total"] for m in markups]
        assert totals == sorted(totals)

    @pytest.mark.parametrize("value", [-0.01, 1000.01, 1500, float("nan"), float("inf"), "abc", None, True])
    def test_out_of_range_rejected(self, value):
        with pytest.raises(PricingValidationError):
            calculate_quote_total([100.0], value)

    @pytest.mark.parametrize("value", [0, 1000, "25"])
    def test_boundaries_accepted(self, value):
        assert calculate_quote_total([100.0], value)["markup_percentage"] == float(value)

    def test_subtotal_sums_items(self):
        assert calculate_quote_total([100.0, 250.5, 0.0], 10)["subtotal"] == pytest.approx(350.5)


class TestRecompute:

    def test_end_to_end_reference_quote(self, scenario_quote):
        """
        cabinet 238.35 + hours 180 = 418.35; 40% markup -> 585.69
        """
        totals = recompute_quote(scenario_quote)
        assert totals["cabinet_cost_total"] == pytest.approx(238.35, abs=1e-6)
        assert totals["hours_cost_total"] == 180.0
        assert totals["subtotal"] == pytest.approx(418.35, abs=1e-6)
        assert totals["markup_amount"] == pytest.approx(167.34, abs=1e-6)
        assert totals["grand_total"] == pytest.approx(585.69, abs=1e-6)
        assert totals["quote_id"] == "q-1"
        assert totals["items"][0]["item_total_with_markup"] == pytest.approx(585.69, abs=1e-6)

    def test_empty_quote(self):
        totals = recompute_quote(Quote())
        assert totals["subtotal"] == 0.0
        assert totals["grand_total"] == 0.0
        assert totals["markup_percentage"] == 40.0

    def test_settings_thread_through(self, scenario_quote):
        """Surcharge 0: rate = 100/2.88, cabinet = 34.7222 * 1.6344 * 2 = 113.5"""
        totals = recompute_quote(scenario_quote, PricingSettings(cut_and_edge_cost_per_sheet=0))
        assert totals["cabinet_cost_total"] == pytest.approx(113.5, abs=1e-6)

    def test_recompute_cabinet_and_item(self, scenario_item, scenario_cabinet):
        assert recompute_cabinet(scenario_cabinet, scenario_item)["total_cost"] == pytest.approx(238.35, abs=1e-6)
        item = recompute_joinery_item(scenario_item, markup_percentage=0)
        assert item["item_total_with_markup"] == item["item_total"]

    def test_items_sum_into_quote(self, scenario_item):
        second = JoineryItem(name="Install only", factory_hours=0, install_hours=3)
        totals = recompute_quote(Quote(markup_percentage=0, joinery_items=[scenario_item, second]))
        assert totals["subtotal"] == pytest.approx(418.35 + 240.0, abs=1e-6)
        assert len(totals["items"]) == 2


class TestQuotePricer:

    def test_initial_totals(self, scenario_quote):
        pricer = QuotePricer(scenario_quote)
        assert pricer.totals["grand_total"] == pytest.approx(585.69, abs=1e-6)

    def test_set_markup(self, scenario_quote):
        pricer = QuotePricer(scenario_quote)
        totals = pricer.set_markup(0)
        assert pricer.markup_percentage == 0.0
        assert totals["grand_total"] == totals["subtotal"]

    def test_rejected_markup_keeps_previous_state(self, scenario_quote):
        pricer = QuotePricer(scenario_quote)
        before = pricer.totals
        with pytest.raises(PricingValidationError):
            pricer.set_markup(1500)
        assert pricer.markup_percentage == 40.0
        assert pricer.totals is before
        assert scenario_quote.markup_percentage == 40.0

    def test_set_settings(self, scenario_quote):
        pricer = QuotePricer(scenario_quote)
        totals = pricer.set_settings(PricingSettings(cut_and_edge_cost_per_sheet=0))
        assert totals["cabinet_cost_total"] == pytest.approx(113.5, abs=1e-6)

    def test_quote_model_rejects_out_of_range_markup(self):
        with pytest.raises(ValueError):
            Quote(markup_percentage=1500)
