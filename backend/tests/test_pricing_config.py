"""
test_pricing_config.py — Settings parsing and the validated edit boundary.
"""

import dataclasses
import logging

import pytest

from app.services.pricing_config import (
    DEFAULT_CUT_AND_EDGE_COST_PER_SHEET,
    FACTORY_RATE,
    INSTALL_RATE,
    PricingSettings,
    PricingValidationError,
    setting_value_as_float,
    update_cut_and_edge_cost,
    validate_cut_and_edge_cost,
    validate_markup_percentage,
)


class TestConstants:

    def test_labour_rates(self):
        assert FACTORY_RATE == 50.0
        assert INSTALL_RATE == 80.0

    def test_default_surcharge(self):
        assert PricingSettings().cut_and_edge_cost_per_sheet == DEFAULT_CUT_AND_EDGE_COST_PER_SHEET == 110.0


class TestSettingValues:

    @pytest.mark.parametrize("raw, expected", [
        ("110", 110.0),
        (" 95.5 ", 95.5),
        ("0", 0.0),
        (None, 110.0),
        ("", 110.0),
        ("abc", 110.0),
        ("nan", 110.0),
    ])
    def test_setting_value_as_float(self, raw, expected):
        assert setting_value_as_float(raw, 110.0) == expected

    def test_from_setting_values(self):
        settings = PricingSettings.from_setting_values({"cut_and_edge_cost_per_sheet": "75"})
        assert settings.cut_and_edge_cost_per_sheet == 75.0

    def test_missing_key_uses_default(self):
        assert PricingSettings.from_setting_values({}).cut_and_edge_cost_per_sheet == 110.0

    def test_negative_stored_value_uses_default(self):
        settings = PricingSettings.from_setting_values({"cut_and_edge_cost_per_sheet": "-5"})
        assert settings.cut_and_edge_cost_per_sheet == 110.0


class TestPricingSettings:

    def test_immutable(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            PricingSettings().cut_and_edge_cost_per_sheet = 0

    def test_negative_surcharge_rejected(self):
        with pytest.raises(PricingValidationError):
            PricingSettings(cut_and_edge_cost_per_sheet=-1)

    def test_unknown_policy_rejected(self):
        with pytest.raises(PricingValidationError):
            PricingSettings(hardware_policy="merged")


class TestEditBoundary:

    def test_update_returns_new_settings(self):
        current = PricingSettings()
        updated = update_cut_and_edge_cost(current, "150")
        assert updated.cut_and_edge_cost_per_sheet == 150.0
        assert current.cut_and_edge_cost_per_sheet == 110.0
        assert updated.hardware_policy == current.hardware_policy

    @pytest.mark.parametrize("value", [-0.01, "abc", None, float("inf")])
    def test_rejected_update_logged_and_raised(self, value, caplog):
        current = PricingSettings(cut_and_edge_cost_per_sheet=90)
        with caplog.at_level(logging.INFO, logger="joinery-pricing.config"):
            with pytest.raises(PricingValidationError) as exc:
                update_cut_and_edge_cost(current, value)
        assert exc.value.field == "cut_and_edge_cost_per_sheet"
        assert current.cut_and_edge_cost_per_sheet == 90.0
        assert any("Rejected" in r.getMessage() for r in caplog.records)

    def test_zero_surcharge_allowed(self):
        assert validate_cut_and_edge_cost(0) == 0.0

    @pytest.mark.parametrize("value, ok", [(0, True), (40, True), (1000, True), (1000.5, False), (-1, False)])
    def test_markup_range(self, value, ok):
        if ok:
            assert validate_markup_percentage(value) == float(value)
        else:
            with pytest.raises(PricingValidationError, match="between 0 and 1000"):
                validate_markup_percentage(value)

    def test_validation_error_is_value_error(self):
        assert issubclass(PricingValidationError, ValueError)
