"""
Pricing configuration — single source of truth for the joinery quote engine's
constants and tunable settings.

Import from here in all pricing services rather than hardcoding values.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Optional

logger = logging.getLogger("joinery-pricing.config")


# ── Unit conversion ──────────────────────────────────────────────────────────
MM_PER_M: float = 1000.0
MM2_PER_M2: float = 1_000_000.0


# ── Material types ───────────────────────────────────────────────────────────
# Only sheet goods of this type carry a square-meter rate.
BOARD_LAMINATE: str = "Board/Laminate"
EDGETAPE: str = "Edgetape"


# ── Sheet surcharge ──────────────────────────────────────────────────────────
# Cut-and-edge charge added to every sheet before it is spread over the sheet area.
CUT_AND_EDGE_SETTING_KEY: str = "cut_and_edge_cost_per_sheet"
DEFAULT_CUT_AND_EDGE_COST_PER_SHEET: float = 110.0


# ── Labour ───────────────────────────────────────────────────────────────────
# Fixed in source; not editable through settings.
FACTORY_RATE: float = 50.0      # per factory hour
INSTALL_RATE: float = 80.0      # per install hour


# ── Markup ───────────────────────────────────────────────────────────────────
DEFAULT_MARKUP_PERCENTAGE: float = 40.0
MARKUP_MIN: float = 0.0
MARKUP_MAX: float = 1000.0


# ── Face material slots ──────────────────────────────────────────────────────
FACE_MATERIAL_SLOTS: tuple[int, ...] = (1, 2, 3, 4)


# ── Hardware quantity policies ───────────────────────────────────────────────
HARDWARE_POLICY_FORMULA: str = "formula"
HARDWARE_POLICY_TYPE_LOOKUP: str = "type_lookup"
DEFAULT_HARDWARE_POLICY: str = HARDWARE_POLICY_FORMULA

# Lookup table for the type-lookup policy (hinges per door)
TALL_HINGES_PER_DOOR: int = 5
SHORT_DOOR_MAX_HEIGHT_MM: float = 900.0
SHORT_HINGES_PER_DOOR: int = 2
STANDARD_HINGES_PER_DOOR: int = 3


class PricingValidationError(ValueError):
    """Configuration input rejected at the edit boundary."""

    def __init__(self, field: str, value: Any, message: str) -> None:
        self.field = field
        self.value = value
        super().__init__(f"{field}: {message} (got {value!r})")


def _coerce_number(field: str, value: Any) -> float:
    if isinstance(value, bool):
        raise PricingValidationError(field, value, "must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise PricingValidationError(field, value, "must be a number")
    if number != number or number in (float("inf"), float("-inf")):
        raise PricingValidationError(field, value, "must be finite")
    return number


def validate_markup_percentage(value: Any) -> float:
    """Return ``value`` as a float, or raise if it falls outside [0, 1000]."""
    markup = _coerce_number("markup_percentage", value)
    if markup < MARKUP_MIN or markup > MARKUP_MAX:
        raise PricingValidationError(
            "markup_percentage", value,
            f"must be between {MARKUP_MIN:g} and {MARKUP_MAX:g}",
        )
    return markup


def validate_cut_and_edge_cost(value: Any) -> float:
    """Return ``value`` as a float, or raise if it is negative."""
    cost = _coerce_number(CUT_AND_EDGE_SETTING_KEY, value)
    if cost < 0:
        raise PricingValidationError(CUT_AND_EDGE_SETTING_KEY, value, "must be >= 0")
    return cost


def setting_value_as_float(raw: Optional[str], default: float) -> float:
    """
    Parse a key/value setting string.

    Settings are stored as text; a missing or non-numeric value resolves to
    ``default`` rather than failing.
    """
    if raw is None:
        return default
    try:
        value = float(str(raw).strip())
    except ValueError:
        logger.warning("Non-numeric setting value %r — using default %s", raw, default)
        return default
    if value != value:
        return default
    return value


@dataclass(frozen=True)
class PricingSettings:
    """
    Tunable inputs threaded into every pricing computation.

    Instances are immutable; an edit produces a new instance so that a
    rejected edit leaves the previous settings in force.
    """

    cut_and_edge_cost_per_sheet: float = DEFAULT_CUT_AND_EDGE_COST_PER_SHEET
    hardware_policy: str = DEFAULT_HARDWARE_POLICY

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "cut_and_edge_cost_per_sheet",
            validate_cut_and_edge_cost(self.cut_and_edge_cost_per_sheet),
        )
        if self.hardware_policy not in (HARDWARE_POLICY_FORMULA, HARDWARE_POLICY_TYPE_LOOKUP):
            raise PricingValidationError(
                "hardware_policy", self.hardware_policy,
                f"must be '{HARDWARE_POLICY_FORMULA}' or '{HARDWARE_POLICY_TYPE_LOOKUP}'",
            )

    @classmethod
    def from_setting_values(cls, values: dict[str, Optional[str]]) -> "PricingSettings":
        """Build settings from the persisted key/value strings."""
        cost = setting_value_as_float(
            values.get(CUT_AND_EDGE_SETTING_KEY), DEFAULT_CUT_AND_EDGE_COST_PER_SHEET
        )
        if cost < 0:
            logger.warning("Stored %s is negative (%s) — using default", CUT_AND_EDGE_SETTING_KEY, cost)
            cost = DEFAULT_CUT_AND_EDGE_COST_PER_SHEET
        return cls(cut_and_edge_cost_per_sheet=cost)


def update_cut_and_edge_cost(current: PricingSettings, new_value: Any) -> PricingSettings:
    """
    Return a copy of ``current`` with a new surcharge.

    Raises PricingValidationError for negative or non-numeric input; the
    caller keeps ``current`` in that case.
    """
    try:
        cost = validate_cut_and_edge_cost(new_value)
    except PricingValidationError:
        logger.info(
            "Rejected %s update %r — keeping %s",
            CUT_AND_EDGE_SETTING_KEY, new_value, current.cut_and_edge_cost_per_sheet,
        )
        raise
    return replace(current, cut_and_edge_cost_per_sheet=cost)
