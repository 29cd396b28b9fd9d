"""Price derivation: USD cost to tax-inclusive customer prices.

Four stages, always run in this order::

    usd_price x exchange_rate              -> hb_real   (local cost)
    hb_real   x (1 + adjustment%)          -> hb_naik   (adjusted cost)
    hb_naik   x (1 + category markup%)     -> base price, per category
    base      x (sum of active tax%)       -> tax amount

All amounts are whole currency units, rounded half away from zero.

Every function here is total.  Missing, non-numeric or non-finite input
degrades to 0 or passes the previous stage through unchanged, so a form
being edited keystroke by keystroke can always render a price.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

Number = int | float


# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------


class PriceCategory(BaseModel):
    """A markup tier such as Elite, Super or Basic."""

    id: int | str | None = None
    name: str
    percentage: float = 0.0
    order: int = 0


class Tax(BaseModel):
    id: int | str | None = None
    name: str = ""
    percentage: float = 0.0
    status: Literal["active", "inactive"] = "active"


class DerivedPrice(BaseModel):
    """Customer price for one category."""

    model_config = ConfigDict(frozen=True)

    base_price: int
    tax_amount: int
    tax_inclusive_price: int
    applied_tax_percentage: float


class PriceBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    hb_real: Number
    hb_naik: Number
    total_tax_percentage: float
    customer_prices: dict[str, DerivedPrice]


# ---------------------------------------------------------------------------
# Numeric helpers
# ---------------------------------------------------------------------------


def _to_number(value: Any) -> Number | None:
    """Coerce form input to a finite number, or None if it is not one."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if isinstance(value, int):
        return value
    if not math.isfinite(number):
        return None
    return number


def round_half_away(value: Number) -> int:
    """Round to the nearest integer, halves away from zero (2.5 -> 3, -2.5 -> -3).

    A product too large to represent comes out as 0, like any other
    unusable number.
    """
    if isinstance(value, int):
        return value
    if not math.isfinite(value):
        return 0
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------


def derive_hb_real(usd_price: Any, exchange_rate: Any) -> int:
    """Convert the USD price to local currency."""
    usd = _to_number(usd_price) or 0
    rate = _to_number(exchange_rate) or 0
    return round_half_away(usd * rate)


def derive_hb_naik(hb_real: Any, adjustment_percentage: Any) -> Number:
    """Apply the cost adjustment.

    A zero or missing adjustment returns *hb_real* unchanged.
    """
    real = _to_number(hb_real)
    if not real:
        return 0
    adjustment = _to_number(adjustment_percentage)
    if not adjustment:
        return real
    return round_half_away(real * (1 + adjustment / 100))


def derive_base_price(hb_naik: Any, category_percentage: Any) -> Number:
    """Apply a category markup; an unusable percentage passes *hb_naik* through."""
    naik = _to_number(hb_naik)
    if not naik:
        return 0
    percentage = _to_number(category_percentage)
    if percentage is None:
        return naik
    return round_half_away(naik * (1 + percentage / 100))


def derive_tax_amount(base_price: Any, total_tax_percentage: Any) -> int:
    base = _to_number(base_price)
    percentage = _to_number(total_tax_percentage)
    if not base or not percentage:
        return 0
    return round_half_away(float(base) * percentage / 100)


def total_tax_percentage(taxes: Iterable[Tax]) -> float:
    """Sum of active tax percentages.  Taxes are added, not compounded."""
    total = 0.0
    for tax in taxes:
        if tax.status != "active":
            continue
        total += _to_number(tax.percentage) or 0
    return total


def derive_customer_prices(
    hb_naik: Any,
    categories: Iterable[PriceCategory],
    active_taxes: Iterable[Tax] = (),
) -> dict[str, DerivedPrice]:
    """Price every category, keyed by lowercased category name.

    Returns an empty dict when *hb_naik* is zero or unusable.  Inactive
    taxes in *active_taxes* are ignored.  Categories sharing a name
    collapse into one key, the later one winning.
    """
    naik = _to_number(hb_naik)
    if not naik:
        return {}

    tax_percentage = total_tax_percentage(active_taxes)
    prices: dict[str, DerivedPrice] = {}
    for category in categories:
        base_price = round_half_away(derive_base_price(naik, category.percentage))
        tax_amount = derive_tax_amount(base_price, tax_percentage)
        prices[category.name.lower()] = DerivedPrice(
            base_price=base_price,
            tax_amount=tax_amount,
            tax_inclusive_price=base_price + tax_amount,
            applied_tax_percentage=tax_percentage,
        )
    return prices


def price_product(
    usd_price: Any,
    exchange_rate: Any,
    adjustment_percentage: Any,
    categories: Iterable[PriceCategory],
    taxes: Iterable[Tax] = (),
) -> PriceBreakdown:
    """Run all four stages for one product."""
    tax_list = list(taxes)
    hb_real = derive_hb_real(usd_price, exchange_rate)
    hb_naik = derive_hb_naik(hb_real, adjustment_percentage)
    customer_prices = derive_customer_prices(hb_naik, categories, tax_list)
    logger.debug("Priced product: hb_real=%s hb_naik=%s", hb_real, hb_naik)
    return PriceBreakdown(
        hb_real=hb_real,
        hb_naik=hb_naik,
        total_tax_percentage=total_tax_percentage(tax_list),
        customer_prices=customer_prices,
    )
