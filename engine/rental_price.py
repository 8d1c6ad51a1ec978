"""
Rental Price Calculator.

price   = unit price for the tenure x whole tenure units in the window,
          then any currently active pricelist discounts
deposit = base price x the pricelist's deposit fraction (never duration based)

Nothing is rounded here; rounding happens at display or totals aggregation.
"""

from datetime import datetime

from models.enums import Tenure
from models.errors import InvalidDateRangeError
from models.rental import ProductPriceInput, RentalPrice
from utils.dates import (
    parse_timestamp,
    utc_now,
    whole_days,
    whole_hours,
    whole_months,
    whole_weeks,
)
from utils.logger import get_logger

from .pricelist import PricelistResolver, resolve_rate

logger = get_logger(__name__)

_UNIT_COUNTERS = {
    Tenure.HOUR: whole_hours,
    Tenure.DAY: whole_days,
    Tenure.WEEK: whole_weeks,
    Tenure.MONTH: whole_months,
}


def count_tenure_units(
    tenure: Tenure | str,
    start_date: datetime | str | None,
    end_date: datetime | str | None,
) -> int:
    """
    Whole tenure units between two dates, at least 1.
    A missing or inverted range is a placeholder and counts as a single unit.
    """
    tenure = Tenure.parse(tenure)
    if start_date is None or end_date is None:
        return 1
    start = parse_timestamp(start_date)
    end = parse_timestamp(end_date)
    if end <= start:
        return 1
    return max(1, _UNIT_COUNTERS[tenure](start, end))


def calculate_rental_price(
    product: ProductPriceInput,
    tenure: Tenure | str,
    start_date: datetime | str | None = None,
    end_date: datetime | str | None = None,
    pricelist_name: str | None = None,
    *,
    resolver: PricelistResolver | None = None,
    now: datetime | None = None,
) -> RentalPrice:
    """
    Compute the rental charge and deposit for one unit of `product`.

    Discount rules are matched against `now` (default: the current time), not
    against the rental window.
    """
    product.validate_for_pricing()
    rate = resolve_rate(pricelist_name, tenure, resolver)
    units = count_tenure_units(rate.tenure, start_date, end_date)
    unit_price = rate.unit_price(product.base_price)

    price = unit_price * units
    if rate.discounts:
        at = parse_timestamp(now) if now is not None else utc_now()
        for rule in rate.discounts:
            if rule.is_active(at):
                price = rule.apply_to(price)
            else:
                logger.warning(
                    f"Skipping discount {rule.code or rule.type.value} on pricelist "
                    f"{rate.pricelist!r}: not valid at {at.isoformat()}"
                )
    price = max(0.0, price)

    return RentalPrice(
        price=price,
        deposit=rate.deposit_for(product.base_price),
        unit_price=unit_price,
        units=units,
        pricelist=rate.pricelist,
        is_fallback=rate.is_fallback,
    )


def get_base_price_for_tenure(
    product: ProductPriceInput,
    tenure: Tenure | str,
    pricelist_name: str | None = None,
    resolver: PricelistResolver | None = None,
) -> float:
    """Undiscounted price of a single tenure unit, for catalog cards."""
    product.validate_for_pricing()
    return resolve_rate(pricelist_name, tenure, resolver).unit_price(product.base_price)


def calculate_extension_charge(
    product: ProductPriceInput,
    current_end: datetime | str,
    new_end: datetime | str,
    pricelist_name: str | None = None,
    resolver: PricelistResolver | None = None,
) -> float:
    """Extra charge for extending a rental: whole extra days at the daily rate."""
    current = parse_timestamp(current_end)
    extended = parse_timestamp(new_end)
    if extended <= current:
        raise InvalidDateRangeError(
            f"New end {extended.isoformat()} must be after current end {current.isoformat()}"
        )
    daily = get_base_price_for_tenure(product, Tenure.DAY, pricelist_name, resolver)
    return daily * whole_days(current, extended)
