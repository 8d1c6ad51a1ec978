"""
Quotation/Invoice Totals Calculator, shared by cart, quotation and bill views.

    subtotal = sum(price_per_unit * qty)
    taxes    = (subtotal - discount) * tax_rate     # discount first, then tax
    total    = subtotal - discount + taxes          # deposit is never included
"""

from collections.abc import Iterable
from datetime import datetime
from numbers import Real

from config.config import PricingConfig
from models.errors import InvalidDiscountError
from models.pricing import DiscountRule
from models.rental import LineItem, Totals
from utils.dates import parse_timestamp, utc_now
from utils.logger import get_logger
from utils.money import round_money

from .promotions import PromoApplication

logger = get_logger(__name__)

DEFAULT_TAX_RATE = PricingConfig().tax_rate

DiscountInput = float | DiscountRule | PromoApplication | None


def resolve_discount(
    discount: DiscountInput, subtotal: float, now: datetime | None = None
) -> float:
    """Turn any supported discount input into an amount capped at `subtotal`."""
    if discount is None:
        return 0.0
    if isinstance(discount, PromoApplication):
        amount = discount.discount_amount
    elif isinstance(discount, DiscountRule):
        at = parse_timestamp(now) if now is not None else utc_now()
        if not discount.is_active(at):
            logger.warning(
                f"Discount {discount.code or discount.type.value} is not valid at "
                f"{at.isoformat()}; ignoring it"
            )
            return 0.0
        amount = discount.amount_off(subtotal)
    elif isinstance(discount, Real) and not isinstance(discount, bool):
        amount = float(discount)
        if amount < 0:
            raise InvalidDiscountError(f"Discount amount must be non-negative, got {amount}")
    else:
        raise InvalidDiscountError(f"Unsupported discount input: {discount!r}")
    return max(0.0, min(amount, subtotal))


def compute_totals(
    line_items: Iterable[LineItem],
    discount: DiscountInput = None,
    tax_rate: float = DEFAULT_TAX_RATE,
    *,
    now: datetime | None = None,
) -> Totals:
    """
    Compute subtotal, discount, taxes, total and the separately tracked deposit.
    Values are rounded to the minor currency unit only here, at aggregation.
    """
    if tax_rate < 0:
        raise ValueError(f"tax_rate must be non-negative, got {tax_rate}")
    items = list(line_items)
    subtotal = sum((item.amount for item in items), 0.0)
    deposit = sum((item.deposit_amount for item in items), 0.0)
    discount_amount = resolve_discount(discount, subtotal, now)
    taxes = (subtotal - discount_amount) * tax_rate
    # The shown figures must add up, so total is derived from the rounded parts.
    subtotal, discount_amount, taxes = map(round_money, (subtotal, discount_amount, taxes))
    return Totals(
        subtotal=subtotal,
        discount=discount_amount,
        taxes=taxes,
        total=round_money(subtotal - discount_amount + taxes),
        deposit=round_money(deposit),
        tax_rate=tax_rate,
    )
