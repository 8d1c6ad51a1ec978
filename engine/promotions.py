"""
Promo code catalog: validation and redemption of customer-entered codes.
"""

from dataclasses import dataclass
from datetime import datetime

from dateutil.relativedelta import relativedelta

from models.enums import DiscountType
from models.errors import PromoCodeError
from models.pricing import PromoCode
from utils.dates import parse_timestamp, utc_now
from utils.logger import get_logger
from utils.money import format_currency

logger = get_logger(__name__)


@dataclass(frozen=True)
class PromoApplication:
    """A validated promo code and the discount it grants on an order amount."""

    promo: PromoCode
    order_amount: float
    discount_amount: float

    @property
    def final_amount(self) -> float:
        return self.order_amount - self.discount_amount


def default_promo_codes(anchor: datetime | None = None) -> list[PromoCode]:
    """
    Seed campaign codes. Yearly codes run for the calendar year of `anchor`
    (default: now) and MONTH30 for its calendar month.
    """
    anchor = parse_timestamp(anchor) if anchor is not None else utc_now()
    year_start = datetime(anchor.year, 1, 1)
    year_end = year_start + relativedelta(years=1, seconds=-1)
    month_start = datetime(anchor.year, anchor.month, 1)
    month_end = month_start + relativedelta(months=1, seconds=-1)
    return [
        PromoCode("WELCOME10", DiscountType.PERCENT, 10, "Welcome discount - 10% off on first order",
                  min_order_amount=1000, max_discount=500, usage_limit=100, used_count=25,
                  valid_from=year_start, valid_until=year_end),
        PromoCode("SAVE20", DiscountType.PERCENT, 20, "Save big - 20% off on orders above ₹2000",
                  min_order_amount=2000, max_discount=1000, usage_limit=50, used_count=12,
                  valid_from=year_start, valid_until=year_end),
        PromoCode("FLAT500", DiscountType.FIXED, 500, "Flat ₹500 off on orders above ₹3000",
                  min_order_amount=3000, usage_limit=200, used_count=45,
                  valid_from=year_start, valid_until=year_end),
        PromoCode("MONTH30", DiscountType.PERCENT, 30, "Monthly special - 30% off on premium rentals",
                  min_order_amount=5000, max_discount=2000, usage_limit=30, used_count=8,
                  valid_from=month_start, valid_until=month_end),
        PromoCode("STUDENT15", DiscountType.PERCENT, 15, "Student discount - 15% off for educational purposes",
                  min_order_amount=1500, max_discount=750, usage_limit=100, used_count=22,
                  valid_from=year_start, valid_until=year_end),
        PromoCode("PROF20", DiscountType.PERCENT, 20, "Professor special - 20% off for academic demonstrations",
                  min_order_amount=2500, max_discount=1500, usage_limit=50, used_count=5,
                  valid_from=year_start, valid_until=year_end),
    ]


class PromoCatalog:
    """
    In-memory catalog of promo codes. Lookup is case-insensitive.
    """

    def __init__(self, codes: list[PromoCode] | None = None, anchor: datetime | None = None):
        self._codes: dict[str, PromoCode] = {}
        for promo in default_promo_codes(anchor) if codes is None else codes:
            self.add(promo)

    def add(self, promo: PromoCode) -> None:
        self._codes[promo.code.lower()] = promo

    def find(self, code: str) -> PromoCode | None:
        promo = self._codes.get((code or "").strip().lower())
        if promo is None or not promo.is_active:
            return None
        return promo

    @staticmethod
    def discount_for(promo: PromoCode, order_amount: float) -> float:
        if promo.type == DiscountType.PERCENT:
            amount = order_amount * promo.value / 100
            if promo.max_discount:
                amount = min(amount, promo.max_discount)
        else:
            amount = promo.value
        return min(amount, order_amount)

    def validate(
        self, code: str, order_amount: float, now: datetime | None = None
    ) -> PromoApplication:
        """Check a code against an order amount; raises PromoCodeError on failure."""
        if not code or not order_amount or order_amount <= 0:
            raise PromoCodeError("Code and order amount required", code)
        promo = self.find(code)
        if promo is None:
            raise PromoCodeError("Invalid or expired promo code", code)
        if not promo.in_window(now if now is not None else utc_now()):
            raise PromoCodeError("Promo code has expired", promo.code)
        if promo.is_exhausted():
            raise PromoCodeError("Promo code usage limit exceeded", promo.code)
        if promo.min_order_amount and order_amount < promo.min_order_amount:
            minimum = format_currency(promo.min_order_amount).removesuffix(".00")
            raise PromoCodeError(f"Minimum order amount {minimum} required", promo.code)
        return PromoApplication(
            promo=promo,
            order_amount=order_amount,
            discount_amount=self.discount_for(promo, order_amount),
        )

    def redeem(self, code: str) -> PromoCode:
        """Record one use of a code after the order is placed."""
        promo = self._codes.get((code or "").strip().lower())
        if promo is None:
            raise PromoCodeError("Invalid or expired promo code", code)
        promo.used_count += 1
        logger.info(f"Promo {promo.code} redeemed ({promo.used_count}/{promo.usage_limit or '∞'})")
        return promo

    def active_codes(self, now: datetime | None = None) -> list[PromoCode]:
        """Codes a customer could still use: active, not expired, not exhausted."""
        at = parse_timestamp(now) if now is not None else utc_now()
        return [
            promo
            for promo in self._codes.values()
            if promo.is_active
            and (promo.valid_until is None or at <= promo.valid_until)
            and not promo.is_exhausted()
        ]
