"""
Pricing-related data models for the rental engine.
Includes DiscountRule, Pricelist, RateDescriptor and PromoCode dataclasses.
"""

from dataclasses import dataclass, field
from datetime import datetime

from utils.dates import parse_timestamp

from .enums import DiscountType, RateKind, Tenure
from .errors import InvalidDiscountError


@dataclass(frozen=True)
class DiscountRule:
    """
    A percent or fixed discount, optionally scoped by a code and time-bounded.
    Percent values must lie in [0, 100]; fixed values must be non-negative.
    """

    type: DiscountType
    value: float
    code: str | None = None
    valid_from: datetime | None = None
    valid_to: datetime | None = None

    def __post_init__(self):
        try:
            kind = DiscountType(self.type)
        except ValueError as exc:
            raise InvalidDiscountError(f"Unknown discount type {self.type!r}") from exc
        object.__setattr__(self, "type", kind)
        for name in ("valid_from", "valid_to"):
            if getattr(self, name) is not None:
                object.__setattr__(self, name, parse_timestamp(getattr(self, name)))
        if kind == DiscountType.PERCENT and not 0 <= self.value <= 100:
            raise InvalidDiscountError(
                f"Percent discount must be between 0 and 100, got {self.value}"
            )
        if kind == DiscountType.FIXED and self.value < 0:
            raise InvalidDiscountError(
                f"Fixed discount must be non-negative, got {self.value}"
            )
        if self.valid_from and self.valid_to and self.valid_to < self.valid_from:
            raise InvalidDiscountError("Discount valid_to precedes valid_from")

    def is_active(self, at: datetime) -> bool:
        """True when `at` falls inside the optional validity window (inclusive)."""
        at = parse_timestamp(at)
        if self.valid_from is not None and at < self.valid_from:
            return False
        if self.valid_to is not None and at > self.valid_to:
            return False
        return True

    def amount_off(self, amount: float) -> float:
        """Discount this rule grants on `amount`, never more than `amount` itself."""
        if amount <= 0:
            return 0.0
        if self.type == DiscountType.PERCENT:
            off = amount * self.value / 100
        else:
            off = self.value
        return min(off, amount)

    def apply_to(self, amount: float) -> float:
        return max(0.0, amount - self.amount_off(amount))


@dataclass(frozen=True)
class Pricelist:
    """
    A named rate table. Each tenure maps to a multiplier of the product's base
    price or to an absolute rate, depending on `rate_kind`.
    """

    name: str
    rates: dict[Tenure, float]
    rate_kind: RateKind = RateKind.MULTIPLIER
    discounts: tuple[DiscountRule, ...] = ()
    deposit_fraction: float = 0.10
    min_deposit: float = 0.0

    def __post_init__(self):
        rates = {Tenure.parse(tenure): rate for tenure, rate in self.rates.items()}
        missing = [t.value for t in Tenure if t not in rates]
        if missing:
            raise ValueError(f"Pricelist {self.name!r} has no rate for {', '.join(missing)}")
        negative = [t.value for t, rate in rates.items() if rate < 0]
        if negative:
            raise ValueError(f"Pricelist {self.name!r} has negative rate for {', '.join(negative)}")
        if self.deposit_fraction < 0 or self.min_deposit < 0:
            raise ValueError(f"Pricelist {self.name!r} has a negative deposit setting")
        object.__setattr__(self, "rates", rates)
        object.__setattr__(self, "rate_kind", RateKind(self.rate_kind))
        object.__setattr__(self, "discounts", tuple(self.discounts))

    def rate_for(self, tenure: Tenure) -> float:
        return self.rates[tenure]


@dataclass(frozen=True)
class RateDescriptor:
    """Result of resolving a pricelist and tenure."""

    pricelist: str
    requested: str | None
    tenure: Tenure
    kind: RateKind
    value: float
    discounts: tuple[DiscountRule, ...] = ()
    deposit_fraction: float = 0.10
    min_deposit: float = 0.0
    is_fallback: bool = False

    def unit_price(self, base_price: float) -> float:
        """Price of one tenure unit for a product with the given base price."""
        if self.kind == RateKind.ABSOLUTE:
            return self.value
        return base_price * self.value

    def deposit_for(self, base_price: float) -> float:
        return max(self.min_deposit, base_price * self.deposit_fraction)


@dataclass
class PromoCode:
    """
    Customer-entered promotional code applied to an order subtotal.
    """

    code: str
    type: DiscountType
    value: float
    description: str = ""
    min_order_amount: float | None = None
    max_discount: float | None = None
    usage_limit: int | None = None
    used_count: int = 0
    valid_from: datetime | None = None
    valid_until: datetime | None = None
    is_active: bool = True
    metadata: dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        self.type = DiscountType(self.type)
        if self.type == DiscountType.PERCENT and not 0 <= self.value <= 100:
            raise InvalidDiscountError(
                f"Promo {self.code}: percent value must be between 0 and 100"
            )
        if self.value < 0:
            raise InvalidDiscountError(f"Promo {self.code}: value must be non-negative")
        if self.valid_from is not None:
            self.valid_from = parse_timestamp(self.valid_from)
        if self.valid_until is not None:
            self.valid_until = parse_timestamp(self.valid_until)

    def is_exhausted(self) -> bool:
        return bool(self.usage_limit) and self.used_count >= self.usage_limit

    def in_window(self, at: datetime) -> bool:
        at = parse_timestamp(at)
        if self.valid_from is not None and at < self.valid_from:
            return False
        if self.valid_until is not None and at > self.valid_until:
            return False
        return True
