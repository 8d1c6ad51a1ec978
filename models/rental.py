"""
Rental domain models: the canonical product input, date ranges, reservations,
cart/quotation line items and the derived results of the engine.
"""

from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any

from utils.dates import parse_timestamp, utc_now

from .enums import ACTIVE_RESERVATION_STATUSES, AvailabilityStatus, ReservationStatus, Tenure
from .errors import InvalidDateRangeError, InvalidLineItemError, InvalidProductError

_PRICE_KEYS = ("base_price", "basePrice", "salesPrice", "sales_price", "price")
_QTY_KEYS = ("qty_on_hand", "qtyOnHand", "quantity_on_hand")
_ID_KEYS = ("product_id", "productId", "id")


def _first_present(record: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if record.get(key) is not None:
            return record[key]
    return None


@dataclass(frozen=True)
class ProductPriceInput:
    """
    The single product shape accepted by the pricing and availability functions.
    """

    product_id: str
    base_price: float | None
    qty_on_hand: int | None = 0
    rentable: bool = True
    name: str = ""

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "ProductPriceInput":
        """Adapt a catalog/ERP record with any of the legacy field names."""
        product_id = _first_present(record, _ID_KEYS)
        if product_id is None:
            raise InvalidProductError("Product record has no identifier")
        price = _first_present(record, _PRICE_KEYS)
        qty = _first_present(record, _QTY_KEYS)
        return cls(
            product_id=str(product_id),
            base_price=float(price) if price is not None else None,
            qty_on_hand=int(qty) if qty is not None else None,
            rentable=bool(record.get("rentable", True)),
            name=str(record.get("name", "")),
        )

    def validate_for_pricing(self) -> None:
        if self.base_price is None or self.base_price <= 0:
            raise InvalidProductError(
                f"Product {self.product_id} must have a positive base price, got {self.base_price}"
            )

    def validate_for_availability(self) -> None:
        if self.qty_on_hand is None:
            raise InvalidProductError(f"Product {self.product_id} has no on-hand quantity")
        if self.qty_on_hand < 0:
            raise InvalidProductError(
                f"Product {self.product_id} has negative on-hand quantity {self.qty_on_hand}"
            )


@dataclass(frozen=True)
class DateRange:
    """A rental window; `end` must be strictly after `start`."""

    start: datetime
    end: datetime

    def __post_init__(self):
        start = parse_timestamp(self.start)
        end = parse_timestamp(self.end)
        if end <= start:
            raise InvalidDateRangeError(
                f"End {end.isoformat()} must be strictly after start {start.isoformat()}"
            )
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "end", end)

    def overlaps(self, other: "DateRange") -> bool:
        """Inclusive overlap: a range ending exactly when another starts conflicts."""
        return self.start <= other.end and other.start <= self.end

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant <= self.end


@dataclass
class Reservation:
    """
    A record committing one unit of a product to a customer for a window.
    Reservations are mutated through their lifecycle but never deleted.
    """

    reservation_id: str
    product_id: str
    start_at: datetime
    end_at: datetime
    status: ReservationStatus = ReservationStatus.RESERVED
    customer_id: str | None = None
    price: float = 0.0
    deposit: float = 0.0
    created_at: datetime = field(default_factory=utc_now)

    def __post_init__(self):
        self.status = ReservationStatus(self.status)
        # Validates start < end and normalises ISO strings.
        window = DateRange(self.start_at, self.end_at)
        self.start_at, self.end_at = window.start, window.end

    @property
    def window(self) -> DateRange:
        return DateRange(self.start_at, self.end_at)

    @property
    def holds_unit(self) -> bool:
        return self.status in ACTIVE_RESERVATION_STATUSES


@dataclass
class LineItem:
    """A priced cart/quotation line. `price_per_unit` and `deposit` are per unit."""

    product_id: str
    price_per_unit: float
    qty: int = 1
    tenure: Tenure = Tenure.DAY
    start_at: datetime | None = None
    end_at: datetime | None = None
    deposit: float = 0.0
    name: str = ""

    def __post_init__(self):
        self.tenure = Tenure.parse(self.tenure)
        if self.start_at is not None:
            self.start_at = parse_timestamp(self.start_at)
        if self.end_at is not None:
            self.end_at = parse_timestamp(self.end_at)
        if self.price_per_unit < 0:
            raise InvalidLineItemError(f"Line {self.product_id}: negative unit price")
        if self.qty < 0:
            raise InvalidLineItemError(f"Line {self.product_id}: negative quantity")
        if self.deposit < 0:
            raise InvalidLineItemError(f"Line {self.product_id}: negative deposit")

    @property
    def amount(self) -> float:
        return self.price_per_unit * self.qty

    @property
    def deposit_amount(self) -> float:
        return self.deposit * self.qty


@dataclass(frozen=True)
class RentalPrice:
    """Rental charge and refundable deposit for one booking of one unit."""

    price: float
    deposit: float
    unit_price: float
    units: int
    pricelist: str
    is_fallback: bool = False


@dataclass(frozen=True)
class Availability:
    status: AvailabilityStatus
    text: str
    available_units: int = 0


@dataclass(frozen=True)
class Totals:
    """Derived cart/quotation/invoice totals. Deposit is never part of `total`."""

    subtotal: float
    discount: float
    taxes: float
    total: float
    deposit: float
    tax_rate: float

    def as_dict(self) -> dict[str, float]:
        return asdict(self)
