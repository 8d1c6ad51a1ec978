"""
Centralized Enum definitions for the project.
"""

from enum import Enum

from .errors import InvalidTenureError


class Tenure(str, Enum):
    """Rental duration unit a price and deposit are quoted against"""

    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"

    @classmethod
    def parse(cls, value: "Tenure | str") -> "Tenure":
        """Return the Tenure for a member or its string value, else raise InvalidTenureError."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise InvalidTenureError(value)


class ReservationStatus(str, Enum):
    """Possible reservation statuses"""

    RESERVED = "reserved"
    PICKED_UP = "picked_up"
    RETURNED = "returned"
    LATE = "late"  # Past due, unit still with the customer
    CANCELLED = "cancelled"


# Statuses in which a reservation physically or contractually holds a unit.
ACTIVE_RESERVATION_STATUSES = frozenset(
    {ReservationStatus.RESERVED, ReservationStatus.PICKED_UP, ReservationStatus.LATE}
)


class AvailabilityStatus(str, Enum):
    """Three-tier availability signal shown next to a product"""

    GREEN = "green"  # Fully available
    YELLOW = "yellow"  # Limited
    RED = "red"  # Unavailable


class DiscountType(str, Enum):
    PERCENT = "percent"
    FIXED = "fixed"


class RateKind(str, Enum):
    """How a pricelist rate is interpreted"""

    MULTIPLIER = "multiplier"  # Fraction of the product's base price
    ABSOLUTE = "absolute"  # Flat amount per tenure unit


class InstallmentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"


class InstallmentPlanStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    DEFAULTED = "defaulted"
