"""
Error taxonomy for the rental pricing and availability engine.

All errors derive from RentalEngineError, itself a ValueError, so callers can
catch engine failures broadly or individually.
"""


class RentalEngineError(ValueError):
    """Base class for all engine errors."""


class InvalidTenureError(RentalEngineError):
    def __init__(self, tenure):
        self.tenure = tenure
        super().__init__(
            f"Invalid tenure {tenure!r}; expected one of hour, day, week, month"
        )


class InvalidProductError(RentalEngineError):
    pass


class InvalidDateRangeError(RentalEngineError):
    pass


class InvalidDiscountError(RentalEngineError):
    pass


class InvalidLineItemError(RentalEngineError):
    pass


class PromoCodeError(RentalEngineError):
    """Raised when a promo code cannot be applied; `reason` is user-facing."""

    def __init__(self, reason: str, code: str | None = None):
        self.reason = reason
        self.code = code
        super().__init__(reason)


class InvalidTransitionError(RentalEngineError):
    def __init__(self, reservation_id: str, from_status, to_status):
        self.reservation_id = reservation_id
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Reservation {reservation_id} cannot move from "
            f"{getattr(from_status, 'value', from_status)} to "
            f"{getattr(to_status, 'value', to_status)}"
        )


class ReservationConflictError(RentalEngineError):
    pass


class ReservationNotFoundError(RentalEngineError):
    pass


class ProductNotFoundError(RentalEngineError):
    pass


class InvalidInstallmentPlanError(RentalEngineError):
    """Unknown plan type, or an order total that cannot be split."""


class InstallmentNotFoundError(RentalEngineError):
    pass
