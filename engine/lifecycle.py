"""
Reservation lifecycle: status transitions, late returns, late fees and
deposit refunds.

    reserved  -> picked_up | cancelled
    picked_up -> returned | late
    late      -> returned

Reservations are updated in place through the repository and never deleted;
every change is appended to an audit trail of ReservationEvent records.
"""

from collections.abc import Iterable
from datetime import datetime, timedelta
from typing import Any

from config.config import LifecycleConfig
from connectors.repositories import ProductRepository, ReservationRepository
from models.enums import ReservationStatus
from models.errors import (
    InvalidDateRangeError,
    InvalidTransitionError,
    ProductNotFoundError,
    ReservationConflictError,
    ReservationNotFoundError,
)
from models.events import ReservationEvent
from models.rental import DateRange, Reservation
from utils.dates import parse_timestamp, utc_now
from utils.logger import get_logger

from .availability import count_overlapping

logger = get_logger(__name__)

ALLOWED_TRANSITIONS: dict[ReservationStatus, frozenset[ReservationStatus]] = {
    ReservationStatus.RESERVED: frozenset(
        {ReservationStatus.PICKED_UP, ReservationStatus.CANCELLED}
    ),
    ReservationStatus.PICKED_UP: frozenset(
        {ReservationStatus.RETURNED, ReservationStatus.LATE}
    ),
    ReservationStatus.LATE: frozenset({ReservationStatus.RETURNED}),
    ReservationStatus.RETURNED: frozenset(),
    ReservationStatus.CANCELLED: frozenset(),
}

EXTENDABLE_STATUSES = frozenset(
    {ReservationStatus.RESERVED, ReservationStatus.PICKED_UP, ReservationStatus.LATE}
)


def can_transition(from_status: ReservationStatus, to_status: ReservationStatus) -> bool:
    return to_status in ALLOWED_TRANSITIONS[ReservationStatus(from_status)]


def days_past_due(reservation: Reservation, now: datetime) -> int:
    """Whole days elapsed since the reservation's end, 0 if not yet due."""
    overdue = parse_timestamp(now) - reservation.end_at
    return max(0, overdue.days)


def calculate_late_fee(
    reservation: Reservation,
    now: datetime,
    grace_days: int = 1,
    fee_per_day: float = 100.0,
) -> float:
    """Fee per day late, after the grace period."""
    return max(0, days_past_due(reservation, now) - grace_days) * fee_per_day


def calculate_deposit_refund(reservation: Reservation, deductions: float = 0.0) -> float:
    return max(0.0, reservation.deposit - deductions)


def find_late_reservations(
    reservations: Iterable[Reservation], now: datetime, grace_days: int = 1
) -> list[Reservation]:
    """Picked-up reservations whose end date plus the grace period has passed."""
    now = parse_timestamp(now)
    grace = timedelta(days=grace_days)
    return [
        r
        for r in reservations
        if r.status == ReservationStatus.PICKED_UP and now > r.end_at + grace
    ]


class ReservationLifecycle:
    """
    Applies lifecycle changes to reservations held in a repository.
    """

    def __init__(
        self,
        repository: ReservationRepository,
        products: ProductRepository,
        config: LifecycleConfig | None = None,
    ):
        self.repository = repository
        self.products = products
        self.config = config or LifecycleConfig()
        self.events: list[ReservationEvent] = []

    async def _load(self, reservation_id: str) -> Reservation:
        reservation = await self.repository.get(reservation_id)
        if reservation is None:
            raise ReservationNotFoundError(f"Reservation {reservation_id} not found")
        return reservation

    def _record(
        self,
        reservation: Reservation,
        from_status: ReservationStatus,
        at: datetime,
        **metadata: Any,
    ) -> ReservationEvent:
        event = ReservationEvent(
            reservation_id=reservation.reservation_id,
            from_status=from_status,
            to_status=reservation.status,
            timestamp=at,
            metadata=metadata,
        )
        self.events.append(event)
        logger.info(
            f"Reservation {reservation.reservation_id}: "
            f"{from_status.value} -> {reservation.status.value}"
        )
        return event

    async def _transition(
        self,
        reservation_id: str,
        to_status: ReservationStatus,
        at: datetime | None,
        **metadata: Any,
    ) -> tuple[Reservation, ReservationEvent]:
        reservation = await self._load(reservation_id)
        from_status = reservation.status
        if not can_transition(from_status, to_status):
            raise InvalidTransitionError(reservation_id, from_status, to_status)
        reservation.status = to_status
        await self.repository.save(reservation)
        event = self._record(reservation, from_status, at or utc_now(), **metadata)
        return reservation, event

    async def mark_picked_up(
        self, reservation_id: str, at: datetime | None = None
    ) -> ReservationEvent:
        _, event = await self._transition(reservation_id, ReservationStatus.PICKED_UP, at)
        return event

    async def cancel(
        self, reservation_id: str, reason: str = "", at: datetime | None = None
    ) -> ReservationEvent:
        _, event = await self._transition(
            reservation_id, ReservationStatus.CANCELLED, at, reason=reason
        )
        return event

    async def mark_returned(
        self,
        reservation_id: str,
        condition: str = "good",
        damage_deduction: float = 0.0,
        at: datetime | None = None,
    ) -> float:
        """
        Close a rental and return the deposit refund. Any late fee accrued up
        to the return time is deducted, together with `damage_deduction`.
        """
        if damage_deduction < 0:
            raise ValueError("damage_deduction must be non-negative")
        current = await self._load(reservation_id)
        returned_at = parse_timestamp(at) if at is not None else utc_now()
        late_fee = calculate_late_fee(
            current,
            returned_at,
            self.config.late_grace_days,
            self.config.late_fee_per_day,
        )
        reservation, _ = await self._transition(
            reservation_id,
            ReservationStatus.RETURNED,
            returned_at,
            condition=condition,
            late_fee=late_fee,
            damage_deduction=damage_deduction,
        )
        refund = calculate_deposit_refund(reservation, late_fee + damage_deduction)
        self.events[-1].metadata["deposit_refund"] = refund
        return refund

    async def _check_extension_fits(self, reservation: Reservation, new_end: datetime) -> None:
        product = await self.products.get_product(reservation.product_id)
        if product is None:
            raise ProductNotFoundError(f"Product {reservation.product_id} not found")
        product.validate_for_availability()
        added = DateRange(reservation.end_at, new_end)
        others = [
            r
            for r in await self.repository.list_for_product(reservation.product_id)
            if r.reservation_id != reservation.reservation_id
        ]
        # This reservation already holds one unit.
        if count_overlapping(reservation.product_id, others, added) + 1 > product.qty_on_hand:
            raise ReservationConflictError(
                f"Cannot extend {reservation.reservation_id} to {new_end:%Y-%m-%d}: "
                f"no free unit of {reservation.product_id} from {added.start:%Y-%m-%d}"
            )

    async def extend(
        self,
        reservation_id: str,
        new_end: datetime | str,
        extra_charge: float = 0.0,
        at: datetime | None = None,
    ) -> Reservation:
        """
        Move the end of an open (or late) rental later and add the extension
        charge. Raises ReservationConflictError when the added days would need
        more units than the product has on hand.
        """
        reservation = await self._load(reservation_id)
        if reservation.status not in EXTENDABLE_STATUSES:
            raise InvalidTransitionError(reservation_id, reservation.status, reservation.status)
        extended_end = parse_timestamp(new_end)
        if extended_end <= reservation.end_at:
            raise InvalidDateRangeError(
                f"New end {extended_end.isoformat()} must be after current end "
                f"{reservation.end_at.isoformat()}"
            )
        if extra_charge < 0:
            raise ValueError("extra_charge must be non-negative")
        await self._check_extension_fits(reservation, extended_end)
        previous_end = reservation.end_at
        reservation.end_at = extended_end
        reservation.price += extra_charge
        await self.repository.save(reservation)
        self._record(
            reservation,
            reservation.status,
            at or utc_now(),
            previous_end=previous_end.isoformat(),
            new_end=extended_end.isoformat(),
            additional_charge=extra_charge,
        )
        return reservation

    async def process_late_returns(self, now: datetime | None = None) -> list[Reservation]:
        """Mark every overdue picked-up reservation as late. Returns the ones changed."""
        reservations = await self.repository.list_all()
        if not reservations:
            return []
        at = parse_timestamp(now) if now is not None else utc_now()
        overdue = find_late_reservations(reservations, at, self.config.late_grace_days)
        marked = []
        for reservation in overdue:
            updated, _ = await self._transition(
                reservation.reservation_id,
                ReservationStatus.LATE,
                at,
                days_late=days_past_due(reservation, at),
                late_fee=calculate_late_fee(
                    reservation,
                    at,
                    self.config.late_grace_days,
                    self.config.late_fee_per_day,
                ),
            )
            marked.append(updated)
        if marked:
            logger.info(f"Marked {len(marked)} reservation(s) late")
        return marked
