"""
Availability Evaluator.

Counts active reservations (reserved, picked up or late) against a product's
on-hand quantity and buckets the result into green / yellow / red.
"""

from collections.abc import Iterable
from datetime import datetime

from models.enums import AvailabilityStatus, ReservationStatus
from models.rental import Availability, DateRange, ProductPriceInput, Reservation
from utils.dates import parse_timestamp, utc_now


def ranges_overlap(
    a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime
) -> bool:
    """Inclusive overlap: touching boundaries count as a conflict."""
    a_start, a_end, b_start, b_end = map(parse_timestamp, (a_start, a_end, b_start, b_end))
    return a_start <= b_end and b_start <= a_end


def active_reservations_for(
    product_id: str, reservations: Iterable[Reservation]
) -> list[Reservation]:
    return [r for r in reservations if r.product_id == product_id and r.holds_unit]


def count_overlapping(
    product_id: str, reservations: Iterable[Reservation], window: DateRange
) -> int:
    """Number of active reservations for the product that overlap `window`."""
    return sum(
        1
        for r in active_reservations_for(product_id, reservations)
        if ranges_overlap(r.start_at, r.end_at, window.start, window.end)
    )


def _evaluate_window(qty: int, overlapping: int) -> Availability:
    if overlapping >= qty:
        return Availability(AvailabilityStatus.RED, "Not available for selected dates", 0)
    if overlapping > 0:
        free = qty - overlapping
        return Availability(AvailabilityStatus.YELLOW, f"Only {free} left for these dates", free)
    return Availability(AvailabilityStatus.GREEN, "Available", qty)


def _evaluate_now(qty: int, active: list[Reservation], now: datetime) -> Availability:
    holding = [
        r
        for r in active
        if r.status == ReservationStatus.LATE or r.start_at <= now <= r.end_at
    ]
    held = len(holding)
    if held == 0:
        return Availability(AvailabilityStatus.GREEN, "Available", qty)
    if held < qty:
        free = qty - held
        return Availability(AvailabilityStatus.YELLOW, f"Only {free} left", free)
    # Every unit is out; the product is free again once the earliest
    # non-late hold ends. Late units have no known return date.
    returning = [r.end_at for r in holding if r.status != ReservationStatus.LATE]
    if returning:
        next_free = min(returning)
        return Availability(
            AvailabilityStatus.YELLOW, f"Available from {next_free:%b %d, %Y}", 0
        )
    return Availability(AvailabilityStatus.RED, "Currently unavailable", 0)


def get_availability(
    product: ProductPriceInput,
    reservations: Iterable[Reservation],
    requested_from: datetime | str | None = None,
    requested_to: datetime | str | None = None,
    *,
    now: datetime | None = None,
) -> Availability:
    """
    Availability of `product` for a requested window, or overall when either
    end of the window is omitted.
    """
    product.validate_for_availability()
    if not product.rentable:
        return Availability(AvailabilityStatus.RED, "Not available for rent", 0)
    if product.qty_on_hand == 0:
        return Availability(AvailabilityStatus.RED, "Out of stock", 0)

    reservations = list(reservations)
    if requested_from is not None and requested_to is not None:
        window = DateRange(parse_timestamp(requested_from), parse_timestamp(requested_to))
        overlapping = count_overlapping(product.product_id, reservations, window)
        return _evaluate_window(product.qty_on_hand, overlapping)

    active = active_reservations_for(product.product_id, reservations)
    if not active:
        return Availability(AvailabilityStatus.GREEN, "Available", product.qty_on_hand)
    at = parse_timestamp(now) if now is not None else utc_now()
    return _evaluate_now(product.qty_on_hand, active, at)
