from datetime import datetime, timedelta, timezone

import pytest

from engine.availability import count_overlapping, get_availability, ranges_overlap
from models.enums import AvailabilityStatus, ReservationStatus
from models.errors import InvalidDateRangeError, InvalidProductError
from models.rental import DateRange, ProductPriceInput, Reservation


def _reservation(rid, start, end, status=ReservationStatus.RESERVED, product_id="sofa"):
    return Reservation(
        reservation_id=rid,
        product_id=product_id,
        start_at=start,
        end_at=end,
        status=status,
    )


def _product(qty, rentable=True):
    return ProductPriceInput(product_id="sofa", base_price=11433.80, qty_on_hand=qty, rentable=rentable)


AUG_10 = datetime(2025, 8, 10)
AUG_15 = datetime(2025, 8, 15)
AUG_20 = datetime(2025, 8, 20)


def test_shared_boundary_counts_as_overlap():
    assert ranges_overlap(AUG_10, AUG_15, AUG_15, AUG_20)
    assert DateRange(AUG_10, AUG_15).overlaps(DateRange(AUG_15, AUG_20))
    assert not ranges_overlap(AUG_10, AUG_15, datetime(2025, 8, 16), AUG_20)


def test_boundary_conflict_makes_single_unit_unavailable():
    reservations = [_reservation("r1", AUG_10, AUG_15)]
    result = get_availability(_product(1), reservations, AUG_15, AUG_20)
    assert result.status == AvailabilityStatus.RED
    assert result.text == "Not available for selected dates"


@pytest.mark.parametrize(
    "booked, expected, available",
    [
        (3, AvailabilityStatus.RED, 0),
        (2, AvailabilityStatus.YELLOW, 1),
        (0, AvailabilityStatus.GREEN, 3),
    ],
)
def test_count_threshold(booked, expected, available):
    reservations = [_reservation(f"r{i}", AUG_10, AUG_15) for i in range(booked)]
    result = get_availability(_product(3), reservations, AUG_10, AUG_20)
    assert result.status == expected
    assert result.available_units == available


def test_yellow_text_reports_remaining_units():
    reservations = [_reservation("r1", AUG_10, AUG_15)]
    result = get_availability(_product(3), reservations, AUG_10, AUG_20)
    assert result.text == "Only 2 left for these dates"


def test_late_reservations_hold_units():
    reservations = [
        _reservation("r1", AUG_10, AUG_15, ReservationStatus.LATE),
        _reservation("r2", AUG_10, AUG_15, ReservationStatus.PICKED_UP),
    ]
    result = get_availability(_product(2), reservations, AUG_15, AUG_20)
    assert result.status == AvailabilityStatus.RED


def test_returned_and_cancelled_reservations_are_ignored():
    reservations = [
        _reservation("r1", AUG_10, AUG_15, ReservationStatus.RETURNED),
        _reservation("r2", AUG_10, AUG_15, ReservationStatus.CANCELLED),
    ]
    result = get_availability(_product(1), reservations, AUG_10, AUG_20)
    assert result.status == AvailabilityStatus.GREEN
    assert result.text == "Available"


def test_reservations_for_other_products_are_ignored():
    reservations = [_reservation("r1", AUG_10, AUG_15, product_id="fridge")]
    assert count_overlapping("sofa", reservations, DateRange(AUG_10, AUG_20)) == 0
    assert get_availability(_product(1), reservations, AUG_10, AUG_20).status == AvailabilityStatus.GREEN


def test_empty_reservations_are_green():
    assert get_availability(_product(2), []).status == AvailabilityStatus.GREEN
    assert get_availability(_product(2), [], AUG_10, AUG_20).status == AvailabilityStatus.GREEN


def test_out_of_stock_and_not_rentable_are_red():
    assert get_availability(_product(0), []).text == "Out of stock"
    result = get_availability(_product(5, rentable=False), [], AUG_10, AUG_20)
    assert result.status == AvailabilityStatus.RED
    assert result.text == "Not available for rent"


def test_missing_or_negative_quantity_is_invalid():
    with pytest.raises(InvalidProductError):
        get_availability(ProductPriceInput("sofa", 100.0, qty_on_hand=None), [])
    with pytest.raises(InvalidProductError):
        get_availability(ProductPriceInput("sofa", 100.0, qty_on_hand=-1), [])


def test_inverted_requested_range_is_invalid():
    with pytest.raises(InvalidDateRangeError):
        get_availability(_product(1), [], AUG_20, AUG_10)
    with pytest.raises(InvalidDateRangeError):
        get_availability(_product(1), [], AUG_10, AUG_10)


def test_iso_strings_are_accepted_for_requested_range():
    reservations = [_reservation("r1", AUG_10, AUG_15)]
    result = get_availability(_product(1), reservations, "2025-08-12T00:00:00", "2025-08-13T00:00:00")
    assert result.status == AvailabilityStatus.RED


# --- Aggregate availability (no requested range) --- #


def test_aggregate_partial_hold_is_yellow():
    reservations = [_reservation("r1", AUG_10, AUG_15, ReservationStatus.PICKED_UP)]
    result = get_availability(_product(2), reservations, now=datetime(2025, 8, 12))
    assert result.status == AvailabilityStatus.YELLOW
    assert result.text == "Only 1 left"


def test_aggregate_fully_held_reports_next_free_date():
    reservations = [_reservation("r1", AUG_10, AUG_15, ReservationStatus.PICKED_UP)]
    result = get_availability(_product(1), reservations, now=datetime(2025, 8, 12))
    assert result.status == AvailabilityStatus.YELLOW
    assert result.text == "Available from Aug 15, 2025"


def test_aggregate_held_only_by_late_returns_is_red():
    reservations = [_reservation("r1", AUG_10, AUG_15, ReservationStatus.LATE)]
    result = get_availability(_product(1), reservations, now=datetime(2025, 8, 25))
    assert result.status == AvailabilityStatus.RED
    assert result.text == "Currently unavailable"


def test_aggregate_future_reservations_do_not_block_now():
    reservations = [_reservation("r1", AUG_15, AUG_20)]
    result = get_availability(_product(1), reservations, now=AUG_10)
    assert result.status == AvailabilityStatus.GREEN


def test_half_open_request_falls_back_to_aggregate():
    reservations = [_reservation("r1", AUG_10, AUG_15)]
    result = get_availability(_product(1), reservations, AUG_10, None, now=datetime(2025, 9, 1))
    assert result.status == AvailabilityStatus.GREEN


def test_utc_window_against_naive_reservations():
    reservations = [_reservation("r1", AUG_10, AUG_15)]
    result = get_availability(_product(2), reservations, "2025-08-15T00:00:00Z", "2025-08-20T00:00:00Z")
    assert result.status == AvailabilityStatus.YELLOW
    assert result.text == "Only 1 left for these dates"


def test_offset_window_is_compared_in_utc():
    reservations = [_reservation("r1", AUG_10, AUG_15)]
    ist = timezone(timedelta(hours=5, minutes=30))
    # 05:29 IST on Aug 15 is still Aug 14 in UTC, inside the reservation
    touching = get_availability(
        _product(1), reservations, datetime(2025, 8, 15, 5, 29, tzinfo=ist), datetime(2025, 8, 18, tzinfo=ist)
    )
    assert touching.status == AvailabilityStatus.RED
    clear = get_availability(
        _product(1), reservations, datetime(2025, 8, 15, 5, 31, tzinfo=ist), datetime(2025, 8, 18, tzinfo=ist)
    )
    assert clear.status == AvailabilityStatus.GREEN


def test_aware_now_without_window():
    reservations = [_reservation("r1", AUG_10, AUG_15)]
    result = get_availability(_product(1), reservations, now=datetime(2025, 8, 12, tzinfo=timezone.utc))
    assert result.status == AvailabilityStatus.YELLOW
    assert result.text == "Available from Aug 15, 2025"


def test_ranges_overlap_mixes_naive_and_aware():
    assert ranges_overlap(AUG_10, AUG_15, datetime(2025, 8, 15, tzinfo=timezone.utc), AUG_20)
