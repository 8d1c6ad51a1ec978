from datetime import datetime, timedelta, timezone

import pytest

from engine.pricelist import PricelistResolver, absolute_pricelist
from engine.rental_price import (
    calculate_extension_charge,
    calculate_rental_price,
    count_tenure_units,
    get_base_price_for_tenure,
)
from models.enums import DiscountType, Tenure
from models.errors import InvalidDateRangeError, InvalidProductError, InvalidTenureError
from models.pricing import DiscountRule, Pricelist
from models.rental import ProductPriceInput
from utils.money import round_money

START = datetime(2025, 8, 10, 10, 0)


@pytest.fixture
def sofa() -> ProductPriceInput:
    return ProductPriceInput(product_id="sofa", base_price=11433.80, qty_on_hand=3)


@pytest.fixture
def fridge() -> ProductPriceInput:
    return ProductPriceInput(product_id="fridge", base_price=10000.0, qty_on_hand=2)


def test_weekly_standard_scenario(sofa):
    result = calculate_rental_price(sofa, Tenure.WEEK, None, None, "standard")
    assert result.price == pytest.approx(3201.464)
    assert round_money(result.price) == 3201.46
    assert result.deposit == pytest.approx(1143.38)
    assert result.units == 1
    assert result.pricelist == "standard"


def test_one_week_window_matches_preview(sofa):
    result = calculate_rental_price(sofa, "week", START, START + timedelta(days=7))
    assert result.units == 1
    assert result.price == pytest.approx(3201.464)


def test_price_scales_with_whole_units(fridge):
    result = calculate_rental_price(fridge, Tenure.DAY, START, START + timedelta(days=3, hours=5))
    assert result.units == 3
    assert result.unit_price == pytest.approx(600.0)
    assert result.price == pytest.approx(1800.0)


def test_placeholder_range_prices_a_single_unit(fridge):
    inverted = calculate_rental_price(fridge, Tenure.DAY, START, START - timedelta(days=2))
    missing_end = calculate_rental_price(fridge, Tenure.DAY, START, None)
    assert inverted.units == missing_end.units == 1
    assert inverted.price == pytest.approx(600.0)


def test_repeated_calls_are_identical(sofa):
    first = calculate_rental_price(sofa, Tenure.MONTH, START, START + timedelta(days=62), "student", now=START)
    second = calculate_rental_price(sofa, Tenure.MONTH, START, START + timedelta(days=62), "student", now=START)
    assert first == second


def test_deposit_does_not_depend_on_tenure_or_duration(sofa):
    deposits = {
        calculate_rental_price(sofa, tenure, START, START + timedelta(days=days)).deposit
        for tenure in Tenure
        for days in (1, 10, 45)
    }
    assert len(deposits) == 1


def test_student_percent_discount(fridge):
    result = calculate_rental_price(fridge, Tenure.DAY, START, START + timedelta(days=3), "student", now=START)
    # 10000 * 0.05 * 3 = 1500, less 10%
    assert result.price == pytest.approx(1350.0)


def test_corporate_fixed_discount(fridge):
    result = calculate_rental_price(fridge, Tenure.MONTH, START, START + timedelta(days=31), "corporate", now=START)
    assert result.price == pytest.approx(8000.0)


def test_fixed_discount_never_goes_negative():
    small = ProductPriceInput(product_id="lamp", base_price=1000.0)
    result = calculate_rental_price(small, Tenure.HOUR, None, None, "corporate", now=START)
    assert result.price == 0.0


def test_expired_discount_is_checked_against_now_not_rental_window(fridge):
    resolver = PricelistResolver(
        pricelists=[
            Pricelist(
                name="standard",
                rates={Tenure.HOUR: 0.01, Tenure.DAY: 0.06, Tenure.WEEK: 0.28, Tenure.MONTH: 0.9},
                discounts=(
                    DiscountRule(
                        type=DiscountType.PERCENT,
                        value=50,
                        valid_from=datetime(2025, 1, 1),
                        valid_to=datetime(2025, 1, 31),
                    ),
                ),
            )
        ]
    )
    # The rental window sits inside the promo period, but "now" does not.
    in_window = datetime(2025, 1, 10)
    result = calculate_rental_price(
        fridge, Tenure.DAY, in_window, in_window + timedelta(days=1), resolver=resolver, now=datetime(2025, 3, 1)
    )
    assert result.price == pytest.approx(600.0)

    active = calculate_rental_price(
        fridge, Tenure.DAY, START, START + timedelta(days=1), resolver=resolver, now=datetime(2025, 1, 15)
    )
    assert active.price == pytest.approx(300.0)


def test_unknown_pricelist_prices_with_default(fridge):
    result = calculate_rental_price(fridge, Tenure.DAY, None, None, "gold")
    assert result.is_fallback is True
    assert result.pricelist == "standard"
    assert result.price == pytest.approx(600.0)


def test_absolute_pricelist_ignores_base_price(fridge):
    resolver = PricelistResolver(
        pricelists=[absolute_pricelist("standard", hourly=40, daily=250, weekly=1500, monthly=5000)]
    )
    result = calculate_rental_price(fridge, Tenure.WEEK, START, START + timedelta(days=14), resolver=resolver)
    assert result.price == pytest.approx(3000.0)
    assert result.deposit == pytest.approx(1000.0)


def test_min_deposit_applies_when_configured():
    resolver = PricelistResolver(
        pricelists=[
            Pricelist(
                name="standard",
                rates={Tenure.HOUR: 0.01, Tenure.DAY: 0.06, Tenure.WEEK: 0.28, Tenure.MONTH: 0.9},
                min_deposit=500,
            )
        ]
    )
    cheap = ProductPriceInput(product_id="kettle", base_price=1200.0)
    assert calculate_rental_price(cheap, Tenure.DAY, resolver=resolver).deposit == 500


@pytest.mark.parametrize("base_price", [0, -10.0, None])
def test_invalid_base_price_is_rejected(base_price):
    product = ProductPriceInput(product_id="bad", base_price=base_price)
    with pytest.raises(InvalidProductError):
        calculate_rental_price(product, Tenure.DAY)


def test_invalid_tenure_is_rejected(sofa):
    with pytest.raises(InvalidTenureError):
        calculate_rental_price(sofa, "fortnight")


def test_count_tenure_units():
    assert count_tenure_units("hour", START, START + timedelta(hours=5, minutes=30)) == 5
    assert count_tenure_units("week", START, START + timedelta(days=20)) == 2
    assert count_tenure_units("month", datetime(2025, 1, 15), datetime(2025, 3, 14)) == 1
    assert count_tenure_units("month", datetime(2025, 1, 31), datetime(2025, 2, 28)) == 1
    assert count_tenure_units("day", START, START + timedelta(hours=3)) == 1


def test_get_base_price_for_tenure(sofa):
    assert get_base_price_for_tenure(sofa, Tenure.DAY) == pytest.approx(686.028)
    assert get_base_price_for_tenure(sofa, Tenure.DAY, "student") == pytest.approx(571.69)


def test_extension_charge(fridge):
    end = datetime(2025, 8, 15, 10, 0)
    assert calculate_extension_charge(fridge, end, end + timedelta(days=3)) == pytest.approx(1800.0)


def test_extension_must_move_end_later(fridge):
    end = datetime(2025, 8, 15, 10, 0)
    with pytest.raises(InvalidDateRangeError):
        calculate_extension_charge(fridge, end, end)


def test_aware_dates_against_naive_discount_window(fridge):
    resolver = PricelistResolver(
        pricelists=[
            Pricelist(
                name="festive",
                rates={"hour": 0.01, "day": 0.06, "week": 0.28, "month": 0.9},
                discounts=(
                    DiscountRule(
                        type=DiscountType.PERCENT,
                        value=10,
                        valid_from=datetime(2025, 8, 1),
                        valid_to=datetime(2025, 8, 31),
                    ),
                ),
            )
        ],
        default_name="festive",
    )
    start = datetime(2025, 8, 10, tzinfo=timezone.utc)
    result = calculate_rental_price(
        fridge,
        Tenure.DAY,
        start,
        "2025-08-13T00:00:00Z",
        "festive",
        resolver=resolver,
        now=start,
    )
    assert result.units == 3
    assert result.price == pytest.approx(600.0 * 3 * 0.9)


def test_units_with_mixed_timezone_inputs():
    assert count_tenure_units(Tenure.DAY, datetime(2025, 8, 10), "2025-08-12T00:00:00Z") == 2
