from datetime import datetime, timedelta

import pytest

from config.config import PricingConfig
from engine.cart import Cart
from models.enums import Tenure
from models.rental import LineItem, ProductPriceInput

START = datetime(2025, 8, 10)
END = START + timedelta(days=7)


def _line(product_id="sofa", qty=1, start=START, end=END, price=3201.46, deposit=1143.38):
    return LineItem(
        product_id=product_id,
        price_per_unit=price,
        qty=qty,
        tenure=Tenure.WEEK,
        start_at=start,
        end_at=end,
        deposit=deposit,
    )


@pytest.fixture
def cart() -> Cart:
    return Cart()


def test_same_booking_merges_quantities(cart):
    assert cart.add_item(_line()) == "added"
    assert cart.add_item(_line(qty=2)) == "updated"
    assert len(cart.items) == 1
    assert cart.items[0].qty == 3
    assert cart.total_items() == 3


def test_different_dates_are_separate_lines(cart):
    cart.add_item(_line())
    cart.add_item(_line(start=END, end=END + timedelta(days=7)))
    assert len(cart.items) == 2


def test_update_quantity_and_remove(cart):
    cart.add_item(_line())
    cart.add_item(_line(product_id="fridge", price=600, deposit=1000))
    cart.update_quantity(_line(), 4)
    assert cart.items[0].qty == 4
    cart.update_quantity(_line(), 0)
    assert [item.product_id for item in cart.items] == ["fridge"]
    cart.remove_item(cart.items[0])
    assert cart.is_empty()


def test_edits_only_touch_the_matching_booking(cart):
    first_week = _line()
    second_week = _line(start=END, end=END + timedelta(days=7))
    cart.add_item(first_week)
    cart.add_item(second_week)
    cart.update_quantity(second_week, 5)
    assert [item.qty for item in cart.items] == [1, 5]
    cart.remove_item(first_week)
    assert len(cart.items) == 1
    assert cart.items[0].start_at == END
    assert cart.items[0].qty == 5


def test_remove_product_drops_every_booking(cart):
    cart.add_item(_line())
    cart.add_item(_line(start=END, end=END + timedelta(days=7)))
    cart.add_item(_line(product_id="fridge", price=600, deposit=1000))
    cart.remove_product("sofa")
    assert [item.product_id for item in cart.items] == ["fridge"]


def test_totals_use_config_tax_rate():
    cart = Cart(PricingConfig(tax_rate=0.05))
    cart.add_item(_line(price=1000, deposit=500, qty=2))
    totals = cart.totals(discount=100)
    assert totals.subtotal == 2000
    assert totals.taxes == 95
    assert totals.total == 1995
    assert totals.deposit == 1000


def test_add_product_prices_the_booking(cart):
    sofa = ProductPriceInput("sofa", 11433.80, qty_on_hand=3, name="3-Seater Sofa")
    cart.add_product(sofa, Tenure.WEEK, START, END, qty=1)
    item = cart.items[0]
    assert item.name == "3-Seater Sofa"
    assert item.price_per_unit == pytest.approx(3201.464)
    assert item.deposit == pytest.approx(1143.38)
    assert cart.totals().subtotal == 3201.46


def test_to_quotation_payload(cart):
    cart.add_item(_line())
    quotation = cart.to_quotation({"name": "Asha", "email": "asha@example.com"}, notes="Ground floor")
    assert quotation["status"] == "quotation"
    assert quotation["customer"]["email"] == "asha@example.com"
    assert quotation["items"][0]["tenure"] == "week"
    assert quotation["items"][0]["start_at"] == START.isoformat()
    assert quotation["totals"]["deposit"] == 1143.38
    assert quotation["totals"]["total"] == round(3201.46 * 1.18, 2)


def test_empty_cart_cannot_be_quoted(cart):
    with pytest.raises(ValueError):
        cart.to_quotation({"name": "Asha"})
