"""
Cart aggregate: priced line items plus the totals derived from them.
"""

from dataclasses import asdict, replace
from datetime import datetime
from typing import Any

from config.config import PricingConfig
from models.enums import Tenure
from models.rental import LineItem, ProductPriceInput, Totals
from utils.logger import get_logger

from .rental_price import calculate_rental_price
from .pricelist import PricelistResolver
from .totals import DiscountInput, compute_totals

logger = get_logger(__name__)


def _same_booking(a: LineItem, b: LineItem) -> bool:
    return (
        a.product_id == b.product_id
        and a.tenure == b.tenure
        and a.start_at == b.start_at
        and a.end_at == b.end_at
    )


class Cart:
    """
    Lines for the same product, tenure and dates are merged by adding
    quantities. Totals are recomputed from the lines on every call.
    """

    def __init__(self, config: PricingConfig | None = None):
        self.config = config or PricingConfig()
        self._items: list[LineItem] = []

    @property
    def items(self) -> list[LineItem]:
        return list(self._items)

    def add_item(self, item: LineItem) -> str:
        """Add a line; returns "added" or "updated" (merged into an existing line)."""
        for index, existing in enumerate(self._items):
            if _same_booking(existing, item):
                self._items[index] = replace(existing, qty=existing.qty + item.qty)
                return "updated"
        self._items.append(item)
        return "added"

    def add_product(
        self,
        product: ProductPriceInput,
        tenure: Tenure | str,
        start_at: datetime,
        end_at: datetime,
        qty: int = 1,
        pricelist_name: str | None = None,
        resolver: PricelistResolver | None = None,
    ) -> str:
        """Price a product for a window and add it as a line."""
        quote = calculate_rental_price(
            product,
            tenure,
            start_at,
            end_at,
            pricelist_name or self.config.default_pricelist,
            resolver=resolver,
        )
        return self.add_item(
            LineItem(
                product_id=product.product_id,
                name=product.name,
                price_per_unit=quote.price,
                qty=qty,
                tenure=tenure,
                start_at=start_at,
                end_at=end_at,
                deposit=quote.deposit,
            )
        )

    def update_quantity(self, line: LineItem, qty: int) -> None:
        """Set the quantity of the line booking the same product, tenure and dates; qty <= 0 removes it."""
        self._items = [
            replace(item, qty=qty) if _same_booking(item, line) else item
            for item in self._items
        ]
        self._items = [item for item in self._items if item.qty > 0]

    def remove_item(self, line: LineItem) -> None:
        self._items = [item for item in self._items if not _same_booking(item, line)]

    def remove_product(self, product_id: str) -> None:
        """Drop every booking of a product."""
        self._items = [item for item in self._items if item.product_id != product_id]

    def clear(self) -> None:
        self._items = []

    def total_items(self) -> int:
        return sum(item.qty for item in self._items)

    def is_empty(self) -> bool:
        return not self._items

    def totals(self, discount: DiscountInput = None, tax_rate: float | None = None) -> Totals:
        rate = self.config.tax_rate if tax_rate is None else tax_rate
        return compute_totals(self._items, discount, rate)

    def to_quotation(
        self,
        customer: dict[str, Any],
        notes: str = "",
        discount: DiscountInput = None,
    ) -> dict[str, Any]:
        """Payload for the order/quotation persistence API."""
        if self.is_empty():
            raise ValueError("Cannot build a quotation from an empty cart")
        items = []
        for item in self._items:
            line = asdict(item)
            line["tenure"] = item.tenure.value
            line["start_at"] = item.start_at.isoformat() if item.start_at else None
            line["end_at"] = item.end_at.isoformat() if item.end_at else None
            items.append(line)
        totals = self.totals(discount)
        logger.debug(f"Built quotation for {customer.get('email', 'unknown customer')}")
        return {
            "customer": dict(customer),
            "notes": notes,
            "items": items,
            "totals": totals.as_dict(),
            "status": "quotation",
        }
