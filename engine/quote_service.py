"""
RentalQuoteService: fetches a product and a reservation snapshot from the
injected repositories, then runs the pure pricing and availability functions.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime

from config.config import PricingConfig
from connectors.repositories import ProductRepository, ReservationRepository
from models.enums import AvailabilityStatus, ReservationStatus, Tenure
from models.errors import ProductNotFoundError, ReservationConflictError
from models.rental import Availability, DateRange, ProductPriceInput, Reservation
from utils.logger import get_logger

from .availability import get_availability
from .pricelist import PricelistResolver, build_resolver, get_default_resolver
from .rental_price import calculate_rental_price

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProductQuote:
    product_id: str
    tenure: Tenure
    price: float
    deposit: float
    unit_price: float
    units: int
    pricelist: str
    availability: Availability


class RentalQuoteService:
    """
    Prices and books rentals against a product catalog and reservation store.
    """

    def __init__(
        self,
        products: ProductRepository,
        reservations: ReservationRepository,
        resolver: PricelistResolver | None = None,
        config: PricingConfig | None = None,
    ):
        self.products = products
        self.reservations = reservations
        if resolver is None:
            resolver = get_default_resolver() if config is None else build_resolver(config)
        self.resolver = resolver
        self.config = config or PricingConfig()

    async def _product(self, product_id: str) -> ProductPriceInput:
        product = await self.products.get_product(product_id)
        if product is None:
            raise ProductNotFoundError(f"Product {product_id} not found")
        return product

    async def availability(
        self,
        product_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
        now: datetime | None = None,
    ) -> Availability:
        product = await self._product(product_id)
        snapshot = await self.reservations.list_for_product(product_id)
        return get_availability(product, snapshot, start, end, now=now)

    async def quote(
        self,
        product_id: str,
        tenure: Tenure | str,
        start: datetime | None = None,
        end: datetime | None = None,
        pricelist_name: str | None = None,
        now: datetime | None = None,
    ) -> ProductQuote:
        product = await self._product(product_id)
        price = calculate_rental_price(
            product,
            tenure,
            start,
            end,
            pricelist_name or self.config.default_pricelist,
            resolver=self.resolver,
            now=now,
        )
        snapshot = await self.reservations.list_for_product(product_id)
        availability = get_availability(product, snapshot, start, end, now=now)
        return ProductQuote(
            product_id=product.product_id,
            tenure=Tenure.parse(tenure),
            price=price.price,
            deposit=price.deposit,
            unit_price=price.unit_price,
            units=price.units,
            pricelist=price.pricelist,
            availability=availability,
        )

    async def book(
        self,
        product_id: str,
        customer_id: str,
        tenure: Tenure | str,
        start: datetime,
        end: datetime,
        pricelist_name: str | None = None,
        now: datetime | None = None,
    ) -> Reservation:
        """
        Create a reserved booking for one unit. Raises ReservationConflictError
        when every unit is already taken for the window.
        """
        window = DateRange(start, end)
        quote = await self.quote(product_id, tenure, window.start, window.end, pricelist_name, now)
        if quote.availability.status == AvailabilityStatus.RED:
            raise ReservationConflictError(
                f"Product {product_id} is not available from {window.start:%Y-%m-%d} "
                f"to {window.end:%Y-%m-%d}: {quote.availability.text}"
            )
        reservation = Reservation(
            reservation_id=f"res-{uuid.uuid4().hex[:8]}",
            product_id=product_id,
            start_at=window.start,
            end_at=window.end,
            status=ReservationStatus.RESERVED,
            customer_id=customer_id,
            price=quote.price,
            deposit=quote.deposit,
        )
        await self.reservations.add(reservation)
        logger.info(
            f"Booked {product_id} for {customer_id}: {window.start:%Y-%m-%d} -> "
            f"{window.end:%Y-%m-%d}, price {quote.price:.2f}, deposit {quote.deposit:.2f}"
        )
        return reservation
