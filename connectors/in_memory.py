"""
Module: connectors.in_memory

In-memory product catalog and reservation store, used by tests and demos in
place of the ERP.
"""

import copy
import uuid

from models.errors import ReservationNotFoundError
from models.rental import ProductPriceInput, Reservation


class InMemoryProductRepository:
    """
    Product catalog held in a dict keyed by product id.
    """

    def __init__(self, products: list[ProductPriceInput] | None = None):
        self._products: dict[str, ProductPriceInput] = {}
        for product in products or []:
            self.put(product)

    def put(self, product: ProductPriceInput) -> None:
        self._products[product.product_id] = product

    async def get_product(self, product_id: str) -> ProductPriceInput | None:
        return self._products.get(product_id)

    async def list_products(self) -> list[ProductPriceInput]:
        return list(self._products.values())


class InMemoryReservationRepository:
    """
    Reservation store. Returns copies so callers work on a snapshot; changes
    only land through `add` and `save`. Nothing is ever deleted.
    """

    def __init__(self, reservations: list[Reservation] | None = None):
        self._reservations: dict[str, Reservation] = {}
        for reservation in reservations or []:
            self._reservations[reservation.reservation_id] = copy.deepcopy(reservation)

    @staticmethod
    def new_id() -> str:
        return f"res-{uuid.uuid4().hex[:8]}"

    async def get(self, reservation_id: str) -> Reservation | None:
        reservation = self._reservations.get(reservation_id)
        return copy.deepcopy(reservation) if reservation else None

    async def list_for_product(self, product_id: str) -> list[Reservation]:
        return [
            copy.deepcopy(r) for r in self._reservations.values() if r.product_id == product_id
        ]

    async def list_all(self) -> list[Reservation]:
        return [copy.deepcopy(r) for r in self._reservations.values()]

    async def add(self, reservation: Reservation) -> Reservation:
        if reservation.reservation_id in self._reservations:
            raise ValueError(f"Reservation {reservation.reservation_id} already exists")
        self._reservations[reservation.reservation_id] = copy.deepcopy(reservation)
        return reservation

    async def save(self, reservation: Reservation) -> Reservation:
        if reservation.reservation_id not in self._reservations:
            raise ReservationNotFoundError(f"Reservation {reservation.reservation_id} not found")
        self._reservations[reservation.reservation_id] = copy.deepcopy(reservation)
        return reservation
