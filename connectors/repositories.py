"""
Module: connectors.repositories

Repository interfaces the engine's services are given instead of reaching for
global state. Any catalog or reservation store (ERP-backed or in-memory) that
matches these protocols can be injected.
"""

from typing import Protocol

from models.rental import ProductPriceInput, Reservation


class ProductRepository(Protocol):
    async def get_product(self, product_id: str) -> ProductPriceInput | None: ...

    async def list_products(self) -> list[ProductPriceInput]: ...


class ReservationRepository(Protocol):
    async def get(self, reservation_id: str) -> Reservation | None: ...

    async def list_for_product(self, product_id: str) -> list[Reservation]: ...

    async def list_all(self) -> list[Reservation]: ...

    async def add(self, reservation: Reservation) -> Reservation: ...

    async def save(self, reservation: Reservation) -> Reservation: ...
