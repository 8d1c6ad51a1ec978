"""
Module: connectors.dummy_quotation_api

Provides a dummy in-memory quotation sink standing in for the ERP's order API.
"""

import asyncio
import uuid
from typing import Any

from utils.logger import get_logger

logger = get_logger(__name__)


class DummyQuotationAPI:
    """
    Dummy quotation persistence connector for demonstration purposes.
    """

    def __init__(self):
        self._quotations: dict[str, dict[str, Any]] = {}

    async def submit(self, quotation: dict[str, Any]) -> str:
        """Store a quotation payload and return its generated reference."""
        await asyncio.sleep(0)
        quotation_id = f"QUO-{uuid.uuid4().hex[:10].upper()}"
        self._quotations[quotation_id] = {**quotation, "quotation_id": quotation_id}
        logger.info(
            f"Quotation {quotation_id} received: "
            f"{len(quotation.get('items', []))} line(s), total {quotation.get('totals', {}).get('total')}"
        )
        return quotation_id

    async def get(self, quotation_id: str) -> dict[str, Any] | None:
        return self._quotations.get(quotation_id)

    @property
    def submitted(self) -> list[dict[str, Any]]:
        return list(self._quotations.values())
