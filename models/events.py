"""
Data models for reservation lifecycle events (the audit trail).
"""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from utils.dates import utc_now

from .enums import ReservationStatus


class ReservationEvent(BaseModel):
    """A single status change (or in-place change, e.g. extension) of a reservation"""

    event_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    reservation_id: str
    from_status: ReservationStatus
    to_status: ReservationStatus
    timestamp: datetime = Field(default_factory=utc_now)
    metadata: dict[str, Any] = Field(default_factory=dict)
