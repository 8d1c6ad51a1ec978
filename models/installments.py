"""
Instalment plan records: an order total split into monthly payments.
"""

from dataclasses import dataclass, field
from datetime import datetime

from utils.dates import utc_now

from .enums import InstallmentPlanStatus, InstallmentStatus


@dataclass
class Installment:
    installment_id: str
    amount: float
    due_date: datetime
    status: InstallmentStatus = InstallmentStatus.PENDING
    paid_at: datetime | None = None
    reminder_sent: bool = False


@dataclass
class InstallmentPlan:
    plan_id: str
    order_id: str
    total_amount: float
    installments: list[Installment]
    status: InstallmentPlanStatus = InstallmentPlanStatus.ACTIVE
    created_at: datetime = field(default_factory=utc_now)

    @property
    def outstanding(self) -> float:
        return sum(i.amount for i in self.installments if i.status != InstallmentStatus.PAID)
