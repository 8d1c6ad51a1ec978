"""
Instalment plans for paying an order total over two or three months.

The first instalments are the total divided by the count, rounded up to
whole rupees; the last one takes the remainder. Instalments fall due
monthly, starting one month after the plan is created.
"""

import math
import uuid
from datetime import datetime

from dateutil.relativedelta import relativedelta

from models.enums import InstallmentPlanStatus, InstallmentStatus
from models.errors import InstallmentNotFoundError, InvalidInstallmentPlanError
from models.installments import Installment, InstallmentPlan
from utils.dates import parse_timestamp, utc_now
from utils.logger import get_logger
from utils.money import round_money

logger = get_logger(__name__)

PLAN_TYPES: dict[str, int] = {"2-months": 2, "3-months": 3}


def split_amount(total_amount: float, count: int) -> list[float]:
    """Split a total into `count` parts; the last part absorbs the rounding."""
    if count < 1:
        raise InvalidInstallmentPlanError(f"Instalment count must be positive, got {count}")
    if total_amount <= 0:
        raise InvalidInstallmentPlanError(f"Order total must be positive, got {total_amount}")
    per_installment = math.ceil(total_amount / count)
    last = round_money(total_amount - per_installment * (count - 1))
    if last <= 0:
        raise InvalidInstallmentPlanError(
            f"Order total {total_amount} is too small to split into {count} instalments"
        )
    return [float(per_installment)] * (count - 1) + [last]


def create_installment_plan(
    order_id: str,
    total_amount: float,
    plan_type: str,
    now: datetime | str | None = None,
) -> InstallmentPlan:
    if plan_type not in PLAN_TYPES:
        raise InvalidInstallmentPlanError(f"Invalid plan type {plan_type!r}")
    created_at = parse_timestamp(now) if now is not None else utc_now()
    amounts = split_amount(total_amount, PLAN_TYPES[plan_type])
    plan = InstallmentPlan(
        plan_id=f"PLAN-{uuid.uuid4().hex[:10].upper()}",
        order_id=order_id,
        total_amount=total_amount,
        installments=[
            Installment(
                installment_id=f"INST-{uuid.uuid4().hex[:10].upper()}",
                amount=amount,
                due_date=created_at + relativedelta(months=index + 1),
            )
            for index, amount in enumerate(amounts)
        ],
        created_at=created_at,
    )
    logger.info(
        f"Instalment plan {plan.plan_id} for order {order_id}: "
        f"{len(amounts)} x {amounts[0]:.2f} (last {amounts[-1]:.2f})"
    )
    return plan


def mark_installment_paid(
    plan: InstallmentPlan, installment_id: str, paid_at: datetime | str | None = None
) -> Installment:
    """Record a payment; the plan completes once every instalment is paid."""
    for installment in plan.installments:
        if installment.installment_id == installment_id:
            break
    else:
        raise InstallmentNotFoundError(f"Installment {installment_id} not found")
    installment.status = InstallmentStatus.PAID
    installment.paid_at = parse_timestamp(paid_at) if paid_at is not None else utc_now()
    if all(i.status == InstallmentStatus.PAID for i in plan.installments):
        plan.status = InstallmentPlanStatus.COMPLETED
        logger.info(f"Instalment plan {plan.plan_id} completed")
    return installment


def mark_overdue_installments(
    plan: InstallmentPlan, now: datetime | str | None = None
) -> list[Installment]:
    """Flag pending instalments whose due date has passed. Returns the ones changed."""
    at = parse_timestamp(now) if now is not None else utc_now()
    overdue = [
        i for i in plan.installments if i.status == InstallmentStatus.PENDING and i.due_date < at
    ]
    for installment in overdue:
        installment.status = InstallmentStatus.OVERDUE
    if overdue:
        logger.warning(f"Instalment plan {plan.plan_id}: {len(overdue)} instalment(s) overdue")
    return overdue
