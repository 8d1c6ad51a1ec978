"""
Request/response models for the rental quote HTTP demo.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from .enums import AvailabilityStatus, InstallmentPlanStatus, InstallmentStatus, Tenure


class QuoteRequest(BaseModel):
    product_id: str
    tenure: Tenure = Tenure.DAY
    start_at: datetime | None = None
    end_at: datetime | None = None
    pricelist: str | None = None


class QuoteResponse(BaseModel):
    product_id: str
    tenure: Tenure
    pricelist: str
    units: int
    unit_price: float
    price: float
    deposit: float
    display_price: str
    display_deposit: str
    availability: AvailabilityStatus
    availability_text: str


class AvailabilityRequest(BaseModel):
    product_id: str
    requested_from: datetime | None = None
    requested_to: datetime | None = None


class AvailabilityResponse(BaseModel):
    product_id: str
    status: AvailabilityStatus
    text: str
    available_units: int


class LineItemIn(BaseModel):
    product_id: str
    price_per_unit: float = Field(ge=0)
    qty: int = Field(default=1, ge=0)
    tenure: Tenure = Tenure.DAY
    deposit: float = Field(default=0.0, ge=0)
    start_at: datetime | None = None
    end_at: datetime | None = None


class TotalsRequest(BaseModel):
    items: list[LineItemIn]
    discount_amount: float | None = Field(default=None, ge=0)
    promo_code: str | None = None
    tax_rate: float | None = Field(default=None, ge=0)


class TotalsResponse(BaseModel):
    subtotal: float
    discount: float
    taxes: float
    total: float
    deposit: float
    tax_rate: float
    promo_code: str | None = None


class PromoValidateRequest(BaseModel):
    code: str
    order_amount: float


class PromoValidateResponse(BaseModel):
    valid: bool
    code: str
    description: str
    discount_amount: float
    final_amount: float


class QuotationRequest(BaseModel):
    customer: dict[str, str]
    items: list[LineItemIn] = Field(min_length=1)
    notes: str = ""
    discount_amount: float | None = Field(default=None, ge=0)


class QuotationResponse(BaseModel):
    quotation_id: str
    status: str
    totals: TotalsResponse


class InstallmentPlanRequest(BaseModel):
    order_id: str
    total_amount: float = Field(gt=0)
    plan_type: str = "3-months"


class InstallmentOut(BaseModel):
    installment_id: str
    amount: float
    due_date: datetime
    status: InstallmentStatus


class InstallmentPlanResponse(BaseModel):
    plan_id: str
    order_id: str
    total_amount: float
    status: InstallmentPlanStatus
    installments: list[InstallmentOut]
