"""
FastAPI application exposing the rental pricing and availability engine.

Uses an in-memory catalog seeded with a few products; in the storefront the
repositories are backed by the ERP.
Run with: uvicorn demos.rental_quote_api_demo:app --reload
"""

from datetime import datetime, timedelta

from fastapi import FastAPI, HTTPException

from config.config import load_pricing_config
from connectors.dummy_quotation_api import DummyQuotationAPI
from connectors.in_memory import InMemoryProductRepository, InMemoryReservationRepository
from engine.cart import Cart
from engine.installments import create_installment_plan
from engine.promotions import PromoCatalog
from engine.quote_service import RentalQuoteService
from engine.totals import compute_totals
from models.api import (
    AvailabilityRequest,
    AvailabilityResponse,
    InstallmentOut,
    InstallmentPlanRequest,
    InstallmentPlanResponse,
    PromoValidateRequest,
    PromoValidateResponse,
    QuotationRequest,
    QuotationResponse,
    QuoteRequest,
    QuoteResponse,
    TotalsRequest,
    TotalsResponse,
)
from models.enums import ReservationStatus
from models.errors import ProductNotFoundError, RentalEngineError
from models.installments import InstallmentPlan
from models.rental import LineItem, ProductPriceInput, Reservation
from utils.dates import utc_now
from utils.logger import get_logger
from utils.money import format_currency

logger = get_logger("rental-quote-api")

pricing_config = load_pricing_config()

SAMPLE_PRODUCTS = [
    ProductPriceInput("sofa-3-seater", 11433.80, qty_on_hand=3, name="3-Seater Fabric Sofa"),
    ProductPriceInput("fridge-double-door", 32000.0, qty_on_hand=2, name="Double Door Refrigerator"),
    ProductPriceInput("treadmill-pro", 45999.0, qty_on_hand=1, name="Motorised Treadmill"),
    ProductPriceInput("crib-classic", 8999.0, qty_on_hand=0, name="Classic Baby Crib"),
]


def _sample_reservations(now: datetime) -> list[Reservation]:
    return [
        Reservation(
            reservation_id="res-1",
            product_id="treadmill-pro",
            start_at=now + timedelta(days=2),
            end_at=now + timedelta(days=5),
            status=ReservationStatus.RESERVED,
            customer_id="user-1",
            price=1000,
        ),
    ]


products = InMemoryProductRepository(SAMPLE_PRODUCTS)
reservations = InMemoryReservationRepository(_sample_reservations(utc_now()))
quote_service = RentalQuoteService(products, reservations, config=pricing_config)
promo_catalog = PromoCatalog()
quotation_api = DummyQuotationAPI()
installment_plans: dict[str, InstallmentPlan] = {}

app = FastAPI(title="RentKaro Rental Quote Service")


def _to_http_error(exc: RentalEngineError) -> HTTPException:
    if isinstance(exc, ProductNotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))


@app.get("/pricelists")
async def list_pricelists() -> dict[str, list[str]]:
    return {"pricelists": quote_service.resolver.names()}


@app.post("/quote", response_model=QuoteResponse)
async def quote(request: QuoteRequest) -> QuoteResponse:
    try:
        result = await quote_service.quote(
            request.product_id,
            request.tenure,
            request.start_at,
            request.end_at,
            request.pricelist,
        )
    except RentalEngineError as e:
        logger.warning(f"Quote failed for {request.product_id}: {e}")
        raise _to_http_error(e) from e
    currency = pricing_config.currency_symbol
    return QuoteResponse(
        product_id=result.product_id,
        tenure=result.tenure,
        pricelist=result.pricelist,
        units=result.units,
        unit_price=result.unit_price,
        price=result.price,
        deposit=result.deposit,
        display_price=format_currency(result.price, currency),
        display_deposit=format_currency(result.deposit, currency),
        availability=result.availability.status,
        availability_text=result.availability.text,
    )


@app.post("/availability", response_model=AvailabilityResponse)
async def availability(request: AvailabilityRequest) -> AvailabilityResponse:
    try:
        result = await quote_service.availability(
            request.product_id, request.requested_from, request.requested_to
        )
    except RentalEngineError as e:
        raise _to_http_error(e) from e
    return AvailabilityResponse(
        product_id=request.product_id,
        status=result.status,
        text=result.text,
        available_units=result.available_units,
    )


@app.post("/totals", response_model=TotalsResponse)
async def totals(request: TotalsRequest) -> TotalsResponse:
    try:
        items = [LineItem(**item.model_dump()) for item in request.items]
        discount = request.discount_amount
        if request.promo_code:
            subtotal = sum(item.amount for item in items)
            discount = promo_catalog.validate(request.promo_code, subtotal)
        tax_rate = pricing_config.tax_rate if request.tax_rate is None else request.tax_rate
        result = compute_totals(items, discount, tax_rate)
    except RentalEngineError as e:
        raise _to_http_error(e) from e
    return TotalsResponse(**result.as_dict(), promo_code=request.promo_code)


@app.post("/promo/validate", response_model=PromoValidateResponse)
async def validate_promo(request: PromoValidateRequest) -> PromoValidateResponse:
    try:
        applied = promo_catalog.validate(request.code, request.order_amount)
    except RentalEngineError as e:
        raise _to_http_error(e) from e
    return PromoValidateResponse(
        valid=True,
        code=applied.promo.code,
        description=applied.promo.description,
        discount_amount=applied.discount_amount,
        final_amount=applied.final_amount,
    )


@app.post("/quotations", response_model=QuotationResponse)
async def create_quotation(request: QuotationRequest) -> QuotationResponse:
    cart = Cart(pricing_config)
    try:
        for item in request.items:
            cart.add_item(LineItem(**item.model_dump()))
        payload = cart.to_quotation(request.customer, request.notes, request.discount_amount)
    except RentalEngineError as e:
        raise _to_http_error(e) from e
    quotation_id = await quotation_api.submit(payload)
    return QuotationResponse(
        quotation_id=quotation_id,
        status=payload["status"],
        totals=TotalsResponse(**payload["totals"]),
    )


def _plan_response(plan: InstallmentPlan) -> InstallmentPlanResponse:
    return InstallmentPlanResponse(
        plan_id=plan.plan_id,
        order_id=plan.order_id,
        total_amount=plan.total_amount,
        status=plan.status,
        installments=[
            InstallmentOut(
                installment_id=i.installment_id,
                amount=i.amount,
                due_date=i.due_date,
                status=i.status,
            )
            for i in plan.installments
        ],
    )


@app.post("/installments", response_model=InstallmentPlanResponse, status_code=201)
async def create_installments(request: InstallmentPlanRequest) -> InstallmentPlanResponse:
    try:
        plan = create_installment_plan(request.order_id, request.total_amount, request.plan_type)
    except RentalEngineError as e:
        raise _to_http_error(e) from e
    installment_plans[plan.order_id] = plan
    return _plan_response(plan)


@app.get("/installments/{order_id}", response_model=InstallmentPlanResponse)
async def get_installments(order_id: str) -> InstallmentPlanResponse:
    plan = installment_plans.get(order_id)
    if plan is None:
        raise HTTPException(status_code=404, detail="Plan not found")
    return _plan_response(plan)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
