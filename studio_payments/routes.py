import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from studio_payments import payments, pricing
from studio_payments.auth import verify_token
from studio_payments.config import Settings, get_settings
from studio_payments.database import get_db
from studio_payments.schemas import (
    ConfirmPaymentRequest,
    ConfirmPaymentResponse,
    PaymentIntentRequest,
    PaymentIntentResponse,
    PaymentOut,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/create-payment-intent", response_model=PaymentIntentResponse)
def create_payment_intent_api(
    request: PaymentIntentRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    claims: dict = Depends(verify_token),
):
    logger.debug("create-payment-intent called by %s", claims.get("sub"))
    return payments.create_payment_intent(db, settings, request)


@router.post("/confirm-payment", response_model=ConfirmPaymentResponse)
def confirm_payment_api(
    request: ConfirmPaymentRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    claims: dict = Depends(verify_token),
):
    logger.debug("confirm-payment called by %s", claims.get("sub"))
    return payments.confirm_payment(db, settings, request.payment_intent_id)


@router.get("/payments/{payment_intent_id}", response_model=PaymentOut)
def get_payment_api(
    payment_intent_id: str,
    db: Session = Depends(get_db),
    claims: dict = Depends(verify_token),
):
    logger.debug("payment lookup by %s", claims.get("sub"))
    return PaymentOut.model_validate(payments.get_payment(db, payment_intent_id))


@router.get("/payment-amounts")
def payment_amounts_api(
    price: int = Query(..., gt=0),
    option: str = "full",
):
    """Taxed total for a project price and how it splits into initial/final payments."""
    total = pricing.total_with_tax(price)
    return dict(pricing.calculate_payment_amounts(total, option), totalWithTax=total)
