"""
Stripe webhook event handling.

Keeps the payments table in step with Stripe when the browser never calls
/confirm-payment, and moves the project forward once it is paid.
"""
import logging

from sqlalchemy.orm import Session

from studio_payments import stripe_service
from studio_payments.models import PaymentStatus
from studio_payments.payments import advance_project_status, transition_payment

logger = logging.getLogger(__name__)


def handle_payment_succeeded(db: Session, intent) -> None:
    payment = transition_payment(
        db,
        intent["id"],
        PaymentStatus.SUCCEEDED,
        stripe_service.payment_method_label(intent.get("payment_method_types")),
    )
    if payment is None:
        logger.warning("No payment recorded for succeeded intent %s", intent["id"])
        return
    if payment.status == PaymentStatus.SUCCEEDED.value:
        advance_project_status(db, payment.project_id, payment.payment_type)


def handle_payment_failed(db: Session, intent) -> None:
    if transition_payment(db, intent["id"], PaymentStatus.FAILED) is None:
        logger.warning("No payment recorded for failed intent %s", intent["id"])


def handle_payment_canceled(db: Session, intent) -> None:
    if transition_payment(db, intent["id"], PaymentStatus.CANCELED) is None:
        logger.warning("No payment recorded for canceled intent %s", intent["id"])


HANDLERS = {
    "payment_intent.succeeded": handle_payment_succeeded,
    "payment_intent.payment_failed": handle_payment_failed,
    "payment_intent.canceled": handle_payment_canceled,
}


def handle_event(db: Session, event) -> bool:
    """Route a verified event to its handler. Returns False for unhandled types."""
    event_type = event["type"]
    logger.info("Received webhook event: %s %s", event_type, event.get("id"))

    handler = HANDLERS.get(event_type)
    if handler is None:
        logger.info("Unhandled event type: %s", event_type)
        return False

    handler(db, event["data"]["object"])
    return True
