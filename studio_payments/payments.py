import logging

import stripe
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from studio_payments import stripe_service
from studio_payments.config import Settings
from studio_payments.errors import ProcessingError, ProcessorError, StorageError, ValidationError
from studio_payments.models import Payment, PaymentStatus, PaymentType, Project, ProjectStatus, utcnow
from studio_payments.pricing import round_half_up
from studio_payments.schemas import ConfirmPaymentResponse, PaymentIntentRequest, PaymentIntentResponse

logger = logging.getLogger(__name__)


def create_payment_intent(
    db: Session,
    settings: Settings,
    request: PaymentIntentRequest,
) -> PaymentIntentResponse:
    """
    Create a Stripe PaymentIntent and record it as a pending payment.

    The caller receives the client secret needed to collect the payment
    in the browser, together with the id of the new payment row.
    """
    logger.info(
        "Creating payment intent: amount=%s currency=%s project=%s client=%s type=%s",
        request.amount, request.currency, request.project_id,
        request.client_id, request.payment_type
    )

    required = (
        ("amount", request.amount),
        ("projectId", request.project_id),
        ("clientId", request.client_id),
        ("paymentType", request.payment_type),
    )
    missing = [name for name, value in required if not value]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    try:
        payment_type = PaymentType(request.payment_type)
    except ValueError:
        raise ValidationError(
            f"Invalid paymentType: {request.payment_type}. "
            f"Expected one of: {', '.join(t.value for t in PaymentType)}"
        )

    amount = round_half_up(request.amount)
    if amount <= 0:
        raise ValidationError("amount must be a positive integer")

    currency = (request.currency or settings.default_currency).lower()
    metadata = {
        **(request.metadata or {}),
        "projectId": request.project_id,
        "clientId": request.client_id,
        "paymentType": payment_type.value,
    }

    try:
        intent = stripe_service.create_payment_intent(settings, amount, currency, metadata)
    except stripe.StripeError as exc:
        logger.error("Stripe rejected payment intent for project %s", request.project_id, exc_info=exc)
        raise ProcessorError(f"Payment processor error: {exc}") from exc

    logger.info("Stripe PaymentIntent created: %s", intent.id)

    payment = Payment(
        project_id=request.project_id,
        client_id=request.client_id,
        stripe_payment_intent_id=intent.id,
        amount=amount,
        currency=currency,
        status=PaymentStatus.PENDING.value,
        payment_type=payment_type.value,
        payment_method="stripe",
    )

    try:
        db.add(payment)
        db.commit()
        db.refresh(payment)
    except SQLAlchemyError as exc:
        db.rollback()
        # The intent exists at Stripe without a row; it is never confirmed.
        logger.error("Could not record payment for intent %s", intent.id, exc_info=exc)
        raise StorageError("Could not record payment") from exc

    logger.info("Payment record created: %s", payment.id)

    return PaymentIntentResponse(
        client_secret=intent.client_secret,
        payment_intent_id=intent.id,
        amount=intent.amount,
        currency=intent.currency,
        status=intent.status,
        payment_id=payment.id,
    )


def transition_payment(db: Session, payment_intent_id: str, status: PaymentStatus, payment_method=None):
    """
    Move a pending payment to a terminal status.

    The update only matches rows still in ``pending``, so concurrent callers
    cannot overwrite each other and a terminal status is never reversed.
    Returns the stored payment (whatever its status) or None.
    """
    values = {Payment.status: status.value, Payment.processed_at: utcnow()}
    if payment_method:
        values[Payment.payment_method] = payment_method

    try:
        updated = (
            db.query(Payment)
            .filter(
                Payment.stripe_payment_intent_id == payment_intent_id,
                Payment.status == PaymentStatus.PENDING.value,
            )
            .update(values, synchronize_session=False)
        )
        db.commit()
        payment = db.query(Payment).filter_by(stripe_payment_intent_id=payment_intent_id).first()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Could not update payment for intent %s", payment_intent_id, exc_info=exc)
        raise StorageError("Could not update payment") from exc

    if payment is not None and not updated:
        logger.info("Payment %s already %s, left unchanged", payment.id, payment.status)

    return payment


def confirm_payment(db: Session, settings: Settings, payment_intent_id: str) -> ConfirmPaymentResponse:
    """Check the intent at Stripe and mark the stored payment as succeeded."""
    if not payment_intent_id:
        raise ValidationError("Missing required field: paymentIntentId")

    logger.info("Confirming payment: %s", payment_intent_id)

    try:
        intent = stripe_service.retrieve_payment_intent(settings, payment_intent_id)
    except stripe.StripeError as exc:
        logger.error("Could not retrieve intent %s", payment_intent_id, exc_info=exc)
        raise ProcessorError(f"Payment processor error: {exc}") from exc

    logger.info("Payment intent %s status: %s", payment_intent_id, intent.status)

    if intent.status != "succeeded":
        raise ProcessingError(f"Payment not successful. Status: {intent.status}")

    payment = transition_payment(
        db,
        payment_intent_id,
        PaymentStatus.SUCCEEDED,
        stripe_service.payment_method_label(intent.payment_method_types),
    )
    if payment is None:
        raise StorageError(f"No payment found for intent {payment_intent_id}")
    if payment.status != PaymentStatus.SUCCEEDED.value:
        raise StorageError(f"Payment {payment.id} is already {payment.status}")

    logger.info("Payment confirmed and database updated: %s", payment.id)

    return ConfirmPaymentResponse(
        success=True,
        payment_id=payment.id,
        status=payment.status,
        amount=payment.amount,
        processed_at=payment.processed_at,
    )


def get_payment(db: Session, payment_intent_id: str) -> Payment:
    try:
        payment = db.query(Payment).filter_by(stripe_payment_intent_id=payment_intent_id).first()
    except SQLAlchemyError as exc:
        logger.error("Could not load payment for intent %s", payment_intent_id, exc_info=exc)
        raise StorageError("Could not load payment") from exc

    if payment is None:
        raise StorageError(f"No payment found for intent {payment_intent_id}")
    return payment


PROJECT_STATUS_ORDER = [
    ProjectStatus.PENDING.value,
    ProjectStatus.CONFIRMED.value,
    ProjectStatus.IN_PROGRESS.value,
    ProjectStatus.COMPLETED.value,
]

PROJECT_STATUS_AFTER_PAYMENT = {
    PaymentType.INITIAL.value: ProjectStatus.IN_PROGRESS,
    PaymentType.FINAL.value: ProjectStatus.COMPLETED,
}


def advance_project_status(db: Session, project_id: str, payment_type: str):
    """
    Move a project forward once one of its payments has succeeded.

    An initial payment starts work, a final one completes the project.
    Maintenance payments leave the project alone, and a project is never
    moved back to an earlier status. Returns the new status, or None when
    the project was not changed.
    """
    new_status = PROJECT_STATUS_AFTER_PAYMENT.get(payment_type)
    if new_status is None:
        return None

    try:
        project = db.get(Project, project_id)
        if project is None:
            logger.warning("Project %s not found, status not updated", project_id)
            return None

        current = project.status
        if current in PROJECT_STATUS_ORDER and (
            PROJECT_STATUS_ORDER.index(current) >= PROJECT_STATUS_ORDER.index(new_status.value)
        ):
            logger.info("Project %s already %s, left unchanged", project_id, current)
            return None

        project.status = new_status.value
        project.updated_at = utcnow()
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Could not update status of project %s", project_id, exc_info=exc)
        raise StorageError("Could not update project status") from exc

    logger.info("Project %s status updated to %s", project_id, new_status.value)
    return new_status
