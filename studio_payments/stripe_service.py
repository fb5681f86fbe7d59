import stripe

from studio_payments.config import Settings


def _request_options(settings: Settings) -> dict:
    return {
        "api_key": settings.stripe_secret_key,
        "stripe_version": settings.stripe_api_version,
    }


def create_payment_intent(settings: Settings, amount: int, currency: str, metadata: dict):
    return stripe.PaymentIntent.create(
        amount=amount,
        currency=currency,
        automatic_payment_methods={"enabled": True},
        metadata=metadata,
        **_request_options(settings)
    )


def retrieve_payment_intent(settings: Settings, payment_intent_id: str):
    return stripe.PaymentIntent.retrieve(payment_intent_id, **_request_options(settings))


def construct_event(settings: Settings, payload: bytes, signature: str):
    return stripe.Webhook.construct_event(
        payload,
        signature,
        settings.stripe_webhook_secret
    )


def payment_method_label(payment_method_types) -> str:
    if payment_method_types:
        return payment_method_types[0]
    return "card"
