import logging

import stripe
from fastapi import Depends, FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from studio_payments.config import Settings, get_settings
from studio_payments.database import Base, engine, get_db
from studio_payments.errors import PaymentError, ValidationError
from studio_payments.logging_config import configure_logging
from studio_payments.routes import router
from studio_payments.stripe_service import construct_event
from studio_payments.webhooks import handle_event

configure_logging(get_settings())

logger = logging.getLogger(__name__)

app = FastAPI(title="Studio Payment Service")

CORS_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]

cors_origins = list(get_settings().cors_origins)
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"] if cors_origins == ["*"] else CORS_HEADERS,
)

app.include_router(router)

Base.metadata.create_all(bind=engine)


@app.exception_handler(PaymentError)
async def payment_error_handler(request: Request, exc: PaymentError):
    logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=400, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


@app.post("/stripe-webhook")
async def stripe_webhook(
    request: Request,
    stripe_signature: str = Header(None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    payload = await request.body()

    if not stripe_signature:
        raise ValidationError("Missing stripe-signature header")
    if not settings.stripe_webhook_secret:
        raise ValidationError("Missing STRIPE_WEBHOOK_SECRET environment variable")

    try:
        event = construct_event(settings, payload, stripe_signature)
    except ValueError:
        raise ValidationError("Invalid payload")
    except stripe.SignatureVerificationError:
        raise ValidationError("Invalid signature")

    handle_event(db, event)
    return {"received": True}
