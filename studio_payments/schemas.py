from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PaymentIntentRequest(CamelModel):
    amount: Optional[float] = None
    currency: Optional[str] = None
    project_id: Optional[str] = None
    client_id: Optional[str] = None
    payment_type: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class PaymentIntentResponse(CamelModel):
    client_secret: Optional[str]
    payment_intent_id: str
    amount: int
    currency: str
    status: str
    payment_id: str


class ConfirmPaymentRequest(CamelModel):
    payment_intent_id: Optional[str] = None


class ConfirmPaymentResponse(CamelModel):
    success: bool = True
    payment_id: str
    status: str
    amount: int
    processed_at: Optional[datetime]


class PaymentOut(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    client_id: str
    stripe_payment_intent_id: str
    amount: int
    currency: str
    status: str
    payment_type: str
    payment_method: Optional[str]
    created_at: Optional[datetime]
    processed_at: Optional[datetime]
