import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from studio_payments.database import Base


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELED = "canceled"


class PaymentType(str, enum.Enum):
    INITIAL = "initial"
    FINAL = "final"
    MAINTENANCE = "maintenance"


class ProjectStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


def _uuid():
    return str(uuid.uuid4())


def utcnow():
    return datetime.now(timezone.utc)


class Project(Base):
    __tablename__ = "projects"

    id = Column(String, primary_key=True, default=_uuid)
    client_id = Column(String, index=True)
    title = Column(String)
    status = Column(String, default=ProjectStatus.PENDING.value)
    price = Column(Integer)                        # minor units
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow)


class Payment(Base):
    __tablename__ = "payments"

    id = Column(String, primary_key=True, default=_uuid)
    project_id = Column(String, ForeignKey("projects.id"), index=True, nullable=False)
    client_id = Column(String, index=True, nullable=False)
    stripe_payment_intent_id = Column(String, unique=True, index=True, nullable=False)
    amount = Column(Integer, nullable=False)       # minor units
    currency = Column(String, nullable=False)
    status = Column(String, default=PaymentStatus.PENDING.value, nullable=False)
    payment_type = Column(String, nullable=False)  # initial | final | maintenance
    payment_method = Column(String, default="stripe")
    created_at = Column(DateTime(timezone=True), default=utcnow)
    processed_at = Column(DateTime(timezone=True), nullable=True)
