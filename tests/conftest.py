import os
from pathlib import Path

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_123")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from studio_payments.auth import verify_token
from studio_payments.config import Settings, get_settings
from studio_payments.database import Base, get_db
from studio_payments.main import app as fastapi_app
from studio_payments.models import Payment, Project

TEST_DB_PATH = Path("test_payments.db")
SQLALCHEMY_DATABASE_URL = f"sqlite:///./{TEST_DB_PATH}"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={
                       "check_same_thread": False})
TestingSessionLocal = sessionmaker(
    autocommit=False, autoflush=False, bind=engine)

TEST_SETTINGS = Settings(
    database_url=SQLALCHEMY_DATABASE_URL,
    stripe_secret_key="sk_test_123",
    stripe_webhook_secret="whsec_test",
    supabase_jwt_secret="test-jwt-secret",
)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session", autouse=True)
def remove_test_db():
    yield
    engine.dispose()
    TEST_DB_PATH.unlink(missing_ok=True)


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def settings():
    return TEST_SETTINGS


@pytest.fixture
def db():
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture
def client():
    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[get_settings] = lambda: TEST_SETTINGS
    # Bypass auth verification for tests
    fastapi_app.dependency_overrides[verify_token] = lambda: {"sub": "client-1"}

    with TestClient(fastapi_app) as c:
        yield c

    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def project():
    db = TestingSessionLocal()
    p = Project(id="p1", client_id="c1", title="Bakery website",
                status="confirmed", price=29900)
    db.add(p)
    db.commit()
    db.close()
    return "p1"


@pytest.fixture
def make_intent(mocker):
    def _make(**attrs):
        values = {
            "id": "pi_123",
            "client_secret": "pi_123_secret_456",
            "amount": 29900,
            "currency": "cad",
            "status": "requires_payment_method",
            "payment_method_types": ["card"],
        }
        values.update(attrs)
        return mocker.Mock(**values)
    return _make


@pytest.fixture
def pending_payment(project):
    db = TestingSessionLocal()
    p = Payment(id="pay_1", project_id=project, client_id="c1",
                stripe_payment_intent_id="pi_123", amount=29900,
                currency="cad", status="pending", payment_type="initial")
    db.add(p)
    db.commit()
    db.close()
    return "pi_123"
