import pytest

from studio_payments import payments
from studio_payments.errors import ProcessingError, StorageError, ValidationError
from studio_payments.models import Payment, PaymentStatus, Project, ProjectStatus
from studio_payments.schemas import PaymentIntentRequest


def _add_payment(db, intent_id, payment_type="initial", status="pending", project_id="p1"):
    db.add(Payment(project_id=project_id, client_id="c1",
                   stripe_payment_intent_id=intent_id, amount=10000,
                   currency="cad", status=status, payment_type=payment_type))
    db.commit()


def test_create_payment_intent_records_pending_payment(db, settings, mocker, make_intent, project):
    mocker.patch("stripe.PaymentIntent.create", return_value=make_intent(id="pi_service"))
    request = PaymentIntentRequest(amount=29900, currency="CAD", project_id="p1",
                                   client_id="c1", payment_type="maintenance")

    result = payments.create_payment_intent(db, settings, request)

    assert result.payment_intent_id == "pi_service"
    payment = db.query(Payment).filter_by(stripe_payment_intent_id="pi_service").one()
    assert payment.id == result.payment_id
    assert payment.currency == "cad"
    assert payment.payment_type == "maintenance"
    assert payment.payment_method == "stripe"


def test_create_payment_intent_validation_error(db, settings):
    with pytest.raises(ValidationError):
        payments.create_payment_intent(db, settings, PaymentIntentRequest(amount=100))


def test_confirm_payment_raises_processing_error(db, settings, mocker, make_intent):
    mocker.patch("stripe.PaymentIntent.retrieve", return_value=make_intent(status="processing"))

    with pytest.raises(ProcessingError):
        payments.confirm_payment(db, settings, "pi_123")


def test_transition_payment_only_from_pending(db, project):
    _add_payment(db, "pi_a")

    first = payments.transition_payment(db, "pi_a", PaymentStatus.CANCELED)
    processed_at = first.processed_at
    second = payments.transition_payment(db, "pi_a", PaymentStatus.SUCCEEDED, "card")

    assert second.status == "canceled"
    assert second.processed_at == processed_at
    assert second.payment_method == "stripe"


def test_transition_payment_unknown_intent(db):
    assert payments.transition_payment(db, "pi_missing", PaymentStatus.FAILED) is None


def test_get_payment_unknown(db):
    with pytest.raises(StorageError):
        payments.get_payment(db, "pi_missing")


def _set_project_status(db, project_id, status):
    db.get(Project, project_id).status = status
    db.commit()


def test_initial_payment_starts_work(db, project):
    assert payments.advance_project_status(db, project, "initial") == ProjectStatus.IN_PROGRESS
    db.expire_all()
    assert db.get(Project, project).status == "in_progress"


def test_final_payment_completes_project(db, project):
    _set_project_status(db, project, "in_progress")

    assert payments.advance_project_status(db, project, "final") == ProjectStatus.COMPLETED


def test_maintenance_payment_leaves_project_alone(db, project):
    _set_project_status(db, project, "completed")

    assert payments.advance_project_status(db, project, "maintenance") is None
    db.expire_all()
    assert db.get(Project, project).status == "completed"


def test_late_initial_payment_does_not_reopen_completed_project(db, project):
    _set_project_status(db, project, "completed")

    assert payments.advance_project_status(db, project, "initial") is None
    db.expire_all()
    assert db.get(Project, project).status == "completed"


def test_advance_project_status_missing_project(db):
    assert payments.advance_project_status(db, "nope", "initial") is None
