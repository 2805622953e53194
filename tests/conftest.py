"""
Pytest configuration and shared fixtures for the test suite.
"""

from datetime import datetime, timezone as dt_timezone
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from verification.models import Account, ChangeRequest, FeedbackItem, PaymentRecord
from verification.services.stores import ModelStore, Stores
from verification.services.notification_dispatcher import NotificationDispatcher
from verification.services.transition_engine import TransitionEngine


def at(year, month, day, hour=9):
    """Aware timestamp helper for ordering tests."""
    return datetime(year, month, day, hour, tzinfo=dt_timezone.utc)


class StaleReadStore(ModelStore):
    """Store whose first read returns a snapshot taken before a concurrent write."""

    def __init__(self, model, snapshot):
        super().__init__(model)
        self.snapshot = snapshot

    def get(self, pk):
        if self.snapshot is not None:
            snapshot, self.snapshot = self.snapshot, None
            return snapshot
        return super().get(pk)


class RecordingChannel:
    """Delivery channel double that keeps what it was asked to send."""

    def __init__(self, result=True):
        self.sent = []
        self.result = result

    def send(self, notification):
        self.sent.append(notification)
        return self.result


@pytest.fixture(autouse=True)
def mock_notification_publisher(mocker):
    """Never reach a real broker from tests."""
    return mocker.patch(
        "verification.rabbitmq.publisher.publish_notification", return_value=True
    )


@pytest.fixture
def channel():
    return RecordingChannel()


@pytest.fixture
def stores():
    return Stores()


@pytest.fixture
def dispatcher(stores, channel):
    return NotificationDispatcher(stores, channel=channel)


@pytest.fixture
def engine(stores, dispatcher):
    return TransitionEngine(stores, dispatcher)


@pytest.fixture
def sample_account_data():
    """Sample resident data for testing."""
    return {
        "national_id": "3201010101010001",
        "family_card_id": "3201010101010099",
        "full_name": "Budi Santoso",
        "religion": "Islam",
        "occupation": "Karyawan Swasta",
        "marital_status": "Kawin",
        "phone_number": "081234567890",
        "email": "budi@example.com",
        "home_address": "Jl. Melati No. 5, RT 03",
    }


@pytest.fixture
def create_account(db, sample_account_data):
    """Factory fixture to create a test account."""
    counter = {"n": 0}

    def _create_account(**kwargs):
        counter["n"] += 1
        data = {**sample_account_data, **kwargs}
        if "national_id" not in kwargs:
            data["national_id"] = f"32010101010{counter['n']:05d}"
        return Account.objects.create(**data)

    return _create_account


@pytest.fixture
def pending_account(create_account):
    """Account that completed its profile and waits for verification."""

    def _pending_account(**kwargs):
        values = {
            "data_complete": True,
            "verified": False,
            "id_card_photo": "uploads/ktp/budi.jpg",
            "family_card_photo": "uploads/kk/budi.jpg",
            "data_submitted_at": at(2024, 5, 10),
        }
        values.update(kwargs)
        return create_account(**values)

    return _pending_account


@pytest.fixture
def verified_account(create_account):
    def _verified_account(**kwargs):
        return create_account(data_complete=True, verified=True, **kwargs)

    return _verified_account


@pytest.fixture
def admin_account(create_account):
    return create_account(
        full_name="Pak RT", role=Account.ROLE_KETUA_RT, data_complete=True, verified=True
    )


@pytest.fixture
def create_change_request(db):
    def _create_change_request(account, **kwargs):
        values = {
            "field": "Pekerjaan",
            "old_value": account.occupation,
            "new_value": "Wiraswasta",
            "reason": "Membuka usaha sendiri",
            "submitted_at": at(2024, 5, 18),
        }
        values.update(kwargs)
        return ChangeRequest.objects.create(account=account, **values)

    return _create_change_request


@pytest.fixture
def create_payment(db):
    def _create_payment(account, **kwargs):
        values = {
            "amount": Decimal("50000"),
            "category": "Iuran Wajib & Sampah",
            "method": "TRANSFER",
            "paid_at": at(2024, 5, 19),
        }
        values.update(kwargs)
        return PaymentRecord.objects.create(account=account, **values)

    return _create_payment


@pytest.fixture
def create_feedback(db):
    def _create_feedback(account, **kwargs):
        values = {
            "text": "Lampu jalan di gang 3 mati sejak minggu lalu, mohon segera diperbaiki.",
            "submitted_at": at(2024, 5, 12),
        }
        values.update(kwargs)
        return FeedbackItem.objects.create(account=account, **values)

    return _create_feedback


@pytest.fixture
def admin_client():
    """API client carrying an administrator role claim."""
    client = APIClient()
    client.credentials(HTTP_X_ACTOR_ROLE="Ketua RT")
    return client
