"""Shared fixtures for the test suite."""

import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from amlscreen.main import app
from amlscreen.models import (
    AMLConfig,
    Counterparty,
    Customer,
    PersonalInfo,
    SanctionLists,
    Transaction,
    TransactionType,
)
from amlscreen.screening.alerts import ComplianceNotifier
from amlscreen.screening.engine import AMLEngine
from amlscreen.storage.memory import MemoryHistoryStore, MemorySARStore


SANCTION_LISTS = {
    "individuals": ["SANCTIONED_PERSON_1", "SANCTIONED_PERSON_2", "VIKTOR PETROV"],
    "entities": ["SANCTIONED_COMPANY_1", "SANCTIONED_COMPANY_2"],
    "countries": ["KP", "IR", "SY"],
}


class FakeClock:
    """Manually advanced clock for window and pruning tests."""

    def __init__(self, start=datetime(2026, 2, 22, 12, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class RecordingNotifier(ComplianceNotifier):
    def __init__(self, error=None):
        self.sent = []
        self.error = error

    async def send_compliance_alert(self, recipient, subject, body):
        if self.error is not None:
            raise self.error
        self.sent.append((recipient, subject, body))


@pytest.fixture
def sanction_lists():
    return SanctionLists(**SANCTION_LISTS)


@pytest.fixture
def config():
    return AMLConfig()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def history_store():
    return MemoryHistoryStore()


@pytest.fixture
def sar_store():
    return MemorySARStore()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def engine(sanction_lists, config, history_store, sar_store, notifier, clock):
    return AMLEngine(
        sanction_lists=sanction_lists,
        config=config,
        history_store=history_store,
        sar_store=sar_store,
        notifier=notifier,
        clock=clock,
    )


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def make_transaction(
    amount="1000",
    transaction_type=TransactionType.TRANSFER,
    currency="USD",
    counterparty=None,
    description="Test transfer",
    transaction_id=None,
) -> Transaction:
    return Transaction(
        transaction_id=transaction_id or str(uuid.uuid4()),
        amount=Decimal(amount),
        currency=currency,
        transaction_type=transaction_type,
        description=description,
        counterparty=Counterparty(name=counterparty) if counterparty else None,
    )


def make_customer(
    first_name="John",
    last_name="Doe",
    nationality="US",
    customer_id="cust-1",
) -> Customer:
    return Customer(
        customer_id=customer_id,
        personal_info=PersonalInfo(
            first_name=first_name,
            last_name=last_name,
            nationality=nationality,
        ),
    )


def screening_payload(amount=1000, transaction_type="TRANSFER", nationality="US",
                      counterparty=None, customer_id="api-cust", transaction_id=None):
    transaction = {
        "transaction_id": transaction_id or str(uuid.uuid4()),
        "amount": amount,
        "currency": "USD",
        "transaction_type": transaction_type,
        "description": "API transfer",
    }
    if counterparty:
        transaction["counterparty"] = {"name": counterparty}
    return {
        "transaction": transaction,
        "customer": {
            "customer_id": customer_id,
            "personal_info": {
                "first_name": "Jane",
                "last_name": "Smith",
                "nationality": nationality,
            },
        },
    }
