"""
Shared fixtures for the Factory Ledger tests.

Everything runs against InMemoryStore or tmp_path; no test touches the
real data directory.
"""

import base64
from datetime import date
from decimal import Decimal

import pytest

from factory_ledger.config import get_settings
from factory_ledger.ledger import ExpenseLedger
from factory_ledger.models import Attachment, Expense
from factory_ledger.services.storage import InMemoryStore, StorageError


PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 24


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch, tmp_path):
    """Reload settings for each test and keep the data dir inside tmp_path."""
    monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path / "data"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class FailingStore(InMemoryStore):
    """InMemoryStore that counts saves and can be told to fail them."""

    def __init__(self, initial=None):
        self.fail_writes = False
        self.save_count = 0
        super().__init__(initial)
        self.save_count = 0

    def save(self, key, value):
        if self.fail_writes:
            raise StorageError(f"Simulated write failure for {key}")
        super().save(key, value)
        self.save_count += 1


@pytest.fixture
def store():
    return FailingStore()


@pytest.fixture
def ledger(store):
    return ExpenseLedger(store).init()


@pytest.fixture
def valid_draft():
    """Form input that passes validation."""
    return {
        "date": "2024-03-15",
        "factory": "investments",
        "category": "raw-materials",
        "description": "Cotton fabric rolls",
        "amount": "1250.50",
        "vendor": "Swazi Textiles Supply",
        "reference": "INV-0042",
    }


def _attachment(name="receipt.png", mime_type="image/png", content=PNG_BYTES):
    return Attachment(
        name=name,
        mime_type=mime_type,
        size_bytes=len(content),
        encoded_data=f"data:{mime_type};base64,{base64.b64encode(content).decode('ascii')}",
    )


def _expense(
    amount="100.00",
    category="labor",
    factory_id="investments",
    on=date(2024, 3, 10),
    attachments=None,
    vendor=None,
    description="Test expense",
):
    return Expense(
        date=on,
        factory_id=factory_id,
        category=category,
        description=description,
        amount=Decimal(amount),
        vendor=vendor,
        attachments=attachments or [],
    )


@pytest.fixture
def make_attachment():
    """Factory for encoded PNG attachments."""
    return _attachment


@pytest.fixture
def make_expense():
    """Factory for valid Expense records."""
    return _expense
