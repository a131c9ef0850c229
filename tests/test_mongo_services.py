import asyncio
from datetime import date

import pytest
from pymongo.errors import DuplicateKeyError

from opsboard.models.cash_flow import PayrollCreate
from opsboard.services.payroll_service import PayrollService
from opsboard.services.reminders_service import RemindersService


class FakeCursor:
    def __init__(self, docs):
        self.docs = docs

    def sort(self, *args):
        return self

    async def to_list(self, length=None):
        return list(self.docs)


class FakeCollection:
    """Just enough of a Motor collection; the invoice_id index is unique and sparse."""

    def __init__(self, docs=None):
        self.docs = list(docs or [])

    def _matches(self, query):
        return [d for d in self.docs if all(d.get(k) == v for k, v in query.items())]

    def find(self, query=None):
        return FakeCursor(self._matches(query or {}))

    async def find_one(self, query, sort=None):
        found = self._matches(query)
        return found[0] if found else None

    async def insert_one(self, doc):
        invoice_id = doc.get("invoice_id")
        if invoice_id and self._matches({"invoice_id": invoice_id}):
            raise DuplicateKeyError("E11000 duplicate key error collection: payroll index: invoice_id_1", 11000)
        self.docs.append(doc)


@pytest.fixture
def reminders():
    service = RemindersService()
    service.collection = FakeCollection([
        {"_id": "r1", "type": "payment", "due_date": "2026-04-15", "related_id": "payment-emp-1-2026-3"},
        {"_id": "r2", "type": "payment", "due_date": "", "related_id": "payment-emp-2-2026-3"},
        {"_id": "r3", "type": "calendar", "due_date": "2026-05-01", "related_id": "calendar-x"},
    ])
    return service


def test_unreadable_reminders_are_skipped_when_listing(reminders):
    found = asyncio.run(reminders.list_reminders(type_filter="payment"))

    assert [r.id for r in found] == ["r1"]
    assert found[0].due_date == date(2026, 4, 15)


def test_unknown_reminder_type_does_not_break_queries(reminders):
    found = asyncio.run(reminders.query_reminders())

    assert [r.id for r in found] == ["r1"]


def make_payroll(invoice_id="inv-1"):
    return PayrollCreate(
        month="January",
        date="2026-01-01",
        name="Acme",
        invoice_id=invoice_id,
        invoice_number=f"INV-{invoice_id}",
        amount_excl_gst=100.0,
        status="paid",
    )


def test_second_payroll_for_an_invoice_returns_the_first():
    service = PayrollService()
    service.collection = FakeCollection()

    first = asyncio.run(service.create_payroll_record(make_payroll(), today=date(2026, 2, 1)))
    second = asyncio.run(service.create_payroll_record(make_payroll(), today=date(2026, 2, 1)))

    assert second == first
    assert len(service.collection.docs) == 1


def test_duplicate_key_without_invoice_is_raised():
    service = PayrollService()
    collection = FakeCollection()

    async def always_duplicate(doc):
        raise DuplicateKeyError("E11000 duplicate key error", 11000)

    collection.insert_one = always_duplicate
    service.collection = collection

    with pytest.raises(DuplicateKeyError):
        asyncio.run(service.create_payroll_record(make_payroll(invoice_id=None), today=date(2026, 2, 1)))
