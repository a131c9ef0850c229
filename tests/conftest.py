import os

os.environ.setdefault("MONGO_URI", "mongodb://localhost:27017")
os.environ.setdefault("MONGO_DB_NAME", "opsboard_test")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

from datetime import date
from typing import Dict, List, Optional

import pytest

from opsboard.models.cash_flow import Invoice, PayrollRecord
from opsboard.models.employees import Employee, UserAccount, WorkRecord
from opsboard.models.reminders import Reminder


class FakeReminderStore:
    def __init__(self):
        self.reminders: Dict[str, Reminder] = {}
        self._next_id = 1
        self.fail_deletes = set()
        self.created = 0

    def seed(self, **fields) -> Reminder:
        reminder_id = fields.pop("id", None) or self._new_id()
        fields.setdefault("type", "payment")
        reminder = Reminder(_id=reminder_id, **fields)
        self.reminders[reminder_id] = reminder
        return reminder

    def _new_id(self) -> str:
        reminder_id = f"r{self._next_id:03d}"
        self._next_id += 1
        return reminder_id

    def by_related_id(self, related_id: str) -> List[Reminder]:
        return [r for r in self.reminders.values() if r.related_id == related_id]

    async def list_reminders(self, type_filter=None):
        found = [r for r in self.reminders.values() if type_filter is None or r.type == type_filter]
        return sorted(found, key=lambda r: r.due_date)

    async def create_reminder(self, reminder):
        reminder_id = self._new_id()
        self.reminders[reminder_id] = Reminder(_id=reminder_id, **reminder.model_dump())
        self.created += 1
        return reminder_id

    async def update_reminder(self, reminder_id, fields):
        self.reminders[reminder_id] = self.reminders[reminder_id].model_copy(update=fields)

    async def delete_reminder(self, reminder_id):
        if reminder_id in self.fail_deletes:
            raise RuntimeError("store unavailable")
        return self.reminders.pop(reminder_id, None) is not None


class FakeDirectory:
    def __init__(self, subjects=None, accounts=None, work_records=None):
        self.subjects: List[Employee] = subjects or []
        self.accounts: List[UserAccount] = accounts or []
        self.work_records: Dict[str, List[WorkRecord]] = work_records or {}
        self.failing_accounts = set()
        self.fail_listing = False

    async def list_subjects(self):
        if self.fail_listing:
            raise RuntimeError("employees collection unreachable")
        return list(self.subjects)

    async def list_accounts(self):
        return list(self.accounts)

    async def list_work_records_for_subject(self, account_id):
        if account_id in self.failing_accounts:
            raise RuntimeError(f"work records unavailable for {account_id}")
        return list(self.work_records.get(account_id, []))


class FakeInvoiceStore:
    def __init__(self, invoices=None):
        self.invoices: Dict[str, Invoice] = {i.id: i for i in (invoices or [])}
        self.updates = []
        self.failing_updates = set()
        self.fail_listing = False

    async def get_invoice(self, invoice_id):
        return self.invoices.get(invoice_id)

    async def list_invoices(self):
        if self.fail_listing:
            raise RuntimeError("invoices collection unreachable")
        return list(self.invoices.values())

    async def update_invoice(self, invoice_id, fields):
        if invoice_id in self.failing_updates:
            raise RuntimeError("write rejected")
        self.updates.append((invoice_id, fields))
        self.invoices[invoice_id] = self.invoices[invoice_id].model_copy(update=fields)


class FakePayrollStore:
    def __init__(self):
        self.records: Dict[str, PayrollRecord] = {}
        self.updates = []

    async def find_payroll_for_invoice(self, invoice_id, invoice_number=None) -> Optional[PayrollRecord]:
        for record in self.records.values():
            if record.invoice_id == invoice_id:
                return record
            if invoice_number and record.invoice_number == invoice_number:
                return record
        return None

    async def create_payroll_record(self, record):
        payroll_id = f"p{len(self.records) + 1:03d}"
        self.records[payroll_id] = PayrollRecord(_id=payroll_id, **record.model_dump())
        return payroll_id

    async def update_payroll_record(self, payroll_id, fields):
        self.updates.append((payroll_id, fields))
        self.records[payroll_id] = self.records[payroll_id].model_copy(update=fields)


def work_record(record_id: str, account_id: str, worked_on: str, **overrides) -> WorkRecord:
    fields = {
        "_id": record_id,
        "employee_id": account_id,
        "date": worked_on,
        "clock_in_time": f"{worked_on}T08:00:00",
        "clock_out_time": f"{worked_on}T16:00:00",
    }
    fields.update(overrides)
    return WorkRecord(**fields)


@pytest.fixture
def jane():
    return Employee(_id="emp-1", name="Jane Doe", email=" Jane.Doe@Example.com ", role="Cleaner", type="employee")


@pytest.fixture
def directory(jane):
    return FakeDirectory(
        subjects=[jane],
        accounts=[UserAccount(_id="uid-1", email="jane.doe@example.com", role="employee")],
        work_records={
            "uid-1": [
                work_record("w1", "uid-1", "2026-03-02"),
                work_record("w2", "uid-1", "2026-03-20"),
            ]
        },
    )


@pytest.fixture
def reminder_store():
    return FakeReminderStore()


@pytest.fixture
def march_key():
    return "payment-emp-1-2026-3"


@pytest.fixture
def april_first():
    return date(2026, 4, 1)
