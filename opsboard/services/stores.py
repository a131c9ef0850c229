"""
Store contracts used by the reminder generator and invoice automation.

The Mongo-backed services in this package satisfy these protocols; tests
swap in in-memory implementations.
"""
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Protocol

from opsboard.models.cash_flow import Invoice, PayrollCreate, PayrollRecord
from opsboard.models.employees import Employee, UserAccount, WorkRecord
from opsboard.models.reminders import Reminder, ReminderCreate

Clock = Callable[[], date]


class ReminderStore(Protocol):
    async def list_reminders(self, type_filter: Optional[str] = None) -> List[Reminder]: ...

    async def create_reminder(self, reminder: ReminderCreate) -> str: ...

    async def update_reminder(self, reminder_id: str, fields: Dict[str, Any]) -> None: ...

    async def delete_reminder(self, reminder_id: str) -> bool: ...


class SubjectDirectory(Protocol):
    async def list_subjects(self) -> List[Employee]: ...

    async def list_accounts(self) -> List[UserAccount]: ...

    async def list_work_records_for_subject(self, account_id: str) -> List[WorkRecord]: ...


class InvoiceStore(Protocol):
    async def get_invoice(self, invoice_id: str) -> Optional[Invoice]: ...

    async def list_invoices(self) -> List[Invoice]: ...

    async def update_invoice(self, invoice_id: str, fields: Dict[str, Any]) -> None: ...


class PayrollStore(Protocol):
    async def find_payroll_for_invoice(
        self, invoice_id: str, invoice_number: Optional[str] = None
    ) -> Optional[PayrollRecord]: ...

    async def create_payroll_record(self, record: PayrollCreate) -> str: ...

    async def update_payroll_record(self, payroll_id: str, fields: Dict[str, Any]) -> None: ...
