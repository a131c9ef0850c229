"""
Payment Reminders Service
Keeps employee payment reminders in step with the work they have done.

Work performed in a month is paid 45 days after the first of that month. On
the 1st of the month the payment falls due in, a "pending" reminder is raised;
from the 15th onward the reminder is escalated to "overdue". Each obligation is
identified by an ObligationKey, so re-running a pass never creates a second
reminder for the same duty.
"""
import asyncio
from datetime import date
from typing import Awaitable, Callable, Dict, Iterable, Optional, Set
import logging

from pydantic import BaseModel

from opsboard.config import _today, settings
from opsboard.models.employees import Employee, UserAccount
from opsboard.models.reminders import PRIORITY_RANK, ObligationKey, Reminder, ReminderCreate
from opsboard.services.employees_service import employees_service
from opsboard.services.payment_cycle import due_date, reminder_phase, should_run_today, work_months
from opsboard.services.reminder_deduplicator import ReminderDeduplicator, pick_survivor_order
from opsboard.services.reminders_service import reminders_service
from opsboard.services.stores import Clock, ReminderStore, SubjectDirectory

logger = logging.getLogger(__name__)

PAYMENT_REMINDER_TYPE = "payment"
ADMIN_ROLES = {"admin", "administrator"}

PaymentConfirmation = Callable[[ObligationKey, Optional[Reminder]], Awaitable[bool]]


class ReminderGenerationReport(BaseModel):
    run_date: date
    ran: bool = False
    phase: Optional[str] = None
    duplicates_removed: int = 0
    created: int = 0
    reactivated: int = 0
    escalated: int = 0
    unchanged: int = 0
    settled: int = 0
    skipped_subjects: int = 0
    failed_subjects: int = 0


def normalize_email(email: Optional[str]) -> str:
    """Canonical form used to match employees to accounts: trimmed, lower-case."""
    return (email or "").strip().lower()


def is_admin_account(account: UserAccount) -> bool:
    return account.is_admin or (account.role or "").strip().lower() in ADMIN_ROLES


def build_account_index(accounts: Iterable[UserAccount]) -> Dict[str, str]:
    """Map normalized email -> account uid. Accounts without an email are left out."""
    index = {}
    for account in accounts:
        email = normalize_email(account.email)
        if email:
            index[email] = account.uid
    return index


def is_payable_employee(employee: Employee, admin_emails: Set[str]) -> bool:
    """Only non-admin employees are owed payroll."""
    if employee.type and employee.type != "employee":
        return False
    if employee.is_admin:
        return False
    if employee.role and employee.role.strip().lower() in ADMIN_ROLES:
        return False
    if employee.email and normalize_email(employee.email) in admin_emails:
        return False
    return True


async def reminder_marks_payment(key: ObligationKey, reminder: Optional[Reminder]) -> bool:
    """
    Treat a completed reminder as proof of payment.

    This does not look at the payroll collection, so a reminder dismissed
    by hand counts as paid as well.
    """
    return reminder is not None and reminder.status == "completed"


def _month_label(year: int, month: int) -> str:
    return date(year, month, 1).strftime("%B %Y")


def _day_label(value: date) -> str:
    return f"{value:%B} {value.day}, {value.year}"


def pending_text(employee: Employee, key: ObligationKey, due: date) -> Dict[str, str]:
    return {
        "title": f"Employee Payment Pending - {employee.name}",
        "description": (
            f"Payment for work done in {_month_label(key.year, key.month)} is pending. "
            f"Due date: {_day_label(due)}."
        ),
    }


def overdue_text(employee: Employee, key: ObligationKey, due: date) -> Dict[str, str]:
    return {
        "title": f"Employee Payment Overdue - {employee.name}",
        "description": (
            f"Payment for work done in {_month_label(key.year, key.month)} is overdue. "
            f"Due date was: {_day_label(due)}."
        ),
    }


class PaymentReminderGenerator:
    """
    Creates, reactivates and escalates payment reminders.

    Collaborators are injected so the pass can run against any store; the
    module-level ``payment_reminder_generator`` is wired to MongoDB.
    """

    def __init__(
        self,
        store: ReminderStore,
        directory: SubjectDirectory,
        clock: Clock = _today,
        should_run: Callable[[date], bool] = should_run_today,
        payment_confirmed: PaymentConfirmation = reminder_marks_payment,
        cycle_days: Optional[int] = None,
    ):
        self.store = store
        self.directory = directory
        self.clock = clock
        self.should_run = should_run
        self.payment_confirmed = payment_confirmed
        self.cycle_days = cycle_days or settings.payment_cycle_days
        self.deduplicator = ReminderDeduplicator(store)

    async def generate(self, today: Optional[date] = None) -> ReminderGenerationReport:
        """
        Run one reconciliation pass.

        Failures for a single employee are logged and counted; failing to list
        employees, accounts or reminders aborts the pass.
        """
        today = today or self.clock()
        report = ReminderGenerationReport(run_date=today, phase=reminder_phase(today))

        if not self.should_run(today):
            logger.debug("Payment reminders not scheduled for %s", today.isoformat())
            return report
        report.ran = True

        report.duplicates_removed = await self.deduplicator.remove_duplicates(PAYMENT_REMINDER_TYPE)

        employees, accounts = await asyncio.gather(
            self.directory.list_subjects(),
            self.directory.list_accounts(),
        )
        existing = await self.store.list_reminders(type_filter=PAYMENT_REMINDER_TYPE)

        reminders_by_key: Dict[str, Reminder] = {}
        for reminder in pick_survivor_order(existing):
            reminders_by_key.setdefault(reminder.related_id, reminder)

        account_index = build_account_index(accounts)
        admin_emails = {normalize_email(a.email) for a in accounts if a.email and is_admin_account(a)}

        for employee in employees:
            if not is_payable_employee(employee, admin_emails):
                continue
            try:
                await self._process_employee(employee, account_index, reminders_by_key, today, report)
            except Exception:
                logger.exception("Error processing payment reminders for employee %s", employee.id)
                report.failed_subjects += 1

        logger.info(
            "Payment reminders for %s: %d created, %d reactivated, %d escalated, %d skipped, %d failed",
            today.isoformat(),
            report.created,
            report.reactivated,
            report.escalated,
            report.skipped_subjects,
            report.failed_subjects,
        )
        return report

    async def _process_employee(
        self,
        employee: Employee,
        account_index: Dict[str, str],
        reminders_by_key: Dict[str, Reminder],
        today: date,
        report: ReminderGenerationReport,
    ) -> None:
        account_id = account_index.get(normalize_email(employee.email)) if employee.email else None
        if not account_id:
            logger.warning("No account found for employee %s (%s)", employee.id, employee.email)
            report.skipped_subjects += 1
            return

        records = await self.directory.list_work_records_for_subject(account_id)
        for year, month in work_months(records):
            due = due_date(year, month, self.cycle_days)
            if (due.year, due.month) != (today.year, today.month):
                continue

            key = ObligationKey(subject_id=employee.id, year=year, month=month, domain=PAYMENT_REMINDER_TYPE)
            existing = reminders_by_key.get(key.related_id)
            if await self.payment_confirmed(key, existing):
                report.settled += 1
                continue

            outcome = await self._reconcile(employee, key, due, existing, today, reminders_by_key)
            setattr(report, outcome, getattr(report, outcome) + 1)

    async def _reconcile(
        self,
        employee: Employee,
        key: ObligationKey,
        due: date,
        existing: Optional[Reminder],
        today: date,
        reminders_by_key: Dict[str, Reminder],
    ) -> str:
        phase = reminder_phase(today)
        if phase == "pending":
            fields = {**pending_text(employee, key, due), "priority": "medium", "due_date": due, "status": "pending"}
            if existing is None:
                await self._create(key, fields, reminders_by_key)
                return "created"
            if existing.status == "completed":
                await self._update(existing, fields, reminders_by_key)
                return "reactivated"
            return "unchanged"

        if phase == "overdue":
            fields = {**overdue_text(employee, key, due), "priority": "high", "due_date": due, "status": "pending"}
            if existing is None:
                await self._create(key, fields, reminders_by_key)
                return "created"
            if PRIORITY_RANK[existing.priority] < PRIORITY_RANK["high"] or existing.status == "completed":
                await self._update(existing, fields, reminders_by_key)
                return "escalated"
            return "unchanged"

        return "unchanged"

    async def _create(self, key: ObligationKey, fields: Dict, reminders_by_key: Dict[str, Reminder]) -> None:
        reminder = ReminderCreate(type=key.domain, related_id=key.related_id, **fields)
        reminder_id = await self.store.create_reminder(reminder)
        reminders_by_key[key.related_id] = Reminder(_id=reminder_id, **reminder.model_dump())

    async def _update(self, existing: Reminder, fields: Dict, reminders_by_key: Dict[str, Reminder]) -> None:
        await self.store.update_reminder(existing.id, fields)
        reminders_by_key[existing.related_id] = existing.model_copy(update=fields)


payment_reminder_generator = PaymentReminderGenerator(reminders_service, employees_service)
