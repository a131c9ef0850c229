"""
Invoice Payroll Automation
Keeps invoice statuses current and materializes the payroll record an
invoice gives rise to.

An invoice is "pending" until its payment cycle has elapsed and "overdue"
afterwards, unless it has been settled (paid/received). Once its status is
one of the configured trigger statuses (by default the settled ones, paid and
received), a matching outflow is written to the payroll collection, at most
once per invoice.
"""
from datetime import date
from typing import List, Optional
import logging

from pydantic import BaseModel

from opsboard.config import _today, settings
from opsboard.models.cash_flow import TERMINAL_STATUSES, Invoice, PayrollCreate
from opsboard.services.invoices_service import invoices_service
from opsboard.services.payment_cycle import parse_record_date, refresh_status
from opsboard.services.payroll_service import payroll_service
from opsboard.services.stores import Clock, InvoiceStore, PayrollStore

logger = logging.getLogger(__name__)


class InvoiceNotFoundError(LookupError):
    pass


class InvoiceProcessResult(BaseModel):
    invoice_id: str
    status: str
    status_updated: bool = False
    payroll_created: bool = False
    payroll_updated: bool = False
    payroll_id: Optional[str] = None


class InvoiceBatchReport(BaseModel):
    invoices_processed: int = 0
    statuses_updated: int = 0
    payrolls_created: int = 0
    payrolls_updated: int = 0
    errors: List[str] = []


def payroll_from_invoice(invoice: Invoice, status: str) -> PayrollCreate:
    """Build the outflow record for an invoice. GST is derived from the amount."""
    issued = parse_record_date(invoice.issue_date)
    return PayrollCreate(
        month=issued.strftime("%B") if issued else "",
        date=issued.isoformat() if issued else "",
        mode_of_cash_flow="outflow",
        type_of_cash_flow="internal_payroll",
        name=invoice.name or invoice.client_name,
        site_of_work=invoice.site_of_work,
        gst_registered=invoice.gst > 0,
        invoice_id=invoice.id,
        invoice_number=invoice.invoice_number or None,
        amount_excl_gst=invoice.amount,
        payment_cycle=invoice.payment_cycle,
        payment_date=invoice.payment_date if status in TERMINAL_STATUSES else None,
        status=status,
        notes=f"Auto-generated from invoice {invoice.invoice_number or invoice.id}",
    )


class InvoicePayrollAutomation:
    def __init__(
        self,
        invoices: InvoiceStore,
        payrolls: PayrollStore,
        clock: Clock = _today,
        trigger_statuses: Optional[List[str]] = None,
    ):
        self.invoices = invoices
        self.payrolls = payrolls
        self.clock = clock
        self.trigger_statuses = set(trigger_statuses or settings.payroll_trigger_statuses)

    async def process_invoice(self, invoice_id: str, today: Optional[date] = None) -> InvoiceProcessResult:
        """Reconcile one invoice. Raises InvoiceNotFoundError for an unknown id."""
        invoice = await self.invoices.get_invoice(invoice_id)
        if invoice is None:
            raise InvoiceNotFoundError(f"Invoice {invoice_id} not found")
        return await self._reconcile(invoice, today or self.clock())

    async def process_all_invoices(self, today: Optional[date] = None) -> InvoiceBatchReport:
        """Reconcile every invoice; one bad invoice does not stop the batch."""
        today = today or self.clock()
        report = InvoiceBatchReport()
        try:
            invoices = await self.invoices.list_invoices()
        except Exception as exc:
            logger.exception("Error fetching invoices")
            report.errors.append(f"Error fetching invoices: {exc}")
            return report

        for invoice in invoices:
            report.invoices_processed += 1
            try:
                result = await self._reconcile(invoice, today)
            except Exception as exc:
                logger.exception("Error processing invoice %s", invoice.id)
                report.errors.append(f"Error processing invoice {invoice.invoice_number or invoice.id}: {exc}")
                continue
            report.statuses_updated += int(result.status_updated)
            report.payrolls_created += int(result.payroll_created)
            report.payrolls_updated += int(result.payroll_updated)

        logger.info(
            "Processed %d invoices: %d statuses updated, %d payrolls created",
            report.invoices_processed,
            report.statuses_updated,
            report.payrolls_created,
        )
        return report

    async def _reconcile(self, invoice: Invoice, today: date) -> InvoiceProcessResult:
        new_status = refresh_status(invoice.status, invoice.issue_date, invoice.payment_cycle, today)
        result = InvoiceProcessResult(invoice_id=invoice.id, status=new_status)

        if new_status != invoice.status:
            await self.invoices.update_invoice(invoice.id, {"status": new_status})
            result.status_updated = True

        if new_status not in self.trigger_statuses:
            return result

        existing = await self.payrolls.find_payroll_for_invoice(invoice.id, invoice.invoice_number or None)
        if existing is None:
            result.payroll_id = await self.payrolls.create_payroll_record(payroll_from_invoice(invoice, new_status))
            result.payroll_created = True
            logger.info("Created payroll %s from invoice %s", result.payroll_id, invoice.id)
            return result

        result.payroll_id = existing.id
        if existing.status not in TERMINAL_STATUSES and existing.status != new_status:
            fields = {"status": new_status}
            if new_status in TERMINAL_STATUSES and invoice.payment_date:
                fields["payment_date"] = invoice.payment_date
            await self.payrolls.update_payroll_record(existing.id, fields)
            result.payroll_updated = True
        return result


invoice_payroll_automation = InvoicePayrollAutomation(invoices_service, payroll_service)
