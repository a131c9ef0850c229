"""
Payroll Service
Cash-flow records in the payroll collection
"""
from datetime import date
from typing import Any, Dict, List, Optional
import logging
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from opsboard.config import _now_utc, _today
from opsboard.db import PAYROLL_COLLECTION, get_collection
from opsboard.models.cash_flow import PayrollCreate, PayrollRecord
from opsboard.services.payment_cycle import format_ddmmyyyy, payment_due_from, refresh_status

logger = logging.getLogger(__name__)


class PayrollService:
    """Payroll store backed by MongoDB. Statuses are recomputed on every read and write."""

    def __init__(self):
        self.collection = get_collection(PAYROLL_COLLECTION)

    async def list_payrolls(
        self,
        mode: Optional[str] = None,
        status_filter: Optional[str] = None,
        today: Optional[date] = None,
    ) -> List[Dict[str, Any]]:
        """
        Payroll records with their status brought up to date.

        Each entry also carries ``due_date`` (DD.MM.YYYY) derived from its date
        and payment cycle. Filtering by status happens after recomputation.
        """
        today = today or _today()
        query = {"mode_of_cash_flow": mode} if mode else {}
        docs = await self.collection.find(query).sort("date", 1).to_list(length=None)

        records = []
        for doc in docs:
            record = PayrollRecord(**doc)
            record.status = refresh_status(record.status, record.date, record.payment_cycle, today)
            if status_filter and record.status != status_filter:
                continue
            due = payment_due_from(record.date, record.payment_cycle)
            entry = record.model_dump()
            entry["due_date"] = format_ddmmyyyy(due) if due else None
            records.append(entry)
        return records

    async def find_payroll_for_invoice(
        self, invoice_id: str, invoice_number: Optional[str] = None
    ) -> Optional[PayrollRecord]:
        """The payroll record materialized from an invoice, matched by id or invoice number."""
        clauses: List[Dict[str, Any]] = [{"invoice_id": invoice_id}]
        if invoice_number:
            clauses.append({"invoice_number": invoice_number})
        doc = await self.collection.find_one({"$or": clauses}, sort=[("created_at", 1)])
        if doc:
            return PayrollRecord(**doc)
        return None

    async def create_payroll_record(self, record: PayrollCreate, today: Optional[date] = None) -> str:
        """Insert a payroll record. For an invoice that already has one, the existing id is returned."""
        now = _now_utc()
        doc = record.model_dump(exclude_none=True)
        doc["status"] = refresh_status(record.status, record.date, record.payment_cycle, today or _today())
        doc["_id"] = str(ObjectId())
        doc["created_at"] = now
        doc["updated_at"] = now

        try:
            await self.collection.insert_one(doc)
        except DuplicateKeyError:
            if not record.invoice_id:
                raise
            existing = await self.collection.find_one({"invoice_id": record.invoice_id})
            if existing is None:
                raise
            logger.info("Payroll for invoice %s already exists as %s", record.invoice_id, existing["_id"])
            return existing["_id"]
        logger.info("Created payroll record %s (%s)", doc["_id"], record.invoice_number or record.name)
        return doc["_id"]

    async def update_payroll_record(self, payroll_id: str, fields: Dict[str, Any]) -> None:
        update_fields = {k: v for k, v in fields.items() if v is not None}
        update_fields["updated_at"] = _now_utc()
        await self.collection.update_one({"_id": payroll_id}, {"$set": update_fields})


payroll_service = PayrollService()
