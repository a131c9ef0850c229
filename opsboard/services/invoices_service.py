"""
Invoices Service
Reads and writes invoice documents
"""
from typing import Any, Dict, List, Optional
from fastapi import HTTPException, status
import logging
from bson import ObjectId

from opsboard.config import _now_utc, _today
from opsboard.db import INVOICES_COLLECTION, get_collection
from opsboard.models.cash_flow import Invoice, InvoiceCreate, split_gst
from opsboard.services.payment_cycle import refresh_status

logger = logging.getLogger(__name__)


class InvoicesService:
    """Invoice store backed by MongoDB."""

    def __init__(self):
        self.collection = get_collection(INVOICES_COLLECTION)

    async def get_invoice(self, invoice_id: str) -> Optional[Invoice]:
        doc = await self.collection.find_one({"_id": invoice_id})
        if doc:
            return Invoice(**doc)
        return None

    async def list_invoices(self) -> List[Invoice]:
        docs = await self.collection.find({}).sort("issue_date", 1).to_list(length=None)
        return [Invoice(**doc) for doc in docs]

    async def create_invoice(self, invoice: InvoiceCreate) -> Invoice:
        """Insert an invoice with its GST split and status computed up front."""
        now = _now_utc()
        doc = invoice.model_dump()
        doc["status"] = refresh_status(invoice.status, invoice.issue_date, invoice.payment_cycle, _today())
        doc["_id"] = str(ObjectId())
        doc["created_at"] = now
        doc["updated_at"] = now

        await self.collection.insert_one(doc)
        return Invoice(**doc)

    async def update_invoice(self, invoice_id: str, fields: Dict[str, Any]) -> None:
        """Partial update; the GST split follows any change of amount."""
        update_fields = {k: v for k, v in fields.items() if v is not None}
        if "amount" in update_fields:
            update_fields["gst"], update_fields["total_amount"] = split_gst(update_fields["amount"])
        update_fields["updated_at"] = _now_utc()

        result = await self.collection.update_one({"_id": invoice_id}, {"$set": update_fields})
        if result.matched_count == 0:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Invoice not found",
            )


invoices_service = InvoicesService()
