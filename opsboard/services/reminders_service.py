"""
Reminders Service
Reads and writes reminder documents in the reminders collection
"""
from datetime import date
from typing import Any, Dict, List, Optional
from fastapi import HTTPException, status
import logging
from bson import ObjectId
from pydantic import ValidationError

from opsboard.config import _now_utc
from opsboard.db import REMINDERS_COLLECTION, get_collection
from opsboard.models.reminders import Reminder, ReminderCreate

logger = logging.getLogger(__name__)


def _to_doc_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Dates are stored as ISO strings so they sort and compare as text."""
    doc = {}
    for key, value in fields.items():
        if value is None:
            continue
        if isinstance(value, date):
            value = value.isoformat()
        doc[key] = value
    return doc


def _parse_reminders(docs: List[Dict[str, Any]]) -> List[Reminder]:
    """Documents that do not validate (bad due_date, unknown type) are logged and skipped."""
    reminders = []
    for doc in docs:
        try:
            reminders.append(Reminder(**doc))
        except ValidationError as exc:
            logger.warning("Skipping unreadable reminder %s: %s", doc.get("_id"), exc)
    return reminders


class RemindersService:
    """Reminder store backed by MongoDB."""

    def __init__(self):
        self.collection = get_collection(REMINDERS_COLLECTION)

    async def list_reminders(self, type_filter: Optional[str] = None) -> List[Reminder]:
        """All reminders, optionally restricted to one type, ordered by due date."""
        query = {"type": type_filter} if type_filter else {}
        cursor = self.collection.find(query).sort("due_date", 1)
        docs = await cursor.to_list(length=None)
        return _parse_reminders(docs)

    async def query_reminders(
        self,
        status_filter: Optional[str] = None,
        type_filter: Optional[str] = None,
        priority: Optional[str] = None,
    ) -> List[Reminder]:
        query: Dict[str, Any] = {}
        if status_filter:
            query["status"] = status_filter
        if type_filter:
            query["type"] = type_filter
        if priority:
            query["priority"] = priority
        cursor = self.collection.find(query).sort("due_date", 1)
        docs = await cursor.to_list(length=None)
        return _parse_reminders(docs)

    async def create_reminder(self, reminder: ReminderCreate) -> str:
        now = _now_utc()
        doc = _to_doc_fields(reminder.model_dump())
        doc["_id"] = str(ObjectId())
        doc["created_at"] = now
        doc["updated_at"] = now

        await self.collection.insert_one(doc)
        logger.info("Created %s reminder %s for %s", reminder.type, doc["_id"], reminder.related_id)
        return doc["_id"]

    async def update_reminder(self, reminder_id: str, fields: Dict[str, Any]) -> None:
        update_fields = _to_doc_fields(fields)
        update_fields["updated_at"] = _now_utc()
        await self.collection.update_one({"_id": reminder_id}, {"$set": update_fields})

    async def delete_reminder(self, reminder_id: str) -> bool:
        """Delete a reminder; returns False when nothing was there to delete."""
        result = await self.collection.delete_one({"_id": reminder_id})
        return result.deleted_count > 0

    async def mark_completed(self, reminder_id: str) -> Reminder:
        result = await self.collection.update_one(
            {"_id": reminder_id},
            {"$set": {"status": "completed", "updated_at": _now_utc()}},
        )
        if result.matched_count == 0:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Reminder not found",
            )
        doc = await self.collection.find_one({"_id": reminder_id})
        return Reminder(**doc)


reminders_service = RemindersService()
