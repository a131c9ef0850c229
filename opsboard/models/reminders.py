"""Reminder models for payment follow-ups."""
from datetime import date, datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field

ReminderType = Literal["payment", "invoice", "payroll"]
ReminderPriority = Literal["low", "medium", "high"]
ReminderStatus = Literal["pending", "completed"]

PRIORITY_RANK = {"low": 0, "medium": 1, "high": 2}


class ObligationKey(BaseModel):
    """
    Identity of one recurring payment duty, e.g. an employee's pay for the
    work done in one calendar month. Encoded as ``{domain}-{subject}-{year}-{month}``.
    """
    subject_id: str
    year: int
    month: int = Field(..., ge=1, le=12)
    domain: ReminderType = "payment"

    class Config:
        frozen = True

    @property
    def related_id(self) -> str:
        return f"{self.domain}-{self.subject_id}-{self.year}-{self.month}"

    def __str__(self) -> str:
        return self.related_id


class Reminder(BaseModel):
    """Reminder document as stored in the reminders collection."""
    id: str = Field(alias="_id")
    type: ReminderType = Field(default="payment", description="Reminder domain")
    title: str = ""
    description: str = ""
    due_date: date = Field(..., description="Calendar date the obligation falls due")
    priority: ReminderPriority = "medium"
    status: ReminderStatus = "pending"
    related_id: str = Field(default="", description="Encoded obligation key")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        populate_by_name = True
        from_attributes = True
        json_encoders = {
            datetime: lambda v: v.isoformat(),
        }


class ReminderCreate(BaseModel):
    type: ReminderType = "payment"
    title: str
    description: str
    due_date: date
    priority: ReminderPriority = "medium"
    status: ReminderStatus = "pending"
    related_id: str

