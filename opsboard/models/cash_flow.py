"""Invoice and payroll (cash-flow) models."""
from datetime import datetime
from typing import Literal, Optional, Union
from pydantic import BaseModel, Field, model_validator

PaymentStatus = Literal["pending", "received", "paid", "overdue", "late"]
CashFlowMode = Literal["inflow", "outflow"]
CashFlowType = Literal[
    "cleaner_payroll",
    "internal_payroll",
    "client_payment",
    "expense",
    "other",
]

TERMINAL_STATUSES = frozenset({"paid", "received"})
GST_RATE = 0.10
DEFAULT_PAYMENT_CYCLE = 45


def split_gst(amount_excl_gst: float) -> tuple:
    """Return ``(gst_amount, total_amount)`` for an amount excluding GST."""
    gst_amount = round(amount_excl_gst * GST_RATE, 2)
    return gst_amount, amount_excl_gst + gst_amount


class Invoice(BaseModel):
    """Invoice document."""
    id: str = Field(alias="_id")
    invoice_number: str = ""
    client_name: str = ""
    name: Optional[str] = None
    site_id: Optional[str] = None
    site_of_work: Optional[str] = None
    amount: float = 0.0
    gst: float = 0.0
    total_amount: float = 0.0
    issue_date: Optional[Union[datetime, str]] = Field(None, description="ISO or DD.MM.YYYY issue date")
    payment_cycle: int = DEFAULT_PAYMENT_CYCLE
    status: PaymentStatus = "pending"
    payment_date: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        populate_by_name = True
        from_attributes = True
        json_encoders = {
            datetime: lambda v: v.isoformat(),
        }


class InvoiceCreate(BaseModel):
    invoice_number: str
    client_name: str
    name: Optional[str] = None
    site_id: Optional[str] = None
    site_of_work: Optional[str] = None
    amount: float = Field(..., ge=0, description="Amount excluding GST")
    gst: Optional[float] = None
    total_amount: Optional[float] = None
    issue_date: str
    payment_cycle: int = Field(default=DEFAULT_PAYMENT_CYCLE, gt=0)
    status: PaymentStatus = "pending"
    payment_date: Optional[str] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def _apply_gst(self):
        self.gst, self.total_amount = split_gst(self.amount)
        return self


class InvoiceUpdate(BaseModel):
    invoice_number: Optional[str] = None
    client_name: Optional[str] = None
    name: Optional[str] = None
    site_id: Optional[str] = None
    site_of_work: Optional[str] = None
    amount: Optional[float] = Field(None, ge=0)
    issue_date: Optional[str] = None
    payment_cycle: Optional[int] = Field(None, gt=0)
    status: Optional[PaymentStatus] = None
    payment_date: Optional[str] = None
    notes: Optional[str] = None


class PayrollRecord(BaseModel):
    """Cash-flow record in the payroll collection."""
    id: str = Field(alias="_id")
    month: str = ""
    date: str = ""
    mode_of_cash_flow: CashFlowMode = "outflow"
    type_of_cash_flow: CashFlowType = "cleaner_payroll"
    name: str = ""
    site_of_work: Optional[str] = None
    abn_registered: bool = False
    gst_registered: bool = False
    invoice_id: Optional[str] = None
    invoice_number: Optional[str] = None
    amount_excl_gst: float = 0.0
    gst_amount: float = 0.0
    total_amount: float = 0.0
    currency: str = "AUD"
    payment_method: str = "bank_transfer"
    payment_cycle: int = DEFAULT_PAYMENT_CYCLE
    payment_date: Optional[str] = None
    status: PaymentStatus = "pending"
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        populate_by_name = True
        from_attributes = True
        json_encoders = {
            datetime: lambda v: v.isoformat(),
        }


class PayrollCreate(BaseModel):
    month: str
    date: str
    mode_of_cash_flow: CashFlowMode = "outflow"
    type_of_cash_flow: CashFlowType = "internal_payroll"
    name: str
    site_of_work: Optional[str] = None
    abn_registered: bool = False
    gst_registered: bool = False
    invoice_id: Optional[str] = None
    invoice_number: Optional[str] = None
    amount_excl_gst: float = Field(..., ge=0)
    gst_amount: float = 0.0
    total_amount: float = 0.0
    currency: str = "AUD"
    payment_method: str = "bank_transfer"
    payment_cycle: int = Field(default=DEFAULT_PAYMENT_CYCLE, gt=0)
    payment_date: Optional[str] = None
    status: PaymentStatus = "pending"
    notes: Optional[str] = None

    @model_validator(mode="after")
    def _apply_gst(self):
        # GST is always derived, never trusted from input
        self.gst_amount, self.total_amount = split_gst(self.amount_excl_gst)
        return self
