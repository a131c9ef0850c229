from typing import Optional
from pydantic import BaseModel, Field


class Employee(BaseModel):
    """Business record for a person or client on the roster."""
    id: str = Field(alias="_id")
    name: str = ""
    email: Optional[str] = None
    role: Optional[str] = None
    type: Optional[str] = Field(None, description="employee, client, ...")
    is_admin: bool = False

    class Config:
        populate_by_name = True


class UserAccount(BaseModel):
    """Sign-in account; ``uid`` is the durable identifier work records point at."""
    uid: str = Field(alias="_id")
    email: Optional[str] = None
    role: Optional[str] = None
    is_admin: bool = False

    class Config:
        populate_by_name = True


class WorkRecord(BaseModel):
    id: str = Field(alias="_id")
    employee_id: str
    date: Optional[str] = None
    clock_in_time: Optional[str] = None
    clock_out_time: Optional[str] = None
    is_leave: bool = False
    site_id: Optional[str] = None
    hours_worked: float = 0.0

    class Config:
        populate_by_name = True
