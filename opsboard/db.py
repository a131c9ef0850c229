# opsboard/db.py
from typing import Optional
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase, AsyncIOMotorCollection

from opsboard.config import settings

_client: Optional[AsyncIOMotorClient] = None
_db: Optional[AsyncIOMotorDatabase] = None

REMINDERS_COLLECTION = "reminders"
PAYROLL_COLLECTION = "payroll"
INVOICES_COLLECTION = "invoices"
EMPLOYEES_COLLECTION = "employees"
USERS_COLLECTION = "users"
WORK_RECORDS_COLLECTION = "workRecords"


def get_client() -> AsyncIOMotorClient:
    """
    Returns a singleton AsyncIOMotorClient. Creates it if not already created.
    """
    global _client
    if _client is None:
        if not settings.mongo_uri:
            raise RuntimeError("MONGO_URI not set in environment")
        _client = AsyncIOMotorClient(settings.mongo_uri)
    return _client


def get_database() -> AsyncIOMotorDatabase:
    """
    Returns the configured database object.
    """
    global _db
    if _db is None:
        if not settings.mongo_db_name:
            raise RuntimeError("MONGO_DB_NAME not set in environment")
        _db = get_client()[settings.mongo_db_name]
    return _db


def get_collection(name: str) -> AsyncIOMotorCollection:
    """
    Convenience to get a collection from the configured DB.
    Usage: reminders = get_collection('reminders'); await reminders.find_one({...})
    """
    return get_database()[name]


def close_client() -> None:
    """
    Close the motor client - call this on application shutdown.
    """
    global _client, _db
    if _client is not None:
        _client.close()
        _client = None
        _db = None


async def create_indexes() -> None:
    reminders = get_collection(REMINDERS_COLLECTION)
    await reminders.create_index([("related_id", 1), ("type", 1)])
    await reminders.create_index("due_date")

    payroll = get_collection(PAYROLL_COLLECTION)
    # one payroll record per invoice; manual entries carry no invoice_id
    await payroll.create_index("invoice_id", unique=True, sparse=True)
    await payroll.create_index("invoice_number")

    work_records = get_collection(WORK_RECORDS_COLLECTION)
    await work_records.create_index("employee_id")

    users = get_collection(USERS_COLLECTION)
    await users.create_index("email")
