from typing import List
from opsboard.db import EMPLOYEES_COLLECTION, USERS_COLLECTION, WORK_RECORDS_COLLECTION, get_collection
from opsboard.models.employees import Employee, UserAccount, WorkRecord


class EmployeesService:
    """Read-only view over employees, sign-in accounts and work records."""

    def __init__(self):
        self.employees = get_collection(EMPLOYEES_COLLECTION)
        self.users = get_collection(USERS_COLLECTION)
        self.work_records = get_collection(WORK_RECORDS_COLLECTION)

    async def list_subjects(self) -> List[Employee]:
        """All employee records"""
        docs = await self.employees.find({}).sort("name", 1).to_list(length=None)
        return [Employee(**doc) for doc in docs]

    async def list_accounts(self) -> List[UserAccount]:
        """All sign-in accounts"""
        docs = await self.users.find({}).to_list(length=None)
        return [UserAccount(**doc) for doc in docs]

    async def list_work_records_for_subject(self, account_id: str) -> List[WorkRecord]:
        """Work records keyed by the account uid, newest first"""
        cursor = self.work_records.find({"employee_id": account_id}).sort("date", -1)
        records = []
        async for doc in cursor:
            records.append(WorkRecord(**doc))
        return records


employees_service = EmployeesService()
