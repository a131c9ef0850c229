"""
Reminders API Routes
List reminders and run the payment reminder pass
"""
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from opsboard.routes.auth.auth import get_current_user
from opsboard.services.payment_reminders_service import PAYMENT_REMINDER_TYPE, payment_reminder_generator
from opsboard.services.reminders_service import reminders_service

router = APIRouter(prefix="/reminders", tags=["reminders"])


@router.get("/")
async def list_reminders(
    status_filter: Optional[str] = Query(None, alias="status"),
    type_filter: Optional[str] = Query(None, alias="type"),
    priority: Optional[str] = None,
    current_user: dict = Depends(get_current_user),
):
    """Reminders ordered by due date, optionally filtered."""
    try:
        reminders = await reminders_service.query_reminders(
            status_filter=status_filter,
            type_filter=type_filter,
            priority=priority,
        )
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content=jsonable_encoder({"success": True, "data": [r.model_dump() for r in reminders]}),
        )
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch reminders: {exc}",
        ) from exc


@router.patch("/{reminder_id}/complete")
async def complete_reminder(
    reminder_id: str,
    current_user: dict = Depends(get_current_user),
):
    """Mark a reminder completed (records the payment as made)."""
    try:
        reminder = await reminders_service.mark_completed(reminder_id)
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content=jsonable_encoder({"success": True, "data": reminder.model_dump()}),
        )
    except HTTPException as exc:
        raise exc
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to complete reminder: {exc}",
        ) from exc


@router.post("/payments/generate")
async def generate_payment_reminders(
    current_user: dict = Depends(get_current_user),
):
    """Run the payment reminder pass for today. Does nothing between the 2nd and the 14th."""
    try:
        report = await payment_reminder_generator.generate()
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content=jsonable_encoder({"success": True, "data": report.model_dump()}),
        )
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to generate payment reminders: {exc}",
        ) from exc


@router.post("/payments/deduplicate")
async def deduplicate_payment_reminders(
    current_user: dict = Depends(get_current_user),
):
    removed = await payment_reminder_generator.deduplicator.remove_duplicates(PAYMENT_REMINDER_TYPE)
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=jsonable_encoder({"success": True, "data": {"removed": removed}}),
    )
