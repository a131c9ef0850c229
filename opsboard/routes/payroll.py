from typing import Literal, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from opsboard.routes.auth.auth import get_current_user
from opsboard.services.payroll_service import payroll_service

router = APIRouter(prefix="/payroll", tags=["payroll"])


@router.get("/")
async def list_payroll(
    mode: Optional[Literal["inflow", "outflow"]] = None,
    status_filter: Optional[str] = None,
    current_user: dict = Depends(get_current_user),
):
    """Payroll records with statuses recomputed for today."""
    try:
        records = await payroll_service.list_payrolls(mode=mode, status_filter=status_filter)
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content=jsonable_encoder({"success": True, "data": records}),
        )
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch payroll: {exc}",
        ) from exc
