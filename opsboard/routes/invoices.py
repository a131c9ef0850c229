"""
Invoice API Routes
Invoice writes and the invoice-to-payroll automation
"""
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from opsboard.routes.auth.auth import get_current_user
from opsboard.models.cash_flow import InvoiceCreate, InvoiceUpdate
from opsboard.services.invoice_events import InvoiceUpserted, invoice_events
from opsboard.services.invoice_payroll_automation import InvoiceNotFoundError, invoice_payroll_automation
from opsboard.services.invoices_service import invoices_service

router = APIRouter(prefix="/invoices", tags=["invoices"])


class ProcessInvoiceRequest(BaseModel):
    invoice_id: str = Field(..., min_length=1, description="Invoice to reconcile")


@router.post("/")
async def create_invoice(
    body: InvoiceCreate,
    current_user: dict = Depends(get_current_user),
):
    """Create an invoice; payroll automation runs in the background."""
    try:
        invoice = await invoices_service.create_invoice(body)
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to create invoice: {exc}",
        ) from exc

    invoice_events.publish(InvoiceUpserted(invoice_id=invoice.id, action="created"))
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=jsonable_encoder({"success": True, "data": invoice.model_dump()}),
    )


@router.put("/{invoice_id}")
async def update_invoice(
    invoice_id: str,
    body: InvoiceUpdate,
    current_user: dict = Depends(get_current_user),
):
    update_data = body.model_dump(exclude_none=True)
    if not update_data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No fields to update",
        )
    try:
        await invoices_service.update_invoice(invoice_id, update_data)
    except HTTPException as exc:
        raise exc
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to update invoice: {exc}",
        ) from exc

    invoice_events.publish(InvoiceUpserted(invoice_id=invoice_id, action="updated"))
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=jsonable_encoder({"success": True, "message": "Invoice updated"}),
    )


@router.get("/process")
async def process_all_invoices(
    current_user: dict = Depends(get_current_user),
):
    """Recompute every invoice status and create any missing payroll records."""
    report = await invoice_payroll_automation.process_all_invoices()
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=jsonable_encoder({
            "success": True,
            "data": report.model_dump(),
            "message": (
                f"Processed {report.invoices_processed} invoices. "
                f"Updated {report.statuses_updated} statuses, created {report.payrolls_created} payroll records."
            ),
        }),
    )


@router.post("/process")
async def process_invoice(
    body: ProcessInvoiceRequest,
    current_user: dict = Depends(get_current_user),
):
    try:
        result = await invoice_payroll_automation.process_invoice(body.invoice_id)
    except InvoiceNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to process invoice: {exc}",
        ) from exc

    if result.payroll_created:
        message = "Invoice processed and payroll record created"
    elif result.status_updated:
        message = "Invoice status updated"
    else:
        message = "Invoice processed (no changes needed)"
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=jsonable_encoder({"success": True, "data": result.model_dump(), "message": message}),
    )
