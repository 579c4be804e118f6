import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from tinigom.core.config import Settings
from tinigom.deps import get_gateway, get_settings
from tinigom.schemas import InvoiceRequest
from tinigom.services.gateway import PersistenceGateway, StorageUnavailableError
from tinigom.services.invoice_service import InvoicePDFGenerator, next_invoice_number

logger = logging.getLogger(__name__)

router = APIRouter(tags=["invoices"])


@router.post("")
def create_invoice(
    payload: InvoiceRequest,
    gateway: PersistenceGateway = Depends(get_gateway),
    app_settings: Settings = Depends(get_settings),
):
    """
    Render an invoice PDF. Without an invoice_number the next one from the
    shared counter is used (#00020, #00021, ...).
    """
    invoice_number = payload.invoice_number
    if not invoice_number:
        try:
            invoice_number = next_invoice_number(gateway)
        except StorageUnavailableError as e:
            raise HTTPException(status_code=500, detail=str(e))

    pdf = InvoicePDFGenerator(currency=app_settings.INVOICE_CURRENCY).generate(payload, invoice_number)
    logger.info(f"[INVOICE] {payload.user.value} generated invoice {invoice_number} ({len(pdf)} bytes)")

    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="Invoice {invoice_number}.pdf"',
            "X-Invoice-Number": invoice_number,
        },
    )
