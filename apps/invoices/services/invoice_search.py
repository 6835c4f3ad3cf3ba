"""Invoice lookup and refund-source search."""

from django.db.models import Q, QuerySet
from typing import Optional

from ..models import Invoice, InvoiceStatus
from .exceptions import InvoiceNotFoundError, InvoiceNotRefundableError


def search_invoices(
    *,
    search: Optional[str] = None,
    brand_code: Optional[str] = None,
    auction: Optional[str] = None,
    status: Optional[str] = None,
) -> QuerySet[Invoice]:
    """
    Search and filter invoices.

    Args:
        search: Matches invoice number, client, lot number or item title
        brand_code: Filter by brand
        auction: Filter by auction name (contains)
        status: Filter by invoice status

    Returns:
        Filtered QuerySet of Invoice
    """
    queryset = Invoice.objects.all()

    if search:
        queryset = queryset.filter(
            Q(invoice_number__icontains=search) |
            Q(client_name__icontains=search) |
            Q(lot_number__iexact=search) |
            Q(item_title__icontains=search)
        )

    if brand_code:
        queryset = queryset.filter(brand_code=brand_code)

    if auction:
        queryset = queryset.filter(auction_name__icontains=auction)

    if status:
        queryset = queryset.filter(status=status)

    return queryset


def get_refundable_invoices(**filters) -> QuerySet[Invoice]:
    """Invoices a refund may be raised against: paid ones only."""
    filters['status'] = InvoiceStatus.PAID
    return search_invoices(**filters)


def get_invoice_for_refund(*, invoice_id, lock: bool = False) -> Invoice:
    """
    Fetch the invoice a refund is being raised against.

    With lock=True the row is selected for update; callers must already be
    inside a transaction.

    Raises:
        InvoiceNotFoundError: If the invoice does not exist
        InvoiceNotRefundableError: If the invoice is not paid
    """
    try:
        queryset = Invoice.objects.select_for_update() if lock else Invoice.objects
        invoice = queryset.get(id=invoice_id)
    except (Invoice.DoesNotExist, ValueError, TypeError):
        raise InvoiceNotFoundError(f"Invoice {invoice_id} not found")

    if not invoice.is_refundable:
        raise InvoiceNotRefundableError(
            f"Invoice {invoice.invoice_number} is {invoice.get_status_display().lower()} "
            f"and cannot be refunded"
        )

    return invoice
