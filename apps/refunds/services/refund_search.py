"""Refund search and filtering service."""

from django.db.models import Q, QuerySet
from typing import Optional

from ..models import Refund


def search_refunds(
    *,
    search: Optional[str] = None,
    type: Optional[str] = None,
    invoice: Optional[int] = None,
    brand_code: Optional[str] = None,
    refund_method: Optional[str] = None,
    status: Optional[str] = None,
) -> QuerySet[Refund]:
    """
    Search and filter refunds.

    Args:
        search: Matches refund number, invoice number, client name or reason
        type: Filter by refund type
        invoice: Filter by source invoice id
        brand_code: Filter by brand
        refund_method: Filter by refund method
        status: Filter by lifecycle status

    Returns:
        Filtered QuerySet of Refund
    """
    queryset = Refund.objects.select_related(
        'invoice', 'created_by', 'item_returned_by', 'approved_by', 'processed_by',
    )

    if search:
        queryset = queryset.filter(
            Q(refund_number__icontains=search) |
            Q(invoice__invoice_number__icontains=search) |
            Q(invoice__client_name__icontains=search) |
            Q(reason__icontains=search)
        )

    if type:
        queryset = queryset.filter(type=type)

    if invoice:
        queryset = queryset.filter(invoice_id=invoice)

    if brand_code:
        queryset = queryset.filter(brand_code=brand_code)

    if refund_method:
        queryset = queryset.filter(refund_method=refund_method)

    if status:
        queryset = queryset.filter(status=status)

    return queryset
