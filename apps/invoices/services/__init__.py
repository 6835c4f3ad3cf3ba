"""Services for invoices business logic."""

from .exceptions import (
    InvoicesServiceError,
    InvoiceNotFoundError,
    InvoiceNotRefundableError,
)
from .invoice_search import (
    search_invoices,
    get_refundable_invoices,
    get_invoice_for_refund,
)

__all__ = [
    # Exceptions
    'InvoicesServiceError',
    'InvoiceNotFoundError',
    'InvoiceNotRefundableError',
    # Search
    'search_invoices',
    'get_refundable_invoices',
    'get_invoice_for_refund',
]
