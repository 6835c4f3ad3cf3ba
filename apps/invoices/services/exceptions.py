"""Domain-specific exceptions for invoices services."""


class InvoicesServiceError(Exception):
    """Base exception for invoices services."""
    code = 'invoice_error'


class InvoiceNotFoundError(InvoicesServiceError):
    """Raised when an invoice does not exist."""
    code = 'invoice_not_found'


class InvoiceNotRefundableError(InvoicesServiceError):
    """Raised when a refund is raised against an invoice that is not paid."""
    code = 'invoice_not_refundable'
