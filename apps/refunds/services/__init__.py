"""Services for refunds business logic."""

from .exceptions import (
    RefundsServiceError,
    InvalidRefundError,
    AmountMismatchError,
    RefundNotFoundError,
    RefundForbiddenError,
)
from .refund_management import create_refund
from .refund_lifecycle import approve_refund, process_refund, cancel_refund
from .refund_search import search_refunds
from .refund_statistics import get_refund_statistics

__all__ = [
    # Exceptions
    'RefundsServiceError',
    'InvalidRefundError',
    'AmountMismatchError',
    'RefundNotFoundError',
    'RefundForbiddenError',
    # Management
    'create_refund',
    # Lifecycle
    'approve_refund',
    'process_refund',
    'cancel_refund',
    # Search
    'search_refunds',
    # Statistics
    'get_refund_statistics',
]
