"""Services for reimbursements business logic."""

from .exceptions import (
    ReimbursementsServiceError,
    ReimbursementNotFoundError,
    InvalidReimbursementError,
    AmountMismatchError,
    InvalidDecisionError,
    StageForbiddenError,
    ReceiptUploadError,
)
from .reimbursement_management import create_reimbursement
from .approval_management import decide_stage, complete_payment
from .reimbursement_search import search_reimbursements, get_pending_approvals
from .reimbursement_statistics import get_reimbursement_statistics
from .receipt_storage import store_receipts

__all__ = [
    # Exceptions
    'ReimbursementsServiceError',
    'ReimbursementNotFoundError',
    'InvalidReimbursementError',
    'AmountMismatchError',
    'InvalidDecisionError',
    'StageForbiddenError',
    'ReceiptUploadError',
    # Management
    'create_reimbursement',
    # Approvals
    'decide_stage',
    'complete_payment',
    # Search
    'search_reimbursements',
    'get_pending_approvals',
    # Statistics
    'get_reimbursement_statistics',
    # Receipts
    'store_receipts',
]
