"""Domain-specific exceptions for reimbursements services."""


class ReimbursementsServiceError(Exception):
    """Base exception for reimbursements services."""
    code = 'reimbursement_error'


class ReimbursementNotFoundError(ReimbursementsServiceError):
    """Raised when a reimbursement does not exist."""
    code = 'reimbursement_not_found'


class InvalidReimbursementError(ReimbursementsServiceError):
    """Raised when reimbursement input is invalid."""
    code = 'invalid_reimbursement'


class AmountMismatchError(ReimbursementsServiceError):
    """Raised when submitted tax or net amounts disagree with the derived ones."""
    code = 'amount_mismatch'


class InvalidDecisionError(ReimbursementsServiceError):
    """Raised when a decision lacks its audit comment or rejection reason."""
    code = 'invalid_decision'


class StageForbiddenError(ReimbursementsServiceError):
    """Raised when the caller does not hold the role for a stage."""
    code = 'stage_forbidden'


class ReceiptUploadError(ReimbursementsServiceError):
    """Raised when a receipt file is rejected."""
    code = 'invalid_receipt'
