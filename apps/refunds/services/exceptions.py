"""Domain-specific exceptions for refunds services."""


class RefundsServiceError(Exception):
    """Base exception for refunds services."""
    code = 'refund_error'


class InvalidRefundError(RefundsServiceError):
    """Raised when refund input cannot produce a valid refund."""
    code = 'invalid_refund'


class AmountMismatchError(RefundsServiceError):
    """Raised when a submitted amount disagrees with the derived amount."""
    code = 'amount_mismatch'

    def __init__(self, *, submitted, derived):
        self.submitted = submitted
        self.derived = derived
        super().__init__(
            f"Submitted amount {submitted} does not match derived amount {derived}"
        )


class RefundNotFoundError(RefundsServiceError):
    """Raised when a refund does not exist."""
    code = 'refund_not_found'


class RefundForbiddenError(RefundsServiceError):
    """Raised when the caller does not hold the role for a refund action."""
    code = 'refund_forbidden'
