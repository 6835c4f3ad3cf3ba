"""
Error taxonomy shared by the drafts, the approval desk and the HTTP client.

ValidationError subclasses are raised locally, before any network call.
ApiError means the server answered with a non-2xx status. NetworkError
means no answer arrived at all.
"""


class FinanceError(Exception):
    """Base exception for back-office workflow errors."""
    pass


class ValidationError(FinanceError):
    """Raised when local input is rejected before reaching the server."""

    def __init__(self, message, *, field=None):
        super().__init__(message)
        self.field = field


class InvalidInputError(ValidationError):
    """Raised when a numeric input is unparseable, out of range or too precise."""
    pass


class MissingInvoiceError(ValidationError):
    """Raised when a refund is submitted without a source invoice."""

    def __init__(self, message="An invoice must be selected"):
        super().__init__(message, field='invoice')


class MissingReasonError(ValidationError):
    """Raised when a refund is submitted without a reason."""

    def __init__(self, message="A refund reason is required"):
        super().__init__(message, field='reason')


class MissingRequiredFieldsError(ValidationError):
    """Raised when a reimbursement is submitted with required fields unset."""

    def __init__(self, fields):
        self.fields = list(fields)
        super().__init__(f"Missing required fields: {', '.join(self.fields)}")


class IllegalTransitionError(ValidationError):
    """Raised when an approval or refund action is not legal for the current record."""
    pass


class AlreadySubmittedError(ValidationError):
    """Raised when a draft is modified or submitted after a successful submit."""

    def __init__(self, message="Draft has already been submitted"):
        super().__init__(message)


class ActionInFlightError(ValidationError):
    """Raised when a second approval action starts before the first returns."""
    pass


class ApiError(FinanceError):
    """Raised when the server answers with a non-2xx status."""

    def __init__(self, message, *, status_code=None, payload=None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class TransitionRejectedError(ApiError):
    """
    Raised when the server refuses a state change with 403 or 409.

    `current` holds the authoritative record refetched after the rejection,
    or None if the refetch itself failed.
    """

    def __init__(self, message, *, status_code=None, payload=None, current=None):
        super().__init__(message, status_code=status_code, payload=payload)
        self.current = current


class NetworkError(FinanceError):
    """Raised on connection failures and timeouts."""
    pass
