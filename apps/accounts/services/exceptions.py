"""Domain-specific exceptions for accounts services."""


class AccountsServiceError(Exception):
    """Base exception for accounts services."""
    pass


class InvalidCredentialsError(AccountsServiceError):
    """Raised when the email/password pair does not match an account."""
    pass


class InactiveAccountError(AccountsServiceError):
    """Raised when a staff account has been deactivated."""
    pass
