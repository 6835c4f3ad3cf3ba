"""Services for accounts business logic."""

from .exceptions import (
    AccountsServiceError,
    InvalidCredentialsError,
    InactiveAccountError,
)
from .user_authentication import authenticate_user
from .staff_directory import list_staff

__all__ = [
    # Exceptions
    'AccountsServiceError',
    'InvalidCredentialsError',
    'InactiveAccountError',
    # Services
    'authenticate_user',
    'list_staff',
]
