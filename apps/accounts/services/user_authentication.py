"""Staff login service."""

import logging

from django.db import transaction
from django.contrib.auth import get_user_model
from django.utils import timezone

from .exceptions import InvalidCredentialsError, InactiveAccountError

logger = logging.getLogger(__name__)

User = get_user_model()


@transaction.atomic
def authenticate_user(*, email: str, password: str) -> User:
    """
    Authenticate a staff member with email and password.

    The row is locked while last_login is stamped so concurrent logins
    for the same account serialize.

    Args:
        email: Staff email (case-insensitive)
        password: Plain-text password

    Returns:
        Authenticated User instance

    Raises:
        InvalidCredentialsError: If no account matches the credentials
        InactiveAccountError: If the account is deactivated
    """
    try:
        user = (
            User.objects
            .select_for_update()
            .get(email__iexact=email.strip())
        )
    except User.DoesNotExist:
        logger.info("Login failed for unknown email %s", email)
        raise InvalidCredentialsError("Invalid email or password")

    if not user.check_password(password):
        logger.info("Login failed for %s: bad password", user.email)
        raise InvalidCredentialsError("Invalid email or password")

    if not user.is_active:
        raise InactiveAccountError("Account is deactivated")

    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])

    logger.info("Staff %s (%s) logged in", user.email, user.role)
    return user
