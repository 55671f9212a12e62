"""User authentication service."""

from django.db import transaction
from django.db.models import Q
from django.contrib.auth import get_user_model
from django.utils import timezone

from .exceptions import InvalidCredentialsError, InactiveAccountError

User = get_user_model()


@transaction.atomic
def authenticate_user(*, login: str, password: str) -> User:
    """
    Authenticate a user by email or username.

    The user row is locked while last_login is stamped.

    Raises:
        InvalidCredentialsError: If no user matches or the password is wrong
        InactiveAccountError: If account is deactivated
    """
    user = (
        User.objects
        .select_for_update()
        .filter(Q(email__iexact=login) | Q(username__iexact=login))
        .first()
    )
    if user is None or not user.check_password(password):
        raise InvalidCredentialsError("Invalid credentials")

    if not user.is_active:
        raise InactiveAccountError("Account is deactivated")

    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])

    return user
