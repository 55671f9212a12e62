"""User registration service."""

import logging

from django.db import transaction, IntegrityError
from django.contrib.auth import get_user_model

from .exceptions import UserRegistrationError

User = get_user_model()

logger = logging.getLogger(__name__)


@transaction.atomic
def register_user(
    *,
    email: str,
    username: str,
    password: str,
    display_name: str = ""
) -> User:
    """
    Register a new user.

    Args:
        email: User's email address
        username: Unique public handle
        password: User's password (will be hashed)
        display_name: Optional display name

    Returns:
        Created User instance

    Raises:
        UserRegistrationError: If email or username is already taken
    """
    if User.objects.filter(email__iexact=email).exists():
        raise UserRegistrationError("A user with this email already exists")

    if User.objects.filter(username__iexact=username).exists():
        raise UserRegistrationError("A user with this username already exists")

    try:
        user = User.objects.create_user(
            email=email,
            username=username,
            password=password,
            display_name=display_name
        )
    except IntegrityError as e:
        raise UserRegistrationError(f"Registration failed: {str(e)}")

    logger.info("Registered user %s", user.id)
    return user
