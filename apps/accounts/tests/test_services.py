"""
Service layer unit tests for accounts app.
"""

import pytest

from apps.accounts.services import (
    register_user,
    authenticate_user,
    UserRegistrationError,
    InvalidCredentialsError,
    InactiveAccountError,
)


@pytest.mark.django_db
class TestRegisterUser:

    def test_register_user(self):
        user = register_user(email='a@example.com', username='alice', password='Secret123!')

        assert user.check_password('Secret123!')
        assert user.get_display_name() == 'alice'

    def test_duplicate_email_case_insensitive(self, user):
        with pytest.raises(UserRegistrationError):
            register_user(email='READER@example.com', username='other', password='Secret123!')

    def test_duplicate_username_case_insensitive(self, user):
        with pytest.raises(UserRegistrationError):
            register_user(email='b@example.com', username='Reader', password='Secret123!')


@pytest.mark.django_db
class TestAuthenticateUser:

    def test_authenticate_by_email_or_username(self, user):
        assert authenticate_user(login='reader@example.com', password='TestPass123!') == user
        assert authenticate_user(login='reader', password='TestPass123!') == user

    def test_unknown_login(self, db):
        with pytest.raises(InvalidCredentialsError):
            authenticate_user(login='ghost', password='whatever')

    def test_inactive(self, user_inactive):
        with pytest.raises(InactiveAccountError):
            authenticate_user(login='inactive', password='TestPass123!')
