import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def recipient(db):
    return User.objects.create_user(
        email='recipient@example.com',
        username='recipient',
        password='TestPass123!',
    )


@pytest.fixture
def actor(db):
    return User.objects.create_user(
        email='actor@example.com',
        username='actor',
        password='TestPass123!',
        display_name='The Actor',
    )


@pytest.fixture
def authenticated_client(api_client, recipient):
    """Return API client authenticated as the recipient."""
    refresh = RefreshToken.for_user(recipient)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client
