import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User


def make_user(username, **extra):
    return User.objects.create_user(
        email=f'{username}@example.com',
        username=username,
        password='TestPass123!',
        **extra
    )


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def alice(db):
    return make_user('alice', display_name='Alice')


@pytest.fixture
def bob(db):
    return make_user('bob', display_name='Bob')


@pytest.fixture
def client_for():
    """Factory returning an API client authenticated as the given user."""
    def _client(user):
        client = APIClient()
        refresh = RefreshToken.for_user(user)
        client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return client
    return _client


@pytest.fixture
def alice_client(client_for, alice):
    return client_for(alice)


@pytest.fixture
def bob_client(client_for, bob):
    return client_for(bob)
