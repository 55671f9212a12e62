import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.groups.models import GroupCategory
from apps.groups.services import create_group, join_group, promote_to_moderator


def make_user(username):
    return User.objects.create_user(
        email=f'{username}@example.com',
        username=username,
        password='TestPass123!',
        display_name=username.title(),
    )


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def client_for():
    """Build an API client authenticated as the given user."""
    def _client_for(user):
        client = APIClient()
        refresh = RefreshToken.for_user(user)
        client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return client
    return _client_for


@pytest.fixture
def creator(db):
    return make_user('creator')


@pytest.fixture
def moderator(db):
    return make_user('moderator')


@pytest.fixture
def member(db):
    return make_user('member')


@pytest.fixture
def outsider(db):
    return make_user('outsider')


@pytest.fixture
def group(db, creator):
    """Group with only its creator."""
    return create_group(
        name='Sci-Fi Circle',
        description='Reading classic and new science fiction',
        category=GroupCategory.SCIENCE_FICTION,
        creator=creator,
        tags=['Space', 'space', 'Robots'],
    )


@pytest.fixture
def group_with_members(group, creator, moderator, member):
    """Creator, a promoted moderator and a plain member."""
    join_group(group_id=group.id, user=moderator)
    join_group(group_id=group.id, user=member)
    promote_to_moderator(group_id=group.id, user_id=moderator.id, promoted_by=creator)
    group.refresh_from_db()
    return group


@pytest.fixture
def creator_client(client_for, creator):
    return client_for(creator)


@pytest.fixture
def moderator_client(client_for, moderator):
    return client_for(moderator)


@pytest.fixture
def member_client(client_for, member):
    return client_for(member)


@pytest.fixture
def outsider_client(client_for, outsider):
    return client_for(outsider)
