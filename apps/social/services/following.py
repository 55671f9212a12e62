"""
Following service.

One-directional follow relation; the followed user is notified.
"""

import logging
from uuid import UUID

from django.db import transaction

from apps.accounts.models import User
from apps.groups.authority import normalize_user_id
from apps.notifications.models import NotificationType
from apps.notifications.services import notify

from .exceptions import (
    SelfRelationshipError,
    AlreadyFollowingError,
    NotFollowingError,
)
from .friendship import get_active_user

logger = logging.getLogger(__name__)


@transaction.atomic
def follow_user(*, user: User, target_id: UUID) -> User:
    """
    Follow another user.

    Raises:
        SelfRelationshipError: If user targets themselves
        UserNotFoundError: If the target doesn't exist
        AlreadyFollowingError: If already following
    """
    if normalize_user_id(target_id) == normalize_user_id(user):
        raise SelfRelationshipError("Cannot follow yourself")

    target = get_active_user(target_id)
    if user.following.filter(pk=target.pk).exists():
        raise AlreadyFollowingError("Already following this user")

    user.following.add(target)
    logger.info("User %s followed %s", user.id, target.id)

    notify(
        recipient=target,
        actor=user,
        notification_type=NotificationType.NEW_FOLLOWER,
        message=f'{user.get_display_name()} started following you',
        related_id=user.id,
    )
    return target


@transaction.atomic
def unfollow_user(*, user: User, target_id: UUID) -> User:
    """
    Raises:
        UserNotFoundError: If the target doesn't exist
        NotFollowingError: If user isn't following target
    """
    target = get_active_user(target_id)
    if not user.following.filter(pk=target.pk).exists():
        raise NotFollowingError("You are not following this user")

    user.following.remove(target)
    logger.info("User %s unfollowed %s", user.id, target.id)
    return target
