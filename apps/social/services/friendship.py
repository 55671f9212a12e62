"""
Friendship service.

Friend requests and the symmetric friends relation. Group invitations are
gated on are_friends().
"""

import logging
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Q, QuerySet

from apps.accounts.models import User
from apps.groups.authority import normalize_user_id
from apps.notifications.models import NotificationType
from apps.notifications.services import notify
from apps.social.models import FriendRequest, FriendRequestStatus

from .exceptions import (
    UserNotFoundError,
    SelfRelationshipError,
    AlreadyFriendsError,
    FriendRequestExistsError,
    FriendRequestNotFoundError,
    NotFriendsError,
)

logger = logging.getLogger(__name__)


def get_active_user(user_id) -> User:
    """
    Raises:
        UserNotFoundError: If the user doesn't exist or is inactive
    """
    try:
        return User.objects.get(id=user_id, is_active=True)
    except (User.DoesNotExist, ValidationError):
        raise UserNotFoundError("User not found")


def are_friends(user, other) -> bool:
    """True if the two users are in each other's friends list."""
    user_id = normalize_user_id(user)
    other_id = normalize_user_id(other)
    if user_id is None or other_id is None or user_id == other_id:
        return False
    return User.friends.through.objects.filter(
        from_user_id=user_id,
        to_user_id=other_id,
    ).exists()


@transaction.atomic
def send_friend_request(
    *,
    from_user: User,
    to_user_id: UUID,
    message: str = ''
) -> FriendRequest:
    """
    Send a friend request.

    A previously declined request between the pair is reopened in the new
    direction instead of creating a second record. An accepted record only
    goes away when the friendship is removed.

    Raises:
        SelfRelationshipError: If the target is the sender
        UserNotFoundError: If the target doesn't exist
        AlreadyFriendsError: If the users are already friends
        FriendRequestExistsError: If a pending or accepted request exists either way
    """
    if normalize_user_id(to_user_id) == normalize_user_id(from_user):
        raise SelfRelationshipError("Cannot send friend request to yourself")

    to_user = get_active_user(to_user_id)

    if are_friends(from_user, to_user):
        raise AlreadyFriendsError("Already friends with this user")

    friend_request = (
        FriendRequest.objects
        .select_for_update()
        .filter(
            Q(from_user=from_user, to_user=to_user)
            | Q(from_user=to_user, to_user=from_user)
        )
        .first()
    )

    if friend_request is None:
        friend_request = FriendRequest.objects.create(
            from_user=from_user,
            to_user=to_user,
            message=message,
        )
    elif friend_request.status == FriendRequestStatus.PENDING:
        raise FriendRequestExistsError("Friend request already exists and is pending")
    elif friend_request.status == FriendRequestStatus.ACCEPTED:
        raise FriendRequestExistsError("Friend request was already accepted")
    else:
        friend_request.from_user = from_user
        friend_request.to_user = to_user
        friend_request.status = FriendRequestStatus.PENDING
        friend_request.message = message
        friend_request.save()

    logger.info("Friend request %s sent from %s to %s", friend_request.id, from_user.id, to_user.id)

    notify(
        recipient=to_user,
        actor=from_user,
        notification_type=NotificationType.FRIEND_REQUEST,
        message=f'{from_user.get_display_name()} sent you a friend request',
        related_id=friend_request.id,
    )
    return friend_request


def list_incoming_requests(*, user: User) -> QuerySet[FriendRequest]:
    """Pending requests addressed to user, newest first."""
    return (
        FriendRequest.objects
        .filter(to_user=user, status=FriendRequestStatus.PENDING)
        .select_related('from_user')
        .order_by('-created_at')
    )


@transaction.atomic
def respond_to_friend_request(
    *,
    request_id: UUID,
    user: User,
    accept: bool
) -> FriendRequest:
    """
    Accept or decline a pending request addressed to user.

    Raises:
        FriendRequestNotFoundError: If no pending request with that id targets user
    """
    try:
        friend_request = (
            FriendRequest.objects
            .select_for_update()
            .select_related('from_user')
            .get(id=request_id, to_user=user, status=FriendRequestStatus.PENDING)
        )
    except (FriendRequest.DoesNotExist, ValidationError):
        raise FriendRequestNotFoundError("Friend request not found")

    if accept:
        user.friends.add(friend_request.from_user)
        friend_request.status = FriendRequestStatus.ACCEPTED
    else:
        friend_request.status = FriendRequestStatus.DECLINED
    friend_request.save(update_fields=['status', 'updated_at'])

    logger.info("Friend request %s %s by %s", friend_request.id, friend_request.status, user.id)

    if accept:
        notify(
            recipient=friend_request.from_user,
            actor=user,
            notification_type=NotificationType.FRIEND_REQUEST_ACCEPTED,
            message=f'{user.get_display_name()} accepted your friend request',
            related_id=friend_request.id,
        )
    return friend_request


def list_friends(*, user: User) -> QuerySet[User]:
    return user.friends.filter(is_active=True).order_by('username')


@transaction.atomic
def remove_friend(*, user: User, friend_id: UUID) -> None:
    """
    Drop the friendship on both sides.

    The pair's friend request record is deleted too, so either user can
    send a fresh request later.

    Raises:
        UserNotFoundError: If the other user doesn't exist
        NotFriendsError: If the users aren't friends
    """
    friend = get_active_user(friend_id)
    if not are_friends(user, friend):
        raise NotFriendsError("You are not friends with this user")

    user.friends.remove(friend)
    FriendRequest.objects.filter(
        Q(from_user=user, to_user=friend) | Q(from_user=friend, to_user=user)
    ).delete()
    logger.info("User %s removed friend %s", user.id, friend.id)
