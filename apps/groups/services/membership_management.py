"""
Membership management service.

Owns a group's member list. Every mutation re-reads the group under a row
lock, re-derives member_count from the membership rows and bumps
last_activity.
"""

import logging
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db import transaction, IntegrityError
from django.db.models import QuerySet

from apps.accounts.models import User
from apps.groups.authority import canonical_members, normalize_user_id, resolve_role
from apps.groups.models import Group, GroupMembership

from .exceptions import (
    GroupNotFoundError,
    AlreadyMemberError,
    NotMemberError,
    CreatorCannotLeaveError,
    CannotRemoveCreatorError,
    InsufficientPermissionsError,
)

logger = logging.getLogger(__name__)


def lock_group(group_id: UUID) -> Group:
    """
    Fetch an active group with a row-level lock.

    Must be called inside a transaction so the authority check and the
    mutation that follows see the same state.

    Raises:
        GroupNotFoundError: If group doesn't exist
    """
    try:
        return (
            Group.objects
            .select_for_update()
            .get(id=group_id, is_active=True)
        )
    except (Group.DoesNotExist, ValidationError):
        raise GroupNotFoundError(f"Group with ID {group_id} not found")


def refresh_member_stats(group: Group) -> Group:
    """Re-derive member_count from membership rows and bump last_activity."""
    group.member_count = GroupMembership.objects.filter(group=group).count()
    group.touch(save=False)
    group.save(update_fields=['member_count', 'last_activity', 'updated_at'])
    return group


def add_member(*, group: Group, user: User) -> GroupMembership:
    """
    Append a fresh membership record without role preconditions.

    Shared by group creation, join and invitation acceptance.

    Raises:
        AlreadyMemberError: If a membership row already exists
    """
    try:
        with transaction.atomic():
            membership = GroupMembership.objects.create(user=user, group=group)
    except IntegrityError:
        raise AlreadyMemberError(f"User is already a member of {group.name}")

    refresh_member_stats(group)
    return membership


@transaction.atomic
def join_group(*, group_id: UUID, user: User) -> GroupMembership:
    """
    Join a group.

    Args:
        group_id: UUID of the group
        user: User joining the group

    Returns:
        Created GroupMembership instance

    Raises:
        GroupNotFoundError: If group doesn't exist
        AlreadyMemberError: If user is the creator, a moderator or a member
    """
    group = lock_group(group_id)
    authority = resolve_role(group, user)

    if authority.is_creator:
        raise AlreadyMemberError("You are the creator of this group")
    if authority.is_moderator:
        raise AlreadyMemberError("You are a moderator of this group")
    if authority.is_member:
        raise AlreadyMemberError("You are already a member of this group")

    membership = add_member(group=group, user=user)
    logger.info("User %s joined group %s", user.id, group.id)
    return membership


@transaction.atomic
def leave_group(*, group_id: UUID, user: User) -> Group:
    """
    Leave a group.

    The member list is rebuilt into canonical entries without the leaving
    user; any duplicate or malformed rows are discarded along the way.
    Leaving a group the user is not in is a no-op.

    Returns:
        The refreshed Group

    Raises:
        GroupNotFoundError: If group doesn't exist
        CreatorCannotLeaveError: If user is the creator
    """
    group = lock_group(group_id)

    if resolve_role(group, user).is_creator:
        raise CreatorCannotLeaveError("Group creator cannot leave the group")

    rows = list(
        GroupMembership.objects
        .select_for_update()
        .filter(group=group)
        .order_by('joined_at', 'id')
    )
    kept = canonical_members(rows, exclude=user)

    (
        GroupMembership.objects
        .filter(group=group)
        .exclude(pk__in=[entry.source.pk for entry in kept])
        .delete()
    )
    group.moderators.remove(user)
    refresh_member_stats(group)

    logger.info(
        "User %s left group %s (members before: %d, after: %d)",
        user.id, group.id, len(rows), group.member_count
    )
    return group


@transaction.atomic
def remove_member(
    *,
    group_id: UUID,
    user_id: UUID,
    removed_by: User
) -> Group:
    """
    Remove a member from a group (moderator privilege required).

    Args:
        group_id: UUID of the group
        user_id: UUID of the user to remove
        removed_by: User performing the removal

    Raises:
        GroupNotFoundError: If group doesn't exist
        InsufficientPermissionsError: If removed_by lacks moderator privilege
        CannotRemoveCreatorError: If trying to remove the creator
        NotMemberError: If target user is not a member
    """
    group = lock_group(group_id)

    if not resolve_role(group, removed_by).is_moderator:
        raise InsufficientPermissionsError("Only moderators can remove members")

    target = resolve_role(group, user_id)
    if target.is_creator:
        raise CannotRemoveCreatorError("Cannot remove group creator")
    if not target.is_member:
        raise NotMemberError("User is not a member of this group")

    target_id = normalize_user_id(user_id)
    GroupMembership.objects.filter(group=group, user_id=target_id).delete()
    group.moderators.remove(target_id)
    refresh_member_stats(group)

    logger.info("User %s removed from group %s by %s", target_id, group.id, removed_by.id)
    return group


def get_group_members(*, group_id: UUID) -> QuerySet[GroupMembership]:
    """
    Get all members of a group, oldest first.

    Raises:
        GroupNotFoundError: If group doesn't exist
    """
    try:
        if not Group.objects.filter(id=group_id, is_active=True).exists():
            raise GroupNotFoundError(f"Group with ID {group_id} not found")
    except ValidationError:
        raise GroupNotFoundError(f"Group with ID {group_id} not found")

    return (
        GroupMembership.objects
        .filter(group_id=group_id)
        .select_related('user')
        .order_by('joined_at')
    )
