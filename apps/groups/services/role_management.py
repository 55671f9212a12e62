"""
Role management service.

Promotes members to the moderator set and demotes them back. Authority is
checked against the locked group row, never a pre-fetched snapshot.
"""

import logging
from uuid import UUID

from django.db import transaction

from apps.accounts.models import User
from apps.groups.authority import normalize_user_id, resolve_role
from apps.groups.models import Group

from .exceptions import (
    NotMemberError,
    CannotDemoteCreatorError,
    InsufficientPermissionsError,
)
from .membership_management import lock_group

logger = logging.getLogger(__name__)


@transaction.atomic
def promote_to_moderator(
    *,
    group_id: UUID,
    user_id: UUID,
    promoted_by: User
) -> Group:
    """
    Add a member to the moderator set.

    Promoting someone who already moderates is a no-op.

    Args:
        group_id: UUID of the group
        user_id: UUID of the member to promote
        promoted_by: User performing the promotion (creator or moderator)

    Returns:
        The Group

    Raises:
        GroupNotFoundError: If group doesn't exist
        InsufficientPermissionsError: If promoted_by lacks moderator privilege
        NotMemberError: If the target is not a member
    """
    group = lock_group(group_id)

    if not resolve_role(group, promoted_by).is_moderator:
        raise InsufficientPermissionsError("Only moderators can promote members")

    target = resolve_role(group, user_id)
    if not target.is_member:
        raise NotMemberError("User must be a member")

    if target.is_moderator:
        return group

    group.moderators.add(normalize_user_id(user_id))
    group.touch()

    logger.info("User %s promoted to moderator of %s by %s", user_id, group.id, promoted_by.id)
    return group


@transaction.atomic
def demote_moderator(
    *,
    group_id: UUID,
    user_id: UUID,
    demoted_by: User
) -> Group:
    """
    Remove a user from the moderator set; they stay a plain member.

    Demoting someone who isn't a moderator is a no-op.

    Raises:
        GroupNotFoundError: If group doesn't exist
        InsufficientPermissionsError: If demoted_by lacks moderator privilege
        CannotDemoteCreatorError: If the target is the creator
    """
    group = lock_group(group_id)

    if not resolve_role(group, demoted_by).is_moderator:
        raise InsufficientPermissionsError("Only moderators can demote moderators")

    target = resolve_role(group, user_id)
    if target.is_creator:
        raise CannotDemoteCreatorError("Cannot demote group creator")

    if not target.is_moderator:
        return group

    group.moderators.remove(normalize_user_id(user_id))
    group.touch()

    logger.info("User %s demoted in %s by %s", user_id, group.id, demoted_by.id)
    return group
