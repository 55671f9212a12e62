"""
Groups app services layer.

Services contain business logic and orchestrate operations across models.
All state-changing operations lock the group row and re-check authority
inside the same transaction.
"""

from .exceptions import (
    GroupsServiceError,
    GroupNotFoundError,
    DuplicateGroupNameError,
    AlreadyMemberError,
    NotMemberError,
    CreatorCannotLeaveError,
    CannotDemoteCreatorError,
    CannotRemoveCreatorError,
    InsufficientPermissionsError,
    InvalidRecipientsError,
    InvitationNotFoundError,
    InvitationAlreadyResolvedError,
)

from .membership_management import (
    lock_group,
    add_member,
    refresh_member_stats,
    join_group,
    leave_group,
    remove_member,
    get_group_members,
)

from .group_management import (
    create_group,
    get_group_by_id,
    list_groups,
    get_featured_groups,
    get_popular_groups,
    get_user_groups,
    get_categories,
)

from .role_management import (
    promote_to_moderator,
    demote_moderator,
)

from .invite_management import (
    InviteOutcome,
    InviteReason,
    invite_members,
    accept_invitation,
    decline_invitation,
    get_pending_invitations,
)


__all__ = [
    # Exceptions
    'GroupsServiceError',
    'GroupNotFoundError',
    'DuplicateGroupNameError',
    'AlreadyMemberError',
    'NotMemberError',
    'CreatorCannotLeaveError',
    'CannotDemoteCreatorError',
    'CannotRemoveCreatorError',
    'InsufficientPermissionsError',
    'InvalidRecipientsError',
    'InvitationNotFoundError',
    'InvitationAlreadyResolvedError',

    # Membership Management
    'lock_group',
    'add_member',
    'refresh_member_stats',
    'join_group',
    'leave_group',
    'remove_member',
    'get_group_members',

    # Group Management
    'create_group',
    'get_group_by_id',
    'list_groups',
    'get_featured_groups',
    'get_popular_groups',
    'get_user_groups',
    'get_categories',

    # Role Management
    'promote_to_moderator',
    'demote_moderator',

    # Invite Management
    'InviteOutcome',
    'InviteReason',
    'invite_members',
    'accept_invitation',
    'decline_invitation',
    'get_pending_invitations',
]
