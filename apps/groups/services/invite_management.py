"""
Invite management service.

Friend-gated group invitations. Each invitation is its own workflow record
(pending -> accepted | declined); the recipient is told about it through a
separate group_invite notification.
"""

import logging
from typing import Dict, Iterable, List
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db import transaction, IntegrityError
from django.db.models import QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.groups.authority import normalize_user_id, resolve_role
from apps.groups.models import Group, GroupInvitation, InvitationStatus
from apps.notifications.models import Notification, NotificationType
from apps.notifications.services import notify
from apps.social.services import are_friends

from .exceptions import (
    AlreadyMemberError,
    NotMemberError,
    InvalidRecipientsError,
    InvitationNotFoundError,
    InvitationAlreadyResolvedError,
)
from .membership_management import add_member, lock_group

logger = logging.getLogger(__name__)


class InviteOutcome:
    INVITED = 'invited'
    SKIPPED = 'skipped'
    ERROR = 'error'


class InviteReason:
    INVALID_RECIPIENT = 'invalid_recipient'
    USER_NOT_FOUND = 'user_not_found'
    NOT_FRIEND = 'not_friend'
    ALREADY_MEMBER = 'already_member'
    ALREADY_INVITED = 'already_invited'
    NOTIFICATION_FAILED = 'notification_failed'


def _outcome(user_id, status, reason=None, invitation=None) -> Dict:
    result = {'user_id': user_id, 'status': status}
    if reason:
        result['reason'] = reason
    if invitation is not None:
        result['invitation_id'] = str(invitation.id)
    return result


def _find_user(user_id: str):
    try:
        return User.objects.filter(id=user_id, is_active=True).first()
    except ValidationError:
        return None


def _invite_one(*, group: Group, inviter: User, recipient_id: str) -> Dict:
    recipient = _find_user(recipient_id)
    if recipient is None:
        return _outcome(recipient_id, InviteOutcome.SKIPPED, InviteReason.USER_NOT_FOUND)

    if not are_friends(inviter, recipient):
        return _outcome(recipient_id, InviteOutcome.SKIPPED, InviteReason.NOT_FRIEND)

    if resolve_role(group, recipient).is_member:
        return _outcome(recipient_id, InviteOutcome.SKIPPED, InviteReason.ALREADY_MEMBER)

    pending = GroupInvitation.objects.filter(
        group=group,
        inviter=inviter,
        recipient=recipient,
        status=InvitationStatus.PENDING,
    )
    if pending.exists():
        return _outcome(recipient_id, InviteOutcome.SKIPPED, InviteReason.ALREADY_INVITED)

    try:
        with transaction.atomic():
            invitation = GroupInvitation.objects.create(
                group=group,
                inviter=inviter,
                recipient=recipient,
            )
    except IntegrityError:
        return _outcome(recipient_id, InviteOutcome.SKIPPED, InviteReason.ALREADY_INVITED)

    notification = notify(
        recipient=recipient,
        actor=inviter,
        notification_type=NotificationType.GROUP_INVITE,
        message=f'{inviter.get_display_name()} invited you to join the group "{group.name}"',
        related_id=group.id,
    )
    if notification is None:
        # The recipient would never see it; drop it so the invite can be retried
        invitation.delete()
        return _outcome(recipient_id, InviteOutcome.ERROR, InviteReason.NOTIFICATION_FAILED)

    invitation.notification = notification
    invitation.save(update_fields=['notification'])
    return _outcome(recipient_id, InviteOutcome.INVITED, invitation=invitation)


@transaction.atomic
def invite_members(
    *,
    group_id: UUID,
    inviter: User,
    recipient_ids: Iterable
) -> List[Dict]:
    """
    Invite friends to a group.

    Each recipient is handled independently; partial success is normal.

    Args:
        group_id: UUID of the group
        inviter: Current member sending the invites
        recipient_ids: User ids to invite

    Returns:
        One outcome per recipient: {'user_id', 'status', 'reason'?, 'invitation_id'?}

    Raises:
        InvalidRecipientsError: If no recipients were given
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If inviter is not a member
    """
    recipient_ids = list(recipient_ids or [])
    if not recipient_ids:
        raise InvalidRecipientsError("Recipients list is required")

    group = lock_group(group_id)

    if not resolve_role(group, inviter).is_member:
        raise NotMemberError("Only group members can send invites")

    results = []
    for raw_id in recipient_ids:
        recipient_id = normalize_user_id(raw_id)
        if recipient_id is None:
            results.append(_outcome(raw_id, InviteOutcome.SKIPPED, InviteReason.INVALID_RECIPIENT))
            continue
        results.append(_invite_one(group=group, inviter=inviter, recipient_id=recipient_id))

    logger.info(
        "User %s sent %d invite(s) for group %s",
        inviter.id,
        sum(1 for r in results if r['status'] == InviteOutcome.INVITED),
        group.id
    )
    return results


def _lock_invitation(*, invitation_id: UUID, group: Group, user: User) -> GroupInvitation:
    try:
        return (
            GroupInvitation.objects
            .select_for_update()
            .get(id=invitation_id, group=group, recipient=user)
        )
    except (GroupInvitation.DoesNotExist, ValidationError):
        raise InvitationNotFoundError("Invitation not found")


def _resolve(invitation: GroupInvitation, status: str) -> None:
    invitation.status = status
    invitation.responded_at = timezone.now()
    invitation.save(update_fields=['status', 'responded_at'])

    if invitation.notification_id:
        Notification.objects.filter(pk=invitation.notification_id).update(is_read=True)


@transaction.atomic
def accept_invitation(
    *,
    group_id: UUID,
    invitation_id: UUID,
    user: User
) -> GroupInvitation:
    """
    Accept an invitation and join the group.

    Membership is added directly, bypassing join preconditions; a recipient
    who already joined on their own stays as is. Accepting an invitation
    that is already accepted is a no-op.

    Raises:
        GroupNotFoundError: If group doesn't exist
        InvitationNotFoundError: If the invitation isn't the user's, for this group
        InvitationAlreadyResolvedError: If it was declined
    """
    group = lock_group(group_id)
    invitation = _lock_invitation(invitation_id=invitation_id, group=group, user=user)

    if invitation.status == InvitationStatus.ACCEPTED:
        return invitation
    if invitation.status == InvitationStatus.DECLINED:
        raise InvitationAlreadyResolvedError("Invitation was already declined")

    if not resolve_role(group, user).is_member:
        try:
            add_member(group=group, user=user)
        except AlreadyMemberError:
            pass

    _resolve(invitation, InvitationStatus.ACCEPTED)
    logger.info("User %s accepted invitation %s to group %s", user.id, invitation.id, group.id)

    notify(
        recipient=invitation.inviter_id,
        actor=user,
        notification_type=NotificationType.GROUP_INVITE_ACCEPTED,
        message=f'{user.get_display_name()} accepted your invite to join "{group.name}"',
        related_id=group.id,
    )
    return invitation


@transaction.atomic
def decline_invitation(
    *,
    group_id: UUID,
    invitation_id: UUID,
    user: User
) -> GroupInvitation:
    """
    Decline an invitation. Membership is untouched.

    Declining an invitation that is already declined is a no-op.

    Raises:
        GroupNotFoundError: If group doesn't exist
        InvitationNotFoundError: If the invitation isn't the user's, for this group
        InvitationAlreadyResolvedError: If it was accepted
    """
    group = lock_group(group_id)
    invitation = _lock_invitation(invitation_id=invitation_id, group=group, user=user)

    if invitation.status == InvitationStatus.DECLINED:
        return invitation
    if invitation.status == InvitationStatus.ACCEPTED:
        raise InvitationAlreadyResolvedError("Invitation was already accepted")

    _resolve(invitation, InvitationStatus.DECLINED)

    notify(
        recipient=invitation.inviter_id,
        actor=user,
        notification_type=NotificationType.GROUP_INVITE_DECLINED,
        message=f'{user.get_display_name()} declined your invite to join "{group.name}"',
        related_id=group.id,
    )
    return invitation


def get_pending_invitations(*, user: User) -> QuerySet[GroupInvitation]:
    """Pending invitations addressed to the user, newest first."""
    return (
        GroupInvitation.objects
        .filter(recipient=user, status=InvitationStatus.PENDING, group__is_active=True)
        .select_related('group', 'inviter')
        .order_by('-created_at')
    )
