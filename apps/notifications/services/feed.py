"""
Notification feed service.

Read side of the notification stream: listing, unread counts and read marks.
"""

from typing import Optional
from uuid import UUID

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import QuerySet

from apps.accounts.models import User
from apps.notifications.models import Notification

from .exceptions import NotificationNotFoundError


def list_notifications(*, user: User, limit: Optional[int] = None) -> QuerySet[Notification]:
    """
    Most recent notifications for a user, newest first.

    Args:
        user: Recipient
        limit: Maximum entries (defaults to NOTIFICATION_FEED_LIMIT)
    """
    if limit is None:
        limit = settings.NOTIFICATION_FEED_LIMIT

    return (
        Notification.objects
        .filter(recipient=user)
        .select_related('sender', 'invitation')
        .order_by('-created_at')[:limit]
    )


def get_unread_count(*, user: User) -> int:
    return Notification.objects.filter(recipient=user, is_read=False).count()


@transaction.atomic
def mark_notification_read(*, notification_id: UUID, user: User) -> Notification:
    """
    Mark one of the user's notifications as read.

    Raises:
        NotificationNotFoundError: If it doesn't exist or belongs to another user
    """
    try:
        notification = (
            Notification.objects
            .select_for_update()
            .select_related('sender', 'invitation')
            .get(id=notification_id, recipient=user)
        )
    except (Notification.DoesNotExist, ValidationError):
        raise NotificationNotFoundError("Notification not found")

    if not notification.is_read:
        notification.is_read = True
        notification.save(update_fields=['is_read'])

    return notification


def mark_all_notifications_read(*, user: User) -> int:
    """Mark every unread notification of the user as read. Returns the number updated."""
    return (
        Notification.objects
        .filter(recipient=user, is_read=False)
        .update(is_read=True)
    )
