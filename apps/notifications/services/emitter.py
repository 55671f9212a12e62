"""
Notification emitter.

Fire-and-forget side-effect sink used by membership, discussion, invitation
and social services. A failed write is logged and discarded so it never
rolls back or fails the action that triggered it.
"""

import logging
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction, DatabaseError

from apps.notifications.models import Notification

logger = logging.getLogger(__name__)


def _pk(value):
    return getattr(value, 'pk', value)


def title_snippet(text: Optional[str]) -> str:
    """Shorten a post title for use inside a notification message."""
    return (text or '')[:settings.NOTIFICATION_SNIPPET_LENGTH]


def create_notification(
    *,
    recipient_id: UUID,
    sender_id: UUID,
    notification_type: str,
    message: str,
    related_id: Optional[UUID] = None
) -> Notification:
    """
    Persist a single unread notification.

    Unlike notify(), errors propagate to the caller.
    """
    return Notification.objects.create(
        recipient_id=recipient_id,
        sender_id=sender_id,
        notification_type=notification_type,
        message=message,
        related_id=related_id,
    )


def notify(
    *,
    recipient,
    actor,
    notification_type: str,
    message: str,
    related_id: Optional[UUID] = None
) -> Optional[Notification]:
    """
    Emit a notification to recipient on behalf of actor.

    Self-directed notifications are suppressed. The write runs in its own
    savepoint so a database failure leaves the surrounding transaction usable.

    Args:
        recipient: User or user id receiving the notification
        actor: User or user id who triggered it
        notification_type: One of NotificationType values
        message: Human-readable text
        related_id: Group/post/request context

    Returns:
        Created Notification, or None when suppressed or on failure
    """
    recipient_id = _pk(recipient)
    actor_id = _pk(actor)

    if recipient_id is None or str(recipient_id) == str(actor_id):
        logger.debug(
            "Suppressed self-directed %s notification for %s",
            notification_type, actor_id
        )
        return None

    try:
        with transaction.atomic():
            return create_notification(
                recipient_id=recipient_id,
                sender_id=actor_id,
                notification_type=notification_type,
                message=message,
                related_id=related_id,
            )
    except (DatabaseError, ValidationError):
        logger.exception(
            "Failed to create %s notification for %s from %s",
            notification_type, recipient_id, actor_id
        )
        return None
