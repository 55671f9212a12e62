"""
Service layer unit tests for notifications app.

Tests cover:
- Self-notification suppression
- Failure isolation of the emitter
- Feed listing, counts and read marks
"""

import logging
import pytest
from unittest.mock import patch

from django.db import DatabaseError, transaction

from apps.groups.models import GroupCategory, GroupInvitation
from apps.groups.services import create_group
from apps.notifications.models import Notification, NotificationType
from apps.notifications.services import (
    notify,
    title_snippet,
    list_notifications,
    get_unread_count,
    mark_notification_read,
    mark_all_notifications_read,
)
from apps.notifications.services.exceptions import NotificationNotFoundError
from apps.notifications.serializers import NotificationSerializer


def emit(recipient, actor, message='hello'):
    return notify(
        recipient=recipient,
        actor=actor,
        notification_type=NotificationType.NEW_FOLLOWER,
        message=message,
    )


@pytest.mark.django_db
class TestNotify:

    def test_creates_unread_notification(self, recipient, actor):
        notification = emit(recipient, actor)

        assert notification.recipient == recipient
        assert notification.sender == actor
        assert notification.is_read is False

    def test_accepts_ids(self, recipient, actor):
        notification = emit(recipient.id, actor.id)

        assert notification.recipient_id == recipient.id

    def test_self_notification_suppressed(self, actor):
        assert emit(actor, actor) is None
        assert emit(actor.id, str(actor.id)) is None
        assert not Notification.objects.exists()

    def test_failure_is_swallowed_and_logged(self, recipient, actor, caplog):
        with patch(
            'apps.notifications.services.emitter.create_notification',
            side_effect=DatabaseError('disk full'),
        ):
            with caplog.at_level(logging.ERROR, logger='apps.notifications.services.emitter'):
                assert emit(recipient, actor) is None

        assert 'Failed to create new_follower notification' in caplog.text

    def test_failure_leaves_outer_transaction_usable(self, recipient, actor):
        with transaction.atomic():
            with patch(
                'apps.notifications.services.emitter.create_notification',
                side_effect=DatabaseError,
            ):
                assert emit(recipient, actor) is None
            emit(recipient, actor)

        assert Notification.objects.filter(recipient=recipient).count() == 1

    def test_title_snippet(self, settings):
        settings.NOTIFICATION_SNIPPET_LENGTH = 5

        assert title_snippet('Dune Messiah') == 'Dune '
        assert title_snippet(None) == ''


@pytest.mark.django_db
class TestFeed:

    def test_list_bounded_by_setting(self, recipient, actor, settings):
        settings.NOTIFICATION_FEED_LIMIT = 3
        for i in range(5):
            emit(recipient, actor, message=f'n{i}')

        messages = [n.message for n in list_notifications(user=recipient)]

        assert len(messages) == 3
        assert set(messages) <= {f'n{i}' for i in range(5)}

    def test_unread_count_and_mark_read(self, recipient, actor):
        first = emit(recipient, actor)
        emit(recipient, actor)
        assert get_unread_count(user=recipient) == 2

        mark_notification_read(notification_id=first.id, user=recipient)
        assert get_unread_count(user=recipient) == 1

        # Marking again is harmless
        mark_notification_read(notification_id=first.id, user=recipient)
        assert get_unread_count(user=recipient) == 1

    def test_mark_read_other_users_notification(self, recipient, actor):
        notification = emit(recipient, actor)

        with pytest.raises(NotificationNotFoundError):
            mark_notification_read(notification_id=notification.id, user=actor)

    def test_mark_all_read(self, recipient, actor):
        for _ in range(3):
            emit(recipient, actor)

        assert mark_all_notifications_read(user=recipient) == 3
        assert get_unread_count(user=recipient) == 0
        assert mark_all_notifications_read(user=recipient) == 0

    def test_feed_serializes_without_extra_queries(self, recipient, actor, django_assert_num_queries):
        group = create_group(
            name='Mystery Readers',
            description='Whodunits',
            category=GroupCategory.MYSTERY,
            creator=actor,
        )
        invite = notify(
            recipient=recipient,
            actor=actor,
            notification_type=NotificationType.GROUP_INVITE,
            message='join us',
            related_id=group.id,
        )
        invitation = GroupInvitation.objects.create(
            group=group, inviter=actor, recipient=recipient, notification=invite,
        )
        emit(recipient, actor)

        feed = list(list_notifications(user=recipient))
        with django_assert_num_queries(0):
            data = NotificationSerializer(feed, many=True).data

        by_id = {entry['id']: entry for entry in data}
        assert by_id[str(invite.id)]['invitation'] == {'id': str(invitation.id), 'status': 'pending'}
        assert sum(entry['invitation'] is None for entry in data) == 1
