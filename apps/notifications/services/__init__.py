"""
Notifications app services layer.

The emitter is called from other apps' services; feed functions back the
notification endpoints.
"""

from .exceptions import (
    NotificationsServiceError,
    NotificationNotFoundError,
)

from .emitter import (
    create_notification,
    notify,
    title_snippet,
)

from .feed import (
    list_notifications,
    get_unread_count,
    mark_notification_read,
    mark_all_notifications_read,
)


__all__ = [
    # Exceptions
    'NotificationsServiceError',
    'NotificationNotFoundError',

    # Emitter
    'create_notification',
    'notify',
    'title_snippet',

    # Feed
    'list_notifications',
    'get_unread_count',
    'mark_notification_read',
    'mark_all_notifications_read',
]
