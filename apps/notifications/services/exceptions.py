"""
Domain-specific exceptions for notifications app.

Emission never raises these; they cover the read side of the feed.
"""


class NotificationsServiceError(Exception):
    """Base exception for all notifications service errors."""
    pass


class NotificationNotFoundError(NotificationsServiceError):
    """Raised when a notification does not exist or belongs to someone else."""
    pass
