"""
Domain-specific exceptions for social app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class SocialServiceError(Exception):
    """Base exception for all social service errors."""
    pass


class UserNotFoundError(SocialServiceError):
    """Raised when the other user does not exist or is inactive."""
    pass


class SelfRelationshipError(SocialServiceError):
    """Raised when a user targets themselves."""
    pass


class AlreadyFriendsError(SocialServiceError):
    pass


class FriendRequestExistsError(SocialServiceError):
    """Raised when a pending request already exists in either direction."""
    pass


class FriendRequestNotFoundError(SocialServiceError):
    pass


class AlreadyFollowingError(SocialServiceError):
    pass


class NotFollowingError(SocialServiceError):
    pass


class NotFriendsError(SocialServiceError):
    pass
