"""
Domain-specific exceptions for discussions app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class DiscussionsServiceError(Exception):
    """Base exception for all discussions service errors."""
    pass


class GroupNotFoundError(DiscussionsServiceError):
    pass


class PostNotFoundError(DiscussionsServiceError):
    pass


class CommentNotFoundError(DiscussionsServiceError):
    """Raised when a top-level comment (or reply target) does not exist on the post."""
    pass


class ReplyNotFoundError(DiscussionsServiceError):
    """Raised when a reply isn't found under the given comment."""
    pass


class NotMemberError(DiscussionsServiceError):
    """Raised when the actor is not a member of the post's group."""
    pass


class InsufficientPermissionsError(DiscussionsServiceError):
    """Raised when the actor is neither the author nor a moderator."""
    pass


class InvalidLikeTargetError(DiscussionsServiceError):
    pass


class InvalidContentError(DiscussionsServiceError):
    """Raised for blank or over-long titles and bodies, or an unknown post type."""
    pass
