"""
Domain-specific exceptions for groups app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class GroupsServiceError(Exception):
    """Base exception for all groups service errors."""
    pass


class GroupNotFoundError(GroupsServiceError):
    """Raised when a group does not exist or is inactive."""
    pass


class DuplicateGroupNameError(GroupsServiceError):
    """Raised when a group with the same name (case-insensitive) exists."""
    pass


class AlreadyMemberError(GroupsServiceError):
    """Raised when a user tries to join a group they already belong to."""
    pass


class NotMemberError(GroupsServiceError):
    """Raised when the actor or the target user is not a member."""
    pass


class CreatorCannotLeaveError(GroupsServiceError):
    """Raised when a group creator tries to leave their group."""
    pass


class CannotDemoteCreatorError(GroupsServiceError):
    """Raised when attempting to demote the group creator."""
    pass


class CannotRemoveCreatorError(GroupsServiceError):
    """Raised when attempting to remove the group creator."""
    pass


class InsufficientPermissionsError(GroupsServiceError):
    """Raised when a user lacks required permissions for an action."""
    pass


class InvalidRecipientsError(GroupsServiceError):
    """Raised when an invite call carries no recipients."""
    pass


class InvitationNotFoundError(GroupsServiceError):
    """Raised when an invitation does not exist, targets another group or belongs to someone else."""
    pass


class InvitationAlreadyResolvedError(GroupsServiceError):
    """Raised when resolving an invitation that was already resolved the other way."""
    pass
