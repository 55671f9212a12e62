"""
Social app services layer.

Friend requests, friendships and follows. Other apps only need
are_friends().
"""

from .exceptions import (
    SocialServiceError,
    UserNotFoundError,
    SelfRelationshipError,
    AlreadyFriendsError,
    FriendRequestExistsError,
    FriendRequestNotFoundError,
    AlreadyFollowingError,
    NotFollowingError,
    NotFriendsError,
)

from .friendship import (
    get_active_user,
    are_friends,
    send_friend_request,
    list_incoming_requests,
    respond_to_friend_request,
    list_friends,
    remove_friend,
)

from .following import (
    follow_user,
    unfollow_user,
)


__all__ = [
    # Exceptions
    'SocialServiceError',
    'UserNotFoundError',
    'SelfRelationshipError',
    'AlreadyFriendsError',
    'FriendRequestExistsError',
    'FriendRequestNotFoundError',
    'AlreadyFollowingError',
    'NotFollowingError',
    'NotFriendsError',

    # Friendship
    'get_active_user',
    'are_friends',
    'send_friend_request',
    'list_incoming_requests',
    'respond_to_friend_request',
    'list_friends',
    'remove_friend',

    # Following
    'follow_user',
    'unfollow_user',
]
