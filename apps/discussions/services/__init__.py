"""
Discussions app services layer.

Posts, the comment/reply tree and likes. Every mutation locks the post (or
reads the group) and re-checks authority with the groups authority
resolver before writing.
"""

from .exceptions import (
    DiscussionsServiceError,
    GroupNotFoundError,
    PostNotFoundError,
    CommentNotFoundError,
    ReplyNotFoundError,
    NotMemberError,
    InsufficientPermissionsError,
    InvalidLikeTargetError,
    InvalidContentError,
)

from .reply_tree import (
    ReplyTree,
    node_key,
)

from .post_management import (
    create_post,
    get_post,
    list_posts,
    list_pinned_posts,
    delete_post,
    pin_post,
    unpin_post,
)

from .comment_management import (
    add_comment,
    delete_comment,
    add_reply,
    delete_reply,
)

from .like_management import (
    LikeResult,
    LikeTarget,
    toggle_like,
)


__all__ = [
    # Exceptions
    'DiscussionsServiceError',
    'GroupNotFoundError',
    'PostNotFoundError',
    'CommentNotFoundError',
    'ReplyNotFoundError',
    'NotMemberError',
    'InsufficientPermissionsError',
    'InvalidLikeTargetError',
    'InvalidContentError',

    # Reply tree
    'ReplyTree',
    'node_key',

    # Post Management
    'create_post',
    'get_post',
    'list_posts',
    'list_pinned_posts',
    'delete_post',
    'pin_post',
    'unpin_post',

    # Comment Management
    'add_comment',
    'delete_comment',
    'add_reply',
    'delete_reply',

    # Like Management
    'LikeResult',
    'LikeTarget',
    'toggle_like',
]
