"""
Comment management service.

Comments and arbitrarily nested replies. Authorization always uses the
post's group; a reply notifies the author of whatever it answers directly.
"""

import logging
from uuid import UUID

from django.db import transaction

from apps.accounts.models import User
from apps.discussions.models import Comment
from apps.groups.authority import resolve_role
from apps.notifications.models import NotificationType
from apps.notifications.services import notify, title_snippet

from .exceptions import (
    CommentNotFoundError,
    ReplyNotFoundError,
    InsufficientPermissionsError,
)
from .post_management import clean_text, lock_post, require_member
from .reply_tree import ReplyTree

logger = logging.getLogger(__name__)


def _can_delete(group, user: User, node: Comment) -> bool:
    return node.author_id == user.id or resolve_role(group, user).is_moderator


@transaction.atomic
def add_comment(*, post_id: UUID, user: User, body: str) -> Comment:
    """
    Add a top-level comment to a post.

    Raises:
        PostNotFoundError: If post doesn't exist
        NotMemberError: If user is not a member
        InvalidContentError: If body is blank or too long
    """
    post = lock_post(post_id)
    require_member(post.group, user, 'comment')
    body = clean_text(body, field='Content', max_length=Comment.BODY_MAX_LENGTH)

    comment = Comment.objects.create(post=post, author=user, body=body)
    post.group.touch()

    notify(
        recipient=post.author_id,
        actor=user,
        notification_type=NotificationType.POST_COMMENT,
        message=f'{user.get_display_name()} commented on your post: "{title_snippet(post.title)}"',
        related_id=post.group_id,
    )
    return comment


@transaction.atomic
def delete_comment(*, post_id: UUID, comment_id: UUID, user: User) -> int:
    """
    Delete a top-level comment and its whole reply subtree.

    Returns:
        Number of comments/replies removed

    Raises:
        PostNotFoundError: If post doesn't exist
        CommentNotFoundError: If comment isn't a top-level comment of the post
        InsufficientPermissionsError: If user is neither its author nor a moderator
    """
    post = lock_post(post_id)
    tree = ReplyTree.for_post(post)

    comment = tree.find_comment(comment_id)
    if comment is None:
        raise CommentNotFoundError("Comment not found")
    if not _can_delete(post.group, user, comment):
        raise InsufficientPermissionsError("Not allowed to delete this comment")

    ids = tree.subtree_ids(comment)
    Comment.objects.filter(id__in=ids).delete()
    post.group.touch()

    logger.info("Comment %s (%d node(s)) deleted from post %s by %s", comment.id, len(ids), post.id, user.id)
    return len(ids)


@transaction.atomic
def add_reply(*, post_id: UUID, target_id: UUID, user: User, body: str) -> Comment:
    """
    Reply to a comment or to any reply beneath one.

    The target is looked up as a top-level comment first, then by
    depth-first search through every comment's replies. The new reply
    becomes a child of the target, one level deeper.

    Raises:
        PostNotFoundError: If post doesn't exist
        NotMemberError: If user is not a member
        CommentNotFoundError: If no comment or reply has that id
        InvalidContentError: If body is blank or too long
    """
    post = lock_post(post_id)
    require_member(post.group, user, 'reply to comments')
    body = clean_text(body, field='Content', max_length=Comment.BODY_MAX_LENGTH)

    tree = ReplyTree.for_post(post)
    comment, replied = tree.find_target(target_id)
    if comment is None:
        raise CommentNotFoundError("Comment not found")

    target = replied or comment
    reply = Comment.objects.create(post=post, parent=target, author=user, body=body)
    post.group.touch()

    segment = 'reply' if replied is not None else 'comment'
    notify(
        recipient=target.author_id,
        actor=user,
        notification_type=NotificationType.COMMENT_REPLY,
        message=f'{user.get_display_name()} replied to your {segment} on: "{title_snippet(post.title)}"',
        related_id=post.group_id,
    )
    return reply


@transaction.atomic
def delete_reply(*, post_id: UUID, comment_id: UUID, reply_id: UUID, user: User) -> int:
    """
    Delete a reply found under the given comment, with its nested replies.

    Raises:
        PostNotFoundError: If post doesn't exist
        CommentNotFoundError: If comment isn't a top-level comment of the post
        ReplyNotFoundError: If the reply isn't below that comment
        InsufficientPermissionsError: If user is neither its author nor a moderator
    """
    post = lock_post(post_id)
    tree = ReplyTree.for_post(post)

    comment = tree.find_comment(comment_id)
    if comment is None:
        raise CommentNotFoundError("Comment not found")
    reply = tree.find_reply(reply_id, within=comment)
    if reply is None:
        raise ReplyNotFoundError("Reply not found")
    if not _can_delete(post.group, user, reply):
        raise InsufficientPermissionsError("Not allowed to delete this reply")

    ids = tree.subtree_ids(reply)
    Comment.objects.filter(id__in=ids).delete()
    post.group.touch()

    logger.info("Reply %s (%d node(s)) deleted from post %s by %s", reply.id, len(ids), post.id, user.id)
    return len(ids)
