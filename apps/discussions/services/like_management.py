"""
Like management service.

One toggle for posts, comments and replies: existing likes by the actor
are all removed, otherwise exactly one is added. The like notification
fires only on the transition to liked.
"""

import logging
from collections import namedtuple
from typing import Optional
from uuid import UUID

from django.db import transaction, IntegrityError

from apps.accounts.models import User
from apps.discussions.models import CommentLike, PostLike
from apps.notifications.models import NotificationType
from apps.notifications.services import notify, title_snippet

from .exceptions import (
    CommentNotFoundError,
    ReplyNotFoundError,
    InvalidLikeTargetError,
)
from .post_management import lock_post, require_member
from .reply_tree import ReplyTree

logger = logging.getLogger(__name__)


LikeResult = namedtuple('LikeResult', ['liked', 'likes_count'])


class LikeTarget:
    POST = 'post'
    COMMENT = 'comment'
    REPLY = 'reply'

    ALL = (POST, COMMENT, REPLY)


_NOTIFICATIONS = {
    LikeTarget.POST: (NotificationType.POST_LIKE, 'liked your post: "{title}"'),
    LikeTarget.COMMENT: (NotificationType.COMMENT_LIKE, 'liked your comment on: "{title}"'),
    LikeTarget.REPLY: (NotificationType.REPLY_LIKE, 'liked your reply on: "{title}"'),
}


def _toggle(likes, create) -> bool:
    """Remove every like in `likes`, or create one if there were none."""
    deleted, _ = likes.delete()
    if deleted:
        return False
    try:
        with transaction.atomic():
            create()
    except IntegrityError:
        # A concurrent toggle already added it
        pass
    return True


@transaction.atomic
def toggle_like(
    *,
    target_kind: str,
    post_id: UUID,
    user: User,
    comment_id: Optional[UUID] = None,
    reply_id: Optional[UUID] = None
) -> LikeResult:
    """
    Like or unlike a post, a comment or a reply.

    Args:
        target_kind: 'post', 'comment' or 'reply'
        post_id: Post the target lives on
        user: Member toggling the like
        comment_id: Top-level comment (comment and reply targets)
        reply_id: Reply below comment_id (reply targets)

    Returns:
        LikeResult(liked, likes_count) for the target

    Raises:
        InvalidLikeTargetError: If target_kind is unknown or ids are missing
        PostNotFoundError: If post doesn't exist
        NotMemberError: If user is not a member
        CommentNotFoundError: If the comment isn't on the post
        ReplyNotFoundError: If the reply isn't below the comment
    """
    if target_kind not in LikeTarget.ALL:
        raise InvalidLikeTargetError(f"Unknown like target: {target_kind}")
    if target_kind != LikeTarget.POST and comment_id is None:
        raise InvalidLikeTargetError("comment_id is required")
    if target_kind == LikeTarget.REPLY and reply_id is None:
        raise InvalidLikeTargetError("reply_id is required")

    post = lock_post(post_id)
    require_member(post.group, user, f'like {target_kind}s')

    if target_kind == LikeTarget.POST:
        author_id = post.author_id
        liked = _toggle(
            PostLike.objects.filter(post=post, user=user),
            lambda: PostLike.objects.create(post=post, user=user),
        )
        likes_count = PostLike.objects.filter(post=post).count()
    else:
        tree = ReplyTree.for_post(post)
        target = tree.find_comment(comment_id)
        if target is None:
            raise CommentNotFoundError("Comment not found")
        if target_kind == LikeTarget.REPLY:
            target = tree.find_reply(reply_id, within=target)
            if target is None:
                raise ReplyNotFoundError("Reply not found")

        author_id = target.author_id
        liked = _toggle(
            CommentLike.objects.filter(comment=target, user=user),
            lambda: CommentLike.objects.create(comment=target, user=user),
        )
        likes_count = CommentLike.objects.filter(comment=target).count()

    if liked:
        notification_type, template = _NOTIFICATIONS[target_kind]
        notify(
            recipient=author_id,
            actor=user,
            notification_type=notification_type,
            message=f'{user.get_display_name()} ' + template.format(title=title_snippet(post.title)),
            related_id=post.group_id,
        )

    logger.debug("User %s %s %s on post %s", user.id, 'liked' if liked else 'unliked', target_kind, post.id)
    return LikeResult(liked, likes_count)
