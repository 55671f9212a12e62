"""
Post management service.

Posts are created by members and deleted, pinned or unpinned by
moderators. Listings are member-gated; pinned highlights come back empty
for non-members rather than failing.
"""

import logging
from typing import List, Optional
from uuid import UUID

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Count, QuerySet

from apps.accounts.models import User
from apps.discussions.models import Post, PostType
from apps.groups.authority import GroupAuthority, resolve_role
from apps.groups.models import Group

from .exceptions import (
    GroupNotFoundError,
    PostNotFoundError,
    NotMemberError,
    InsufficientPermissionsError,
    InvalidContentError,
)

logger = logging.getLogger(__name__)


def clean_text(value: Optional[str], *, field: str, max_length: int) -> str:
    """
    Raises:
        InvalidContentError: If value is blank or longer than max_length
    """
    value = (value or '').strip()
    if not value:
        raise InvalidContentError(f"{field} is required")
    if len(value) > max_length:
        raise InvalidContentError(f"{field} must be at most {max_length} characters")
    return value


def get_group(group_id: UUID) -> Group:
    try:
        return Group.objects.get(id=group_id, is_active=True)
    except (Group.DoesNotExist, ValidationError):
        raise GroupNotFoundError(f"Group with ID {group_id} not found")


def lock_post(post_id: UUID) -> Post:
    """
    Fetch a post with a row-level lock, group preloaded.

    Raises:
        PostNotFoundError: If post doesn't exist
    """
    try:
        return (
            Post.objects
            .select_for_update(of=('self',))
            .select_related('group')
            .get(id=post_id)
        )
    except (Post.DoesNotExist, ValidationError):
        raise PostNotFoundError("Post not found")


def require_member(group: Group, user: User, action: str) -> GroupAuthority:
    authority = resolve_role(group, user)
    if not authority.is_member:
        logger.warning(
            "Refused %s in group %s for user %s (creator=%s, moderator=%s, member=%s)",
            action, group.id, user.id,
            authority.is_creator, authority.is_moderator, authority.is_member
        )
        raise NotMemberError(f"You must be a member to {action}")
    return authority


def require_moderator(group: Group, user: User, action: str) -> GroupAuthority:
    authority = resolve_role(group, user)
    if not authority.is_moderator:
        logger.warning(
            "Refused %s in group %s for user %s (creator=%s, moderator=%s, member=%s)",
            action, group.id, user.id,
            authority.is_creator, authority.is_moderator, authority.is_member
        )
        raise InsufficientPermissionsError(f"Only moderators can {action}")
    return authority


@transaction.atomic
def create_post(
    *,
    group_id: UUID,
    author: User,
    title: str,
    body: str,
    post_type: str = PostType.DISCUSSION
) -> Post:
    """
    Create a post in a group.

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If author is not a member
        InvalidContentError: If title/body are blank or too long, or type is unknown
    """
    group = get_group(group_id)
    require_member(group, author, 'create posts')

    title = clean_text(title, field='Title', max_length=Post.TITLE_MAX_LENGTH)
    body = clean_text(body, field='Content', max_length=Post.BODY_MAX_LENGTH)
    post_type = post_type or PostType.DISCUSSION
    if post_type not in PostType.values:
        raise InvalidContentError(f"Unknown post type: {post_type}")

    post = Post.objects.create(
        group=group,
        author=author,
        title=title,
        body=body,
        post_type=post_type,
    )
    group.touch()

    logger.info("Post %s created in group %s by %s", post.id, group.id, author.id)
    return post


def get_post(*, post_id: UUID, user: User) -> Post:
    """
    Raises:
        PostNotFoundError: If post doesn't exist
        NotMemberError: If user is not a member of the post's group
    """
    try:
        post = Post.objects.select_related('group', 'author').get(id=post_id)
    except (Post.DoesNotExist, ValidationError):
        raise PostNotFoundError("Post not found")

    require_member(post.group, user, 'view group posts')
    return post


def list_posts(
    *,
    group_id: UUID,
    user: User,
    post_type: Optional[str] = None
) -> QuerySet[Post]:
    """
    Posts of a group, pinned first then newest.

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If user is not a member
    """
    group = get_group(group_id)
    require_member(group, user, 'view group posts')

    queryset = (
        Post.objects
        .filter(group=group)
        .select_related('author')
        .annotate(likes_count=Count('likes', distinct=True))
    )
    if post_type:
        queryset = queryset.filter(post_type=post_type)
    return queryset.order_by('-is_pinned', '-created_at')


def list_pinned_posts(*, group_id: UUID, user: User) -> List[Post]:
    """
    Community highlights: newest pinned posts, bounded.

    Non-members get an empty list.

    Raises:
        GroupNotFoundError: If group doesn't exist
    """
    group = get_group(group_id)
    if not resolve_role(group, user).is_member:
        logger.info("Pinned posts of group %s requested by non-member %s", group.id, user.id)
        return []

    return list(
        Post.objects
        .filter(group=group, is_pinned=True)
        .select_related('author')
        .order_by('-created_at')[:settings.PINNED_POSTS_LIMIT]
    )


@transaction.atomic
def delete_post(*, post_id: UUID, user: User) -> None:
    """
    Delete a post with its whole comment/reply tree and all likes.

    Raises:
        PostNotFoundError: If post doesn't exist
        InsufficientPermissionsError: If user lacks moderator privilege
    """
    post = lock_post(post_id)
    group = post.group
    require_moderator(group, user, 'delete posts')

    post.delete()
    group.touch()

    logger.info("Post %s deleted from group %s by %s", post_id, group.id, user.id)


def _set_pinned(post_id: UUID, user: User, pinned: bool) -> Post:
    post = lock_post(post_id)
    require_moderator(post.group, user, 'pin posts' if pinned else 'unpin posts')

    if post.is_pinned != pinned:
        post.is_pinned = pinned
        post.save(update_fields=['is_pinned', 'updated_at'])
        post.group.touch()
        logger.info("Post %s %s by %s", post.id, 'pinned' if pinned else 'unpinned', user.id)
    return post


@transaction.atomic
def pin_post(*, post_id: UUID, user: User) -> Post:
    """
    Pin a post. Pinning a pinned post is a no-op.

    Raises:
        PostNotFoundError: If post doesn't exist
        InsufficientPermissionsError: If user lacks moderator privilege
    """
    return _set_pinned(post_id, user, True)


@transaction.atomic
def unpin_post(*, post_id: UUID, user: User) -> Post:
    """Unpin a post. Unpinning an unpinned post is a no-op."""
    return _set_pinned(post_id, user, False)
