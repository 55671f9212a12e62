"""
Group management service.

Handles group creation, lookup and discovery listings.
"""

import logging
from typing import Iterable, List, Optional
from uuid import UUID

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Prefetch, Q, QuerySet

from apps.accounts.models import User
from apps.groups.models import Group, GroupCategory, GroupMembership, DEFAULT_GROUP_RULES

from .exceptions import (
    GroupNotFoundError,
    DuplicateGroupNameError,
)
from .membership_management import add_member

logger = logging.getLogger(__name__)


SORT_ORDERINGS = {
    'popular': ['-member_count', '-last_activity'],
    'recent': ['-created_at'],
    'active': ['-last_activity'],
}


def _normalize_tags(tags: Optional[Iterable[str]]) -> List[str]:
    result = []
    for tag in tags or []:
        tag = str(tag).strip().lower()
        if tag and tag not in result:
            result.append(tag)
    return result


@transaction.atomic
def create_group(
    *,
    name: str,
    description: str,
    category: str,
    creator: User,
    tags: Optional[Iterable[str]] = None,
    rules: Optional[str] = None,
    is_private: bool = False
) -> Group:
    """
    Create a new group with the creator as sole member and moderator.

    Args:
        name: Group name (unique, case-insensitive)
        description: Group description
        category: One of GroupCategory values
        creator: User who owns the group
        tags: Optional free-form tags (stored lower-cased)
        rules: Optional community rules text
        is_private: Whether the group is private

    Returns:
        Created Group instance

    Raises:
        DuplicateGroupNameError: If the name is already taken
    """
    name = name.strip()
    if Group.objects.filter(name__iexact=name).exists():
        raise DuplicateGroupNameError("A group with this name already exists")

    group = Group.objects.create(
        name=name,
        description=description,
        category=category,
        tags=_normalize_tags(tags),
        rules=rules or DEFAULT_GROUP_RULES,
        is_private=is_private,
        creator=creator,
    )
    group.moderators.add(creator)
    add_member(group=group, user=creator)

    logger.info("Group %s created by %s", group.id, creator.id)
    return group


def get_group_by_id(*, group_id: UUID) -> Group:
    """
    Get an active group by ID with creator, moderators and members preloaded.

    Raises:
        GroupNotFoundError: If group doesn't exist
    """
    try:
        return (
            Group.objects
            .select_related('creator')
            .prefetch_related(
                'moderators',
                Prefetch(
                    'memberships',
                    queryset=GroupMembership.objects.select_related('user')
                )
            )
            .get(id=group_id, is_active=True)
        )
    except (Group.DoesNotExist, ValidationError):
        raise GroupNotFoundError(f"Group with ID {group_id} not found")


def list_groups(
    *,
    search: Optional[str] = None,
    category: Optional[str] = None,
    sort: str = 'popular'
) -> QuerySet[Group]:
    """
    Search and filter active groups.

    Args:
        search: Case-insensitive match on name or description
        category: Exact category filter
        sort: 'popular' (default), 'recent' or 'active'
    """
    queryset = Group.objects.filter(is_active=True).select_related('creator')

    if search:
        queryset = queryset.filter(
            Q(name__icontains=search) | Q(description__icontains=search)
        )

    if category:
        queryset = queryset.filter(category=category)

    ordering = SORT_ORDERINGS.get(sort, ['-member_count'])
    return queryset.order_by(*ordering)


def get_featured_groups() -> QuerySet[Group]:
    """Large, recently active groups."""
    return (
        Group.objects
        .filter(is_active=True, member_count__gte=settings.FEATURED_GROUP_MIN_MEMBERS)
        .select_related('creator')
        .order_by('-member_count', '-last_activity')[:settings.FEATURED_GROUPS_LIMIT]
    )


def get_popular_groups() -> QuerySet[Group]:
    return (
        Group.objects
        .filter(is_active=True)
        .select_related('creator')
        .order_by('-member_count', '-last_activity')[:settings.POPULAR_GROUPS_LIMIT]
    )


def get_user_groups(*, user: User) -> QuerySet[Group]:
    """Groups where the user is a member."""
    return (
        Group.objects
        .filter(memberships__user=user)
        .select_related('creator')
        .distinct()
        .order_by('-last_activity')
    )


def get_categories() -> List[str]:
    return [value for value, _label in GroupCategory.choices]
