"""
Authority resolver.

Determines a user's effective role in a group. Membership entries may arrive
as bare identifiers, user records, membership rows or plain dicts (serialized
snapshots, legacy payloads); every shape is normalized to a canonical string
identity before comparison. Resolution has no side effects and never raises:
missing or malformed data resolves to no authority.
"""

from collections import namedtuple
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional
from uuid import UUID

from apps.groups.models import GroupRole


MemberEntry = namedtuple('MemberEntry', ['user_id', 'joined_at', 'source'])

_IDENTITY_KEYS = ('user', 'user_id', 'id', '_id', 'pk')
_MAX_UNWRAP = 5


@dataclass(frozen=True)
class GroupAuthority:
    is_creator: bool = False
    is_moderator: bool = False
    is_member: bool = False

    @property
    def role(self) -> Optional[str]:
        if self.is_creator:
            return GroupRole.CREATOR
        if self.is_moderator:
            return GroupRole.MODERATOR
        if self.is_member:
            return GroupRole.MEMBER
        return None


NO_AUTHORITY = GroupAuthority()


def normalize_user_id(value: Any) -> Optional[str]:
    """
    Reduce any user reference to a canonical string id.

    Accepts UUIDs, strings, ints, user instances, membership rows
    (anything with ``user_id``) and mappings keyed by user/user_id/id/_id/pk.
    Returns None when no identity can be extracted.
    """
    for _ in range(_MAX_UNWRAP):
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, UUID):
            return str(value)
        if isinstance(value, (str, int)):
            text = str(value).strip()
            return text.lower() if text else None
        if isinstance(value, dict):
            if 'user' in value:
                # A membership subdocument: its own id is not the user's
                value = value['user']
                continue
            value = next(
                (value[key] for key in _IDENTITY_KEYS if value.get(key) is not None),
                None
            )
            continue
        if getattr(value, 'user_id', None) is not None:
            value = value.user_id
            continue
        if getattr(value, 'pk', None) is not None:
            value = value.pk
            continue
        return None
    return None


def _joined_at(entry: Any):
    if isinstance(entry, dict):
        return entry.get('joined_at') or entry.get('joinedAt')
    return getattr(entry, 'joined_at', None)


def canonical_members(entries: Iterable[Any], exclude: Any = None) -> List[MemberEntry]:
    """
    Rebuild a member list into canonical (user_id, joined_at) entries.

    Malformed entries are dropped, duplicates keep their first occurrence and
    the user given by ``exclude`` is left out.
    """
    excluded = normalize_user_id(exclude)
    seen = set()
    result = []
    try:
        for entry in entries or ():
            user_id = normalize_user_id(entry)
            if user_id is None or user_id == excluded or user_id in seen:
                continue
            seen.add(user_id)
            result.append(MemberEntry(user_id, _joined_at(entry), entry))
    except TypeError:
        return result
    return result


def _identity_set(entries: Any) -> set:
    try:
        return {
            user_id for user_id in (normalize_user_id(entry) for entry in entries or ())
            if user_id is not None
        }
    except TypeError:
        return set()


def _group_parts(group: Any):
    """Return (creator, moderators, members) for a model instance or a mapping."""
    if isinstance(group, dict):
        return (
            group.get('creator'),
            group.get('moderators') or (),
            group.get('members') or (),
        )

    if getattr(group, 'pk', None) is None:
        return getattr(group, 'creator_id', None), (), ()

    return group.creator_id, group.moderators.all(), group.memberships.all()


def resolve_role(group: Any, user: Any) -> GroupAuthority:
    """
    Resolve creator/moderator/member flags for user in group.

    The creator always carries moderator privilege, and creator or
    moderator always count as members.
    """
    user_id = normalize_user_id(user)
    if group is None or user_id is None:
        return NO_AUTHORITY

    try:
        creator, moderators, members = _group_parts(group)
    except (AttributeError, TypeError, ValueError):
        return NO_AUTHORITY

    is_creator = normalize_user_id(creator) == user_id
    is_moderator = is_creator or user_id in _identity_set(moderators)
    is_member = is_moderator or user_id in _identity_set(members)

    return GroupAuthority(
        is_creator=is_creator,
        is_moderator=is_moderator,
        is_member=is_member,
    )
