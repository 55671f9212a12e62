"""
Service layer unit tests for groups app.

Tests cover:
- Group creation and discovery listings
- Membership invariants (member_count, no duplicates, creator protection)
- Role management
"""

import pytest
from uuid import uuid4

from apps.groups.models import Group, GroupMembership, GroupCategory, DEFAULT_GROUP_RULES
from apps.groups.authority import resolve_role
from apps.groups.services import (
    create_group,
    get_group_by_id,
    list_groups,
    get_user_groups,
    get_categories,
    join_group,
    leave_group,
    remove_member,
    get_group_members,
    promote_to_moderator,
    demote_moderator,
)
from apps.groups.services.exceptions import (
    GroupNotFoundError,
    DuplicateGroupNameError,
    AlreadyMemberError,
    NotMemberError,
    CreatorCannotLeaveError,
    CannotDemoteCreatorError,
    CannotRemoveCreatorError,
    InsufficientPermissionsError,
)


def assert_member_count_consistent(group):
    group.refresh_from_db()
    assert group.member_count == GroupMembership.objects.filter(group=group).count()


# =============================================================================
# Group Management Service Tests
# =============================================================================

@pytest.mark.django_db
class TestGroupManagement:
    """Tests for group_management.py service functions."""

    def test_create_group_makes_creator_sole_member_and_moderator(self, group, creator):
        group.refresh_from_db()

        assert group.member_count == 1
        assert list(group.moderators.all()) == [creator]
        assert GroupMembership.objects.filter(group=group, user=creator).count() == 1
        assert group.rules == DEFAULT_GROUP_RULES
        assert group.tags == ['space', 'robots']
        assert resolve_role(group, creator).is_creator

    def test_create_group_duplicate_name_case_insensitive(self, group, creator):
        with pytest.raises(DuplicateGroupNameError):
            create_group(
                name='sci-fi circle',
                description='Again',
                category=GroupCategory.SCIENCE_FICTION,
                creator=creator,
            )

    def test_get_group_by_id_not_found(self, db):
        with pytest.raises(GroupNotFoundError):
            get_group_by_id(group_id=uuid4())

    def test_get_group_by_id_malformed(self, db):
        with pytest.raises(GroupNotFoundError):
            get_group_by_id(group_id='not-a-uuid')

    def test_list_groups_search_and_category(self, group, creator):
        create_group(
            name='Poetry Corner',
            description='Verse of all kinds',
            category=GroupCategory.POETRY,
            creator=creator,
        )

        assert [g.name for g in list_groups(search='VERSE')] == ['Poetry Corner']
        assert [g.name for g in list_groups(category=GroupCategory.SCIENCE_FICTION)] == ['Sci-Fi Circle']

    def test_list_groups_popular_sort(self, group_with_members, creator):
        create_group(
            name='Quiet Club',
            description='Small group',
            category=GroupCategory.PLAYS,
            creator=creator,
        )

        names = [g.name for g in list_groups(sort='popular')]
        assert names == ['Sci-Fi Circle', 'Quiet Club']

    def test_get_user_groups(self, group_with_members, member, outsider):
        assert list(get_user_groups(user=member)) == [group_with_members]
        assert list(get_user_groups(user=outsider)) == []

    def test_categories(self):
        categories = get_categories()

        assert 'Romance' in categories
        assert 'Non-fiction' in categories
        assert len(categories) == 19


# =============================================================================
# Membership Management Service Tests
# =============================================================================

@pytest.mark.django_db
class TestJoinGroup:

    def test_join_group(self, group, member):
        membership = join_group(group_id=group.id, user=member)

        assert membership.user == member
        assert resolve_role(Group.objects.get(pk=group.pk), member).is_member
        assert_member_count_consistent(group)

    def test_join_twice_conflicts(self, group, member):
        join_group(group_id=group.id, user=member)

        with pytest.raises(AlreadyMemberError):
            join_group(group_id=group.id, user=member)
        assert GroupMembership.objects.filter(group=group, user=member).count() == 1

    def test_creator_cannot_join(self, group, creator):
        with pytest.raises(AlreadyMemberError, match='creator'):
            join_group(group_id=group.id, user=creator)

    def test_moderator_cannot_join(self, group_with_members, moderator):
        with pytest.raises(AlreadyMemberError, match='moderator'):
            join_group(group_id=group_with_members.id, user=moderator)

    def test_join_missing_group(self, member):
        with pytest.raises(GroupNotFoundError):
            join_group(group_id=uuid4(), user=member)

    def test_join_inactive_group(self, group, member):
        group.is_active = False
        group.save(update_fields=['is_active'])

        with pytest.raises(GroupNotFoundError):
            join_group(group_id=group.id, user=member)
        assert not GroupMembership.objects.filter(group=group, user=member).exists()


@pytest.mark.django_db
class TestLeaveGroup:

    def test_leave_then_rejoin(self, group, member):
        join_group(group_id=group.id, user=member)

        group = leave_group(group_id=group.id, user=member)
        assert group.member_count == 1
        assert not resolve_role(Group.objects.get(pk=group.pk), member).is_member

        join_group(group_id=group.id, user=member)
        assert_member_count_consistent(group)
        assert group.member_count == 2

    def test_creator_cannot_leave(self, group, creator):
        with pytest.raises(CreatorCannotLeaveError):
            leave_group(group_id=group.id, user=creator)
        assert resolve_role(Group.objects.get(pk=group.pk), creator).is_member

    def test_moderator_leaving_drops_moderator_role(self, group_with_members, moderator):
        leave_group(group_id=group_with_members.id, user=moderator)

        group = Group.objects.get(pk=group_with_members.pk)
        assert not group.moderators.filter(pk=moderator.pk).exists()
        assert resolve_role(group, moderator).role is None

    def test_leave_when_not_member_is_noop(self, group, outsider):
        group = leave_group(group_id=group.id, user=outsider)

        assert group.member_count == 1

    def test_leave_normalizes_member_count(self, group, member):
        """A drifted counter is re-derived from the membership rows."""
        join_group(group_id=group.id, user=member)
        Group.objects.filter(pk=group.pk).update(member_count=99)

        group = leave_group(group_id=group.id, user=member)

        assert group.member_count == 1
        assert_member_count_consistent(group)


@pytest.mark.django_db
class TestRemoveMember:

    def test_moderator_removes_member(self, group_with_members, moderator, member):
        group = remove_member(group_id=group_with_members.id, user_id=member.id, removed_by=moderator)

        assert group.member_count == 2
        assert not GroupMembership.objects.filter(group=group, user=member).exists()

    def test_cannot_remove_creator(self, group_with_members, moderator, creator):
        with pytest.raises(CannotRemoveCreatorError):
            remove_member(group_id=group_with_members.id, user_id=creator.id, removed_by=moderator)
        assert GroupMembership.objects.filter(group=group_with_members, user=creator).exists()

    def test_plain_member_cannot_remove(self, group_with_members, member, moderator):
        with pytest.raises(InsufficientPermissionsError):
            remove_member(group_id=group_with_members.id, user_id=moderator.id, removed_by=member)

    def test_remove_non_member(self, group_with_members, creator, outsider):
        with pytest.raises(NotMemberError):
            remove_member(group_id=group_with_members.id, user_id=outsider.id, removed_by=creator)

    def test_removing_moderator_clears_role(self, group_with_members, creator, moderator):
        remove_member(group_id=group_with_members.id, user_id=moderator.id, removed_by=creator)

        assert not Group.objects.get(pk=group_with_members.pk).moderators.filter(pk=moderator.pk).exists()

    def test_get_group_members_oldest_first(self, group_with_members, creator, moderator, member):
        users = [m.user for m in get_group_members(group_id=group_with_members.id)]

        assert users == [creator, moderator, member]


# =============================================================================
# Role Management Service Tests
# =============================================================================

@pytest.mark.django_db
class TestRoles:

    def test_promote_member(self, group_with_members, creator, member):
        promote_to_moderator(group_id=group_with_members.id, user_id=member.id, promoted_by=creator)

        group = Group.objects.get(pk=group_with_members.pk)
        assert resolve_role(group, member).is_moderator

    def test_promote_twice_is_noop(self, group_with_members, creator, moderator):
        promote_to_moderator(group_id=group_with_members.id, user_id=moderator.id, promoted_by=creator)

        assert group_with_members.moderators.filter(pk=moderator.pk).count() == 1

    def test_promote_non_member(self, group_with_members, creator, outsider):
        with pytest.raises(NotMemberError):
            promote_to_moderator(group_id=group_with_members.id, user_id=outsider.id, promoted_by=creator)

    def test_member_cannot_promote(self, group_with_members, member, outsider):
        with pytest.raises(InsufficientPermissionsError):
            promote_to_moderator(group_id=group_with_members.id, user_id=member.id, promoted_by=member)

    def test_demote_moderator_keeps_membership(self, group_with_members, creator, moderator):
        demote_moderator(group_id=group_with_members.id, user_id=moderator.id, demoted_by=creator)

        group = Group.objects.get(pk=group_with_members.pk)
        authority = resolve_role(group, moderator)
        assert not authority.is_moderator
        assert authority.is_member

    def test_cannot_demote_creator(self, group_with_members, moderator, creator):
        with pytest.raises(CannotDemoteCreatorError):
            demote_moderator(group_id=group_with_members.id, user_id=creator.id, demoted_by=moderator)
        assert resolve_role(Group.objects.get(pk=group_with_members.pk), creator).is_moderator

    def test_demote_plain_member_is_noop(self, group_with_members, creator, member):
        demote_moderator(group_id=group_with_members.id, user_id=member.id, demoted_by=creator)

        assert resolve_role(Group.objects.get(pk=group_with_members.pk), member).is_member


@pytest.mark.django_db
class TestMemberCountIntegrity:

    def test_deleting_member_user_recounts(self, group_with_members, member):
        member.delete()

        group_with_members.refresh_from_db()
        assert group_with_members.member_count == 2
        assert_member_count_consistent(group_with_members)

    def test_deleting_moderator_membership_drops_role(self, group_with_members, moderator):
        GroupMembership.objects.filter(group=group_with_members, user=moderator).delete()

        assert not group_with_members.moderators.filter(pk=moderator.pk).exists()
        assert_member_count_consistent(group_with_members)

    def test_creator_stays_moderator_when_membership_row_deleted(self, group, creator):
        GroupMembership.objects.filter(group=group, user=creator).delete()

        assert group.moderators.filter(pk=creator.pk).exists()
        assert_member_count_consistent(group)

    def test_inactive_group_hidden_from_lookups(self, group_with_members):
        group_with_members.is_active = False
        group_with_members.save(update_fields=['is_active'])

        with pytest.raises(GroupNotFoundError):
            get_group_by_id(group_id=group_with_members.id)
        with pytest.raises(GroupNotFoundError):
            get_group_members(group_id=group_with_members.id)

    def test_admin_moderator_choices_are_members(self, group_with_members, creator, moderator, member, outsider):
        from apps.groups.admin import GroupAdminForm

        choices = GroupAdminForm(instance=group_with_members).fields['moderators'].queryset

        assert set(choices) == {creator, moderator, member}
        assert outsider not in choices
