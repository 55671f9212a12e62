"""
Service layer unit tests for discussions app.

Tests cover:
- Post creation, listing, pinning and deletion
- Comments and nested replies
- Like toggling
- Notifications emitted along the way
"""

import pytest
from uuid import uuid4
from unittest.mock import patch

from django.db import DatabaseError

from apps.discussions.models import Post, PostType, Comment, PostLike, CommentLike
from apps.discussions.services import (
    ReplyTree,
    LikeTarget,
    create_post,
    get_post,
    list_posts,
    list_pinned_posts,
    delete_post,
    pin_post,
    unpin_post,
    add_comment,
    delete_comment,
    add_reply,
    delete_reply,
    toggle_like,
    GroupNotFoundError,
    PostNotFoundError,
    CommentNotFoundError,
    ReplyNotFoundError,
    NotMemberError,
    InsufficientPermissionsError,
    InvalidLikeTargetError,
    InvalidContentError,
)
from apps.groups.services import leave_group
from apps.notifications.models import Notification, NotificationType


def notifications_for(user, notification_type=None):
    queryset = Notification.objects.filter(recipient=user)
    if notification_type:
        queryset = queryset.filter(notification_type=notification_type)
    return queryset


@pytest.mark.django_db
class TestCreatePost:

    def test_member_creates_post(self, group, member):
        post = create_post(
            group_id=group.id,
            author=member,
            title='  And Then There Were None  ',
            body='Ten strangers on an island.',
        )

        assert post.title == 'And Then There Were None'
        assert post.post_type == PostType.DISCUSSION
        assert post.is_pinned is False

    def test_creator_and_moderator_can_post(self, group, creator, moderator):
        create_post(group_id=group.id, author=creator, title='Rules', body='Be kind.')
        create_post(group_id=group.id, author=moderator, title='Hi', body='Welcome.')

        assert Post.objects.filter(group=group).count() == 2

    def test_outsider_refused(self, group, outsider):
        with pytest.raises(NotMemberError):
            create_post(group_id=group.id, author=outsider, title='Spam', body='Buy now')

    def test_unknown_group(self, member):
        with pytest.raises(GroupNotFoundError):
            create_post(group_id=uuid4(), author=member, title='x', body='y')

    @pytest.mark.parametrize('title,body', [
        ('', 'body'),
        ('   ', 'body'),
        ('title', ''),
        ('x' * (Post.TITLE_MAX_LENGTH + 1), 'body'),
        ('title', 'x' * (Post.BODY_MAX_LENGTH + 1)),
    ])
    def test_invalid_content(self, group, member, title, body):
        with pytest.raises(InvalidContentError):
            create_post(group_id=group.id, author=member, title=title, body=body)

    def test_unknown_post_type(self, group, member):
        with pytest.raises(InvalidContentError):
            create_post(group_id=group.id, author=member, title='t', body='b', post_type='rant')

    def test_touches_group_activity(self, group, member):
        before = group.last_activity

        create_post(group_id=group.id, author=member, title='t', body='b')

        group.refresh_from_db()
        assert group.last_activity >= before


@pytest.mark.django_db
class TestListPosts:

    def test_pinned_first(self, group, member, moderator, post):
        later = create_post(group_id=group.id, author=member, title='Later', body='b')
        pin_post(post_id=post.id, user=moderator)

        posts = list(list_posts(group_id=group.id, user=member))

        assert [p.id for p in posts] == [post.id, later.id]
        assert posts[0].likes_count == 0

    def test_filter_by_type(self, group, member, post):
        create_post(group_id=group.id, author=member, title='Chat', body='b')

        posts = list_posts(group_id=group.id, user=member, post_type=PostType.RECOMMENDATION)

        assert [p.id for p in posts] == [post.id]

    def test_non_member_refused(self, group, outsider, post):
        with pytest.raises(NotMemberError):
            list_posts(group_id=group.id, user=outsider)
        with pytest.raises(NotMemberError):
            get_post(post_id=post.id, user=outsider)

    def test_get_unknown_post(self, member):
        with pytest.raises(PostNotFoundError):
            get_post(post_id=uuid4(), user=member)


@pytest.mark.django_db
class TestPinnedPosts:

    def test_non_member_gets_empty_list(self, group, moderator, outsider, post):
        pin_post(post_id=post.id, user=moderator)

        assert list_pinned_posts(group_id=group.id, user=outsider) == []

    def test_member_sees_newest_pinned_bounded(self, group, moderator, member, settings):
        settings.PINNED_POSTS_LIMIT = 2
        posts = [
            create_post(group_id=group.id, author=member, title=f'Post {i}', body='b')
            for i in range(3)
        ]
        for post in posts:
            pin_post(post_id=post.id, user=moderator)

        pinned = list_pinned_posts(group_id=group.id, user=member)

        assert len(pinned) == 2
        assert all(p.is_pinned for p in pinned)

    def test_unknown_group(self, member):
        with pytest.raises(GroupNotFoundError):
            list_pinned_posts(group_id=uuid4(), user=member)


@pytest.mark.django_db
class TestModeration:

    def test_pin_is_idempotent(self, moderator, post):
        pin_post(post_id=post.id, user=moderator)
        post = pin_post(post_id=post.id, user=moderator)

        assert post.is_pinned is True

        post = unpin_post(post_id=post.id, user=moderator)
        post = unpin_post(post_id=post.id, user=moderator)
        assert post.is_pinned is False

    def test_creator_can_pin(self, creator, post):
        assert pin_post(post_id=post.id, user=creator).is_pinned is True

    def test_member_cannot_pin_even_own_post(self, member, post):
        with pytest.raises(InsufficientPermissionsError):
            pin_post(post_id=post.id, user=member)

    def test_delete_removes_tree_and_likes(self, moderator, member, other_member, post):
        comment = add_comment(post_id=post.id, user=other_member, body='Agreed')
        add_reply(post_id=post.id, target_id=comment.id, user=member, body='Thanks')
        toggle_like(target_kind=LikeTarget.POST, post_id=post.id, user=other_member)

        delete_post(post_id=post.id, user=moderator)

        assert not Post.objects.filter(id=post.id).exists()
        assert not Comment.objects.exists()
        assert not PostLike.objects.exists()

    def test_author_cannot_delete_post(self, member, post):
        with pytest.raises(InsufficientPermissionsError):
            delete_post(post_id=post.id, user=member)

    def test_moderator_who_left_loses_privileges(self, group, moderator, post):
        leave_group(group_id=group.id, user=moderator)

        with pytest.raises(InsufficientPermissionsError):
            pin_post(post_id=post.id, user=moderator)


@pytest.mark.django_db
class TestComments:

    def test_comment_notifies_post_author(self, group, member, other_member, post):
        add_comment(post_id=post.id, user=other_member, body='Great pick')

        notification = notifications_for(member, NotificationType.POST_COMMENT).get()
        assert notification.sender == other_member
        assert notification.related_id == group.id
        assert notification.message == 'Reader commented on your post: "The Murder of Roger Ackroyd"'

    def test_own_comment_does_not_notify(self, member, post):
        add_comment(post_id=post.id, user=member, body='Bumping my own post')

        assert not notifications_for(member).exists()

    def test_outsider_cannot_comment(self, outsider, post):
        with pytest.raises(NotMemberError):
            add_comment(post_id=post.id, user=outsider, body='hello')

    def test_blank_comment(self, member, post):
        with pytest.raises(InvalidContentError):
            add_comment(post_id=post.id, user=member, body='   ')

    def test_comment_survives_notification_failure(self, member, other_member, post):
        with patch(
            'apps.notifications.services.emitter.create_notification',
            side_effect=DatabaseError('boom'),
        ):
            comment = add_comment(post_id=post.id, user=other_member, body='hi')

        assert Comment.objects.filter(id=comment.id).exists()
        assert not notifications_for(member).exists()

    def test_delete_comment_removes_subtree(self, member, other_member, post):
        comment = add_comment(post_id=post.id, user=other_member, body='c')
        reply = add_reply(post_id=post.id, target_id=comment.id, user=member, body='r')
        add_reply(post_id=post.id, target_id=reply.id, user=other_member, body='rr')
        survivor = add_comment(post_id=post.id, user=member, body='other thread')

        removed = delete_comment(post_id=post.id, comment_id=comment.id, user=other_member)

        assert removed == 3
        assert list(Comment.objects.values_list('id', flat=True)) == [survivor.id]

    def test_delete_comment_permissions(self, moderator, member, other_member, post):
        comment = add_comment(post_id=post.id, user=other_member, body='c')

        with pytest.raises(InsufficientPermissionsError):
            delete_comment(post_id=post.id, comment_id=comment.id, user=member)

        assert delete_comment(post_id=post.id, comment_id=comment.id, user=moderator) == 1

    def test_delete_comment_rejects_reply_id(self, member, other_member, post):
        comment = add_comment(post_id=post.id, user=other_member, body='c')
        reply = add_reply(post_id=post.id, target_id=comment.id, user=member, body='r')

        with pytest.raises(CommentNotFoundError):
            delete_comment(post_id=post.id, comment_id=reply.id, user=member)


@pytest.mark.django_db
class TestReplies:

    def test_fourth_level_reply_nests_under_its_ancestors(self, member, other_member, moderator, post):
        comment = add_comment(post_id=post.id, user=other_member, body='level 0')
        first = add_reply(post_id=post.id, target_id=comment.id, user=member, body='level 1')
        second = add_reply(post_id=post.id, target_id=first.id, user=moderator, body='level 2')
        third = add_reply(post_id=post.id, target_id=second.id, user=other_member, body='level 3')
        fourth = add_reply(post_id=post.id, target_id=third.id, user=member, body='level 4')

        tree = ReplyTree.for_post(post)
        found = tree.find_reply(fourth.id)

        assert [n.id for n in tree.path_to(found)] == [
            comment.id, first.id, second.id, third.id, fourth.id,
        ]
        assert [depth for _, depth in tree.walk()] == [0, 1, 2, 3, 4]

    def test_reply_notifies_immediate_target_author(self, member, other_member, moderator, post):
        comment = add_comment(post_id=post.id, user=other_member, body='c')
        reply = add_reply(post_id=post.id, target_id=comment.id, user=moderator, body='r')
        Notification.objects.all().delete()

        add_reply(post_id=post.id, target_id=reply.id, user=member, body='rr')

        notification = Notification.objects.get()
        assert notification.recipient == moderator
        assert notification.notification_type == NotificationType.COMMENT_REPLY
        assert 'replied to your reply' in notification.message

    def test_reply_to_comment_message(self, member, other_member, post):
        comment = add_comment(post_id=post.id, user=other_member, body='c')

        add_reply(post_id=post.id, target_id=comment.id, user=member, body='r')

        notification = notifications_for(other_member, NotificationType.COMMENT_REPLY).get()
        assert 'replied to your comment' in notification.message

    def test_reply_to_unknown_target(self, member, post):
        with pytest.raises(CommentNotFoundError):
            add_reply(post_id=post.id, target_id=uuid4(), user=member, body='r')

    def test_reply_target_on_other_post(self, group, member, other_member, post):
        other_post = create_post(group_id=group.id, author=other_member, title='t', body='b')
        comment = add_comment(post_id=other_post.id, user=member, body='c')

        with pytest.raises(CommentNotFoundError):
            add_reply(post_id=post.id, target_id=comment.id, user=member, body='r')

    def test_delete_reply_scoped_to_comment(self, member, other_member, post):
        first = add_comment(post_id=post.id, user=other_member, body='first')
        second = add_comment(post_id=post.id, user=other_member, body='second')
        reply = add_reply(post_id=post.id, target_id=first.id, user=member, body='r')
        nested = add_reply(post_id=post.id, target_id=reply.id, user=other_member, body='rr')

        with pytest.raises(ReplyNotFoundError):
            delete_reply(post_id=post.id, comment_id=second.id, reply_id=reply.id, user=member)

        removed = delete_reply(post_id=post.id, comment_id=first.id, reply_id=reply.id, user=member)

        assert removed == 2
        assert not Comment.objects.filter(id__in=[reply.id, nested.id]).exists()
        assert Comment.objects.filter(id=first.id).exists()

    def test_delete_reply_permissions(self, member, other_member, post):
        comment = add_comment(post_id=post.id, user=other_member, body='c')
        reply = add_reply(post_id=post.id, target_id=comment.id, user=other_member, body='r')

        with pytest.raises(InsufficientPermissionsError):
            delete_reply(post_id=post.id, comment_id=comment.id, reply_id=reply.id, user=member)


@pytest.mark.django_db
class TestLikes:

    def test_toggle_post_like(self, member, other_member, post):
        result = toggle_like(target_kind=LikeTarget.POST, post_id=post.id, user=other_member)
        assert result.liked is True
        assert result.likes_count == 1

        result = toggle_like(target_kind=LikeTarget.POST, post_id=post.id, user=other_member)
        assert result.liked is False
        assert result.likes_count == 0

        # Only the like notified
        assert notifications_for(member, NotificationType.POST_LIKE).count() == 1

    def test_unlike_removes_row(self, other_member, post):
        toggle_like(target_kind=LikeTarget.POST, post_id=post.id, user=other_member)

        result = toggle_like(target_kind=LikeTarget.POST, post_id=post.id, user=other_member)

        assert result.liked is False
        assert not PostLike.objects.filter(post=post, user=other_member).exists()

    def test_liking_own_post_does_not_notify(self, member, post):
        result = toggle_like(target_kind=LikeTarget.POST, post_id=post.id, user=member)

        assert result.liked is True
        assert not notifications_for(member).exists()

    def test_comment_and_reply_likes(self, member, other_member, moderator, post):
        comment = add_comment(post_id=post.id, user=other_member, body='c')
        reply = add_reply(post_id=post.id, target_id=comment.id, user=moderator, body='r')

        comment_result = toggle_like(
            target_kind=LikeTarget.COMMENT, post_id=post.id, user=member, comment_id=comment.id
        )
        reply_result = toggle_like(
            target_kind=LikeTarget.REPLY,
            post_id=post.id,
            user=member,
            comment_id=comment.id,
            reply_id=reply.id,
        )

        assert comment_result == (True, 1)
        assert reply_result == (True, 1)
        assert CommentLike.objects.count() == 2
        assert notifications_for(other_member, NotificationType.COMMENT_LIKE).exists()
        assert notifications_for(moderator, NotificationType.REPLY_LIKE).exists()

    def test_reply_like_outside_comment(self, member, other_member, post):
        first = add_comment(post_id=post.id, user=other_member, body='first')
        second = add_comment(post_id=post.id, user=other_member, body='second')
        reply = add_reply(post_id=post.id, target_id=first.id, user=other_member, body='r')

        with pytest.raises(ReplyNotFoundError):
            toggle_like(
                target_kind=LikeTarget.REPLY,
                post_id=post.id,
                user=member,
                comment_id=second.id,
                reply_id=reply.id,
            )

    def test_comment_like_with_reply_id(self, member, other_member, post):
        comment = add_comment(post_id=post.id, user=other_member, body='c')
        reply = add_reply(post_id=post.id, target_id=comment.id, user=other_member, body='r')

        with pytest.raises(CommentNotFoundError):
            toggle_like(
                target_kind=LikeTarget.COMMENT, post_id=post.id, user=member, comment_id=reply.id
            )

    def test_invalid_targets(self, member, post):
        with pytest.raises(InvalidLikeTargetError):
            toggle_like(target_kind='group', post_id=post.id, user=member)
        with pytest.raises(InvalidLikeTargetError):
            toggle_like(target_kind=LikeTarget.COMMENT, post_id=post.id, user=member)
        with pytest.raises(InvalidLikeTargetError):
            toggle_like(
                target_kind=LikeTarget.REPLY, post_id=post.id, user=member, comment_id=uuid4()
            )

    def test_outsider_cannot_like(self, outsider, post):
        with pytest.raises(NotMemberError):
            toggle_like(target_kind=LikeTarget.POST, post_id=post.id, user=outsider)
