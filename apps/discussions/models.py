from django.db import models
import uuid


class PostType(models.TextChoices):
    DISCUSSION = 'discussion', 'Discussion'
    RECOMMENDATION = 'recommendation', 'Recommendation'
    SUGGESTION = 'suggestion', 'Suggestion'
    ANNOUNCEMENT = 'announcement', 'Announcement'
    MEGATHREAD = 'megathread', 'Megathread'


class Post(models.Model):
    """Discussion item inside a group."""

    TITLE_MAX_LENGTH = 200
    BODY_MAX_LENGTH = 2000

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    group = models.ForeignKey(
        'groups.Group',
        on_delete=models.CASCADE,
        related_name='posts'
    )
    author = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='group_posts'
    )
    title = models.CharField(max_length=TITLE_MAX_LENGTH)
    body = models.TextField(max_length=BODY_MAX_LENGTH)
    post_type = models.CharField(
        max_length=20,
        choices=PostType.choices,
        default=PostType.DISCUSSION
    )
    is_pinned = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'group_posts'
        indexes = [
            models.Index(fields=['group', '-created_at']),
            models.Index(fields=['group', '-is_pinned', '-created_at']),
            models.Index(fields=['author']),
        ]
        ordering = ['-is_pinned', '-created_at']

    def __str__(self):
        return self.title


class Comment(models.Model):
    """
    Comment or reply on a post.

    Top-level comments have no parent; a reply points at the comment or
    reply it answers. Nesting depth is unbounded.
    """

    BODY_MAX_LENGTH = 500

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    post = models.ForeignKey(Post, on_delete=models.CASCADE, related_name='comments')
    parent = models.ForeignKey(
        'self',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='replies'
    )
    author = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='post_comments'
    )
    body = models.TextField(max_length=BODY_MAX_LENGTH)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'post_comments'
        indexes = [
            models.Index(fields=['post', 'created_at']),
        ]
        ordering = ['created_at']

    def __str__(self):
        return f"{self.author_id} on {self.post_id}"

    @property
    def is_reply(self):
        return self.parent_id is not None


class PostLike(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    post = models.ForeignKey(Post, on_delete=models.CASCADE, related_name='likes')
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='post_likes')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'post_likes'
        unique_together = [['post', 'user']]


class CommentLike(models.Model):
    """Like on a comment or a reply."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    comment = models.ForeignKey(Comment, on_delete=models.CASCADE, related_name='likes')
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='comment_likes')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'comment_likes'
        unique_together = [['comment', 'user']]
