# ==========================================
# apps/notifications/models.py
# ==========================================

from django.db import models
import uuid


class NotificationType(models.TextChoices):
    FRIEND_REQUEST = 'friend_request', 'Friend request'
    FRIEND_REQUEST_ACCEPTED = 'friend_request_accepted', 'Friend request accepted'
    NEW_FOLLOWER = 'new_follower', 'New follower'
    GROUP_INVITE = 'group_invite', 'Group invite'
    GROUP_INVITE_ACCEPTED = 'group_invite_accepted', 'Group invite accepted'
    GROUP_INVITE_DECLINED = 'group_invite_declined', 'Group invite declined'
    POST_LIKE = 'post_like', 'Post liked'
    POST_COMMENT = 'post_comment', 'Post commented'
    COMMENT_LIKE = 'comment_like', 'Comment liked'
    COMMENT_REPLY = 'comment_reply', 'Comment replied'
    REPLY_LIKE = 'reply_like', 'Reply liked'


class Notification(models.Model):
    """Append-only feed entry delivered to a single recipient."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    recipient = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='notifications'
    )
    sender = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='sent_notifications'
    )
    notification_type = models.CharField(max_length=40, choices=NotificationType.choices)
    message = models.CharField(max_length=500)
    # Group, post or friend-request context
    related_id = models.UUIDField(null=True, blank=True)
    is_read = models.BooleanField(default=False, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'notifications'
        indexes = [
            models.Index(fields=['recipient', '-created_at']),
            models.Index(fields=['recipient', 'is_read']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.notification_type} -> {self.recipient_id}"
