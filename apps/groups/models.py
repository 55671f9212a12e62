# ==========================================
# apps/groups/models.py
# ==========================================

from django.db import models
from django.db.models import Q
from django.utils import timezone
import uuid


DEFAULT_GROUP_RULES = (
    'Please follow our community guidelines to maintain a respectful and '
    'engaging environment for all members.'
)


class GroupCategory(models.TextChoices):
    ROMANCE = 'Romance', 'Romance'
    SCIENCE_FICTION = 'Science fiction', 'Science fiction'
    SHORT_STORIES = 'Short stories', 'Short stories'
    THRILLERS = 'Thrillers', 'Thrillers'
    FANTASY = 'Fantasy', 'Fantasy'
    HISTORICAL_FICTION = 'Historical Fiction', 'Historical Fiction'
    YOUNG_ADULT = 'Young-Adult', 'Young-Adult'
    AUTOBIOGRAPHY = 'Autobiography', 'Autobiography'
    SELF_HELP = 'Self-Help/Personal Development', 'Self-Help/Personal Development'
    COOKING = 'Cooking', 'Cooking'
    BUSINESS = 'Business', 'Business'
    HEALTH_FITNESS = 'Health & Fitness', 'Health & Fitness'
    MYSTERY = 'Mystery and suspense', 'Mystery and suspense'
    POLITICAL_THRILLER = 'Political thriller', 'Political thriller'
    POETRY = 'Poetry', 'Poetry'
    PLAYS = 'Plays', 'Plays'
    ACTION_ADVENTURE = 'Action/Adventure', 'Action/Adventure'
    CLASSIC_FICTION = 'Classic fiction', 'Classic fiction'
    NON_FICTION = 'Non-fiction', 'Non-fiction'


class GroupRole(models.TextChoices):
    CREATOR = 'creator', 'Creator'
    MODERATOR = 'moderator', 'Moderator'
    MEMBER = 'member', 'Member'


class Group(models.Model):
    """Reading community with a creator, a moderator set and members."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100)
    description = models.TextField(max_length=1000)
    category = models.CharField(max_length=50, choices=GroupCategory.choices)
    tags = models.JSONField(default=list, blank=True)
    rules = models.TextField(default=DEFAULT_GROUP_RULES, blank=True)
    image = models.URLField(max_length=500, blank=True)
    cover_image = models.URLField(max_length=500, blank=True)
    is_private = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)

    creator = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='created_groups'
    )
    moderators = models.ManyToManyField(
        'accounts.User',
        related_name='moderated_groups',
        blank=True
    )

    # Derived from memberships; refreshed by the membership services
    member_count = models.PositiveIntegerField(default=0)
    last_activity = models.DateTimeField(default=timezone.now)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'groups'
        indexes = [
            models.Index(fields=['category']),
            models.Index(fields=['-member_count']),
            models.Index(fields=['-last_activity']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return self.name

    def authority_for(self, user):
        """Resolve the effective role flags of user in this group."""
        from apps.groups.authority import resolve_role
        return resolve_role(self, user)

    def touch(self, save=True):
        """Bump last_activity."""
        self.last_activity = timezone.now()
        if save:
            self.save(update_fields=['last_activity', 'updated_at'])


class GroupMembership(models.Model):
    """Canonical (user, joined_at) membership record."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='group_memberships')
    group = models.ForeignKey(Group, on_delete=models.CASCADE, related_name='memberships')
    joined_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'group_memberships'
        unique_together = [['user', 'group']]
        indexes = [
            models.Index(fields=['user', 'joined_at']),
        ]
        ordering = ['joined_at']

    def __str__(self):
        return f"{self.user.get_display_name()} in {self.group.name}"


class InvitationStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    ACCEPTED = 'accepted', 'Accepted'
    DECLINED = 'declined', 'Declined'


class GroupInvitation(models.Model):
    """
    Invitation workflow state.

    Transitions pending -> accepted or pending -> declined exactly once.
    The feed entry shown to the recipient is a separate Notification.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    group = models.ForeignKey(Group, on_delete=models.CASCADE, related_name='invitations')
    inviter = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='sent_group_invitations'
    )
    recipient = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='group_invitations'
    )
    status = models.CharField(
        max_length=20,
        choices=InvitationStatus.choices,
        default=InvitationStatus.PENDING
    )
    notification = models.OneToOneField(
        'notifications.Notification',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='invitation'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    responded_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'group_invitations'
        constraints = [
            models.UniqueConstraint(
                fields=['group', 'inviter', 'recipient'],
                condition=Q(status='pending'),
                name='unique_pending_group_invitation',
            ),
        ]
        indexes = [
            models.Index(fields=['recipient', 'status']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.inviter_id} -> {self.recipient_id} ({self.group.name}, {self.status})"

    @property
    def is_resolved(self):
        return self.status != InvitationStatus.PENDING
