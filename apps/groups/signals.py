"""
Keep a group's derived membership state in step with its membership rows.

Membership rows also disappear outside the services (a user account is
deleted and cascades, staff edit rows in the admin), so member_count is
re-derived and the moderator set trimmed whenever a row is saved or deleted.
"""

import logging

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from apps.groups.models import Group, GroupMembership

logger = logging.getLogger(__name__)


def _recount(group_id):
    count = GroupMembership.objects.filter(group_id=group_id).count()
    # update() is a no-op when the group itself is being deleted
    Group.objects.filter(pk=group_id).update(member_count=count)


@receiver(post_save, sender=GroupMembership)
def membership_saved(sender, instance, created, **kwargs):
    if created:
        _recount(instance.group_id)


@receiver(post_delete, sender=GroupMembership)
def membership_deleted(sender, instance, **kwargs):
    (
        Group.moderators.through.objects
        .filter(group_id=instance.group_id, user_id=instance.user_id)
        .exclude(group__creator_id=instance.user_id)
        .delete()
    )
    _recount(instance.group_id)
    logger.debug("Membership of %s in group %s deleted", instance.user_id, instance.group_id)
