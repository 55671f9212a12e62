from django.core.exceptions import ObjectDoesNotExist
from rest_framework import serializers

from apps.accounts.serializers import UserMinimalSerializer
from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    """Feed entry with sender info and, for invites, the invitation state."""

    sender = UserMinimalSerializer(read_only=True)
    invitation = serializers.SerializerMethodField()

    class Meta:
        model = Notification
        fields = [
            'id',
            'sender',
            'notification_type',
            'message',
            'related_id',
            'invitation',
            'is_read',
            'created_at',
        ]
        read_only_fields = fields

    def get_invitation(self, obj):
        try:
            invitation = obj.invitation
        except ObjectDoesNotExist:
            return None
        return {'id': str(invitation.id), 'status': invitation.status}
