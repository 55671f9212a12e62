from rest_framework import serializers
from .models import FriendRequest
from apps.accounts.models import User
from apps.accounts.serializers import UserMinimalSerializer


class FriendRequestSerializer(serializers.ModelSerializer):
    from_user = UserMinimalSerializer(read_only=True)
    to_user = UserMinimalSerializer(read_only=True)

    class Meta:
        model = FriendRequest
        fields = ['id', 'from_user', 'to_user', 'status', 'message', 'created_at', 'updated_at']
        read_only_fields = fields


class SendFriendRequestSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    message = serializers.CharField(max_length=200, required=False, allow_blank=True, default='')


class RespondFriendRequestSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=['accept', 'decline'])


class FriendSerializer(serializers.ModelSerializer):
    """Friend entry with profile basics."""

    display_name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'username', 'display_name', 'profile_picture', 'bio']
        read_only_fields = fields

    def get_display_name(self, obj):
        return obj.get_display_name()
