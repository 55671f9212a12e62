from rest_framework import serializers
from .models import Group, GroupCategory, GroupMembership, GroupInvitation
from apps.accounts.serializers import UserMinimalSerializer
from apps.groups.authority import resolve_role


class GroupSerializer(serializers.ModelSerializer):
    """Main serializer for groups."""

    creator = UserMinimalSerializer(read_only=True)
    moderators = UserMinimalSerializer(many=True, read_only=True)
    user_role = serializers.SerializerMethodField()

    class Meta:
        model = Group
        fields = [
            'id',
            'name',
            'description',
            'category',
            'tags',
            'rules',
            'image',
            'cover_image',
            'is_private',
            'creator',
            'moderators',
            'member_count',
            'user_role',
            'last_activity',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_user_role(self, obj):
        """Get current user's role in the group."""
        request = self.context.get('request')
        if request and request.user.is_authenticated:
            return resolve_role(obj, request.user).role
        return None


class GroupCreateSerializer(serializers.Serializer):
    """Serializer for creating groups."""

    name = serializers.CharField(max_length=100)
    description = serializers.CharField(max_length=1000)
    category = serializers.ChoiceField(choices=GroupCategory.choices)
    tags = serializers.ListField(
        child=serializers.CharField(max_length=50),
        required=False,
        default=list
    )
    rules = serializers.CharField(required=False, allow_blank=True)
    is_private = serializers.BooleanField(required=False, default=False)

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Name cannot be blank")
        return value


class GroupListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for list views."""

    creator = UserMinimalSerializer(read_only=True)

    class Meta:
        model = Group
        fields = [
            'id',
            'name',
            'description',
            'category',
            'tags',
            'image',
            'is_private',
            'creator',
            'member_count',
            'last_activity',
            'created_at',
        ]
        read_only_fields = fields


class GroupMemberSerializer(serializers.ModelSerializer):
    """Member entry with its resolved role."""

    user = UserMinimalSerializer(read_only=True)
    role = serializers.SerializerMethodField()

    class Meta:
        model = GroupMembership
        fields = ['id', 'user', 'role', 'joined_at']
        read_only_fields = fields

    def get_role(self, obj):
        group = self.context.get('group') or obj.group
        return resolve_role(group, obj.user_id).role


class GroupInvitationSerializer(serializers.ModelSerializer):
    """Invitation as seen by its recipient."""

    group = GroupListSerializer(read_only=True)
    inviter = UserMinimalSerializer(read_only=True)

    class Meta:
        model = GroupInvitation
        fields = ['id', 'group', 'inviter', 'status', 'created_at', 'responded_at']
        read_only_fields = fields


class InviteMembersSerializer(serializers.Serializer):
    """Recipients may be plain ids or objects carrying one."""

    recipients = serializers.ListField(child=serializers.JSONField(), allow_empty=False)


class InvitationResponseSerializer(serializers.Serializer):
    invitation_id = serializers.UUIDField()


class PromoteModeratorSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
