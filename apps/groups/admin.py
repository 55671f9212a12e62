from django import forms
from django.contrib import admin
from apps.accounts.models import User
from apps.groups.models import Group, GroupMembership, GroupInvitation
from apps.groups.services import refresh_member_stats


class GroupAdminForm(forms.ModelForm):
    """Moderators can only be picked from the group's current members."""

    class Meta:
        model = Group
        fields = '__all__'

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if 'moderators' in self.fields:
            if self.instance._state.adding:
                members = User.objects.none()
            else:
                members = User.objects.filter(group_memberships__group=self.instance)
            self.fields['moderators'].queryset = members


class GroupMembershipInline(admin.TabularInline):
    """Inline admin for group memberships."""
    model = GroupMembership
    extra = 0
    fields = ['user', 'joined_at']
    readonly_fields = ['joined_at']


@admin.register(Group)
class GroupAdmin(admin.ModelAdmin):
    """Admin interface for Groups."""

    form = GroupAdminForm
    list_display = [
        'name',
        'category',
        'creator',
        'member_count',
        'is_private',
        'is_active',
        'last_activity',
    ]
    list_filter = ['category', 'is_private', 'is_active', 'created_at']
    search_fields = ['name', 'description', 'creator__email', 'creator__username']
    readonly_fields = ['member_count', 'last_activity', 'created_at', 'updated_at']
    filter_horizontal = ['moderators']
    inlines = [GroupMembershipInline]
    date_hierarchy = 'created_at'
    ordering = ['-created_at']

    fieldsets = (
        ('Basic Information', {
            'fields': ('name', 'description', 'category', 'tags', 'rules', 'creator')
        }),
        ('Visibility', {
            'fields': ('is_private', 'is_active', 'image', 'cover_image')
        }),
        ('Roles', {
            'fields': ('moderators',)
        }),
        ('Metadata', {
            'fields': ('member_count', 'last_activity', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    actions = ['recount_members']

    def save_related(self, request, form, formsets, change):
        """
        Re-establish membership invariants after inline and M2M edits.

        The creator is always a member and a moderator; moderators who are
        no longer members are dropped.
        """
        super().save_related(request, form, formsets, change)
        group = form.instance
        GroupMembership.objects.get_or_create(group=group, user_id=group.creator_id)
        group.moderators.add(group.creator_id)
        group.moderators.remove(
            *group.moderators.exclude(group_memberships__group=group)
        )
        refresh_member_stats(group)

    def recount_members(self, request, queryset):
        """Re-derive member_count from membership rows."""
        for group in queryset:
            refresh_member_stats(group)
        self.message_user(request, f"Recounted members for {queryset.count()} groups")
    recount_members.short_description = "Recount members"


@admin.register(GroupMembership)
class GroupMembershipAdmin(admin.ModelAdmin):
    """Admin interface for Group Memberships."""

    list_display = ['user', 'group', 'joined_at']
    list_filter = ['joined_at']
    search_fields = ['user__email', 'user__username', 'group__name']
    readonly_fields = ['joined_at']
    date_hierarchy = 'joined_at'
    ordering = ['-joined_at']

    def get_readonly_fields(self, request, obj=None):
        # Moving a row between groups would leave the old count stale
        if obj is not None:
            return ['user', 'group', 'joined_at']
        return self.readonly_fields

    def get_queryset(self, request):
        """Optimize query."""
        qs = super().get_queryset(request)
        return qs.select_related('user', 'group')


@admin.register(GroupInvitation)
class GroupInvitationAdmin(admin.ModelAdmin):
    """Admin interface for Group Invitations."""

    list_display = ['group', 'inviter', 'recipient', 'status', 'created_at', 'responded_at']
    list_filter = ['status', 'created_at']
    search_fields = ['group__name', 'inviter__username', 'recipient__username']
    readonly_fields = ['notification', 'created_at', 'responded_at']
    ordering = ['-created_at']

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related('group', 'inviter', 'recipient')
