# ==========================================
# apps/notifications/admin.py
# ==========================================

from django.contrib import admin
from apps.notifications.models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    """Admin interface for Notifications."""

    list_display = ['recipient', 'sender', 'notification_type', 'is_read', 'created_at']
    list_filter = ['notification_type', 'is_read', 'created_at']
    search_fields = ['recipient__email', 'sender__email', 'message']
    readonly_fields = ['created_at']
    date_hierarchy = 'created_at'
    ordering = ['-created_at']

    actions = ['mark_read']

    def mark_read(self, request, queryset):
        count = queryset.update(is_read=True)
        self.message_user(request, f"Marked {count} notification(s) as read")
    mark_read.short_description = "Mark selected notifications as read"

    def get_queryset(self, request):
        """Optimize query."""
        qs = super().get_queryset(request)
        return qs.select_related('recipient', 'sender')
