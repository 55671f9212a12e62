from django.contrib import admin
from apps.discussions.models import Post, Comment, PostLike, CommentLike


@admin.register(Post)
class PostAdmin(admin.ModelAdmin):
    """Admin interface for Posts."""

    list_display = ['title', 'group', 'author', 'post_type', 'is_pinned', 'created_at']
    list_filter = ['post_type', 'is_pinned', 'created_at']
    search_fields = ['title', 'body', 'group__name', 'author__username']
    readonly_fields = ['created_at', 'updated_at']
    date_hierarchy = 'created_at'
    ordering = ['-created_at']

    actions = ['pin_posts', 'unpin_posts']

    def pin_posts(self, request, queryset):
        count = queryset.update(is_pinned=True)
        self.message_user(request, f"Pinned {count} post(s)")
    pin_posts.short_description = "Pin selected posts"

    def unpin_posts(self, request, queryset):
        count = queryset.update(is_pinned=False)
        self.message_user(request, f"Unpinned {count} post(s)")
    unpin_posts.short_description = "Unpin selected posts"

    def get_queryset(self, request):
        """Optimize query."""
        qs = super().get_queryset(request)
        return qs.select_related('group', 'author')


@admin.register(Comment)
class CommentAdmin(admin.ModelAdmin):
    """Admin interface for Comments and replies."""

    list_display = ['post', 'author', 'parent', 'created_at']
    list_filter = ['created_at']
    search_fields = ['body', 'author__username', 'post__title']
    readonly_fields = ['created_at']
    raw_id_fields = ['post', 'parent', 'author']
    ordering = ['-created_at']

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related('post', 'author')


@admin.register(PostLike)
class PostLikeAdmin(admin.ModelAdmin):
    list_display = ['post', 'user', 'created_at']
    raw_id_fields = ['post', 'user']


@admin.register(CommentLike)
class CommentLikeAdmin(admin.ModelAdmin):
    list_display = ['comment', 'user', 'created_at']
    raw_id_fields = ['comment', 'user']
