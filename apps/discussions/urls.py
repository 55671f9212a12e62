from django.urls import path
from . import views

app_name = 'discussions'

urlpatterns = [
    # Group-scoped
    path('groups/<uuid:group_id>/posts/', views.group_posts, name='group-posts'),
    path('groups/<uuid:group_id>/pinned/', views.pinned_posts, name='pinned-posts'),

    # Posts
    path('posts/<uuid:post_id>/', views.post_detail, name='post-detail'),
    path('posts/<uuid:post_id>/like/', views.like_post, name='post-like'),
    path('posts/<uuid:post_id>/pin/', views.pin, name='post-pin'),
    path('posts/<uuid:post_id>/unpin/', views.unpin, name='post-unpin'),

    # Comments
    path('posts/<uuid:post_id>/comments/', views.comments, name='comments'),
    path('posts/<uuid:post_id>/comments/<uuid:comment_id>/', views.comment_detail, name='comment-detail'),
    path('posts/<uuid:post_id>/comments/<uuid:comment_id>/like/', views.like_comment, name='comment-like'),

    # Replies (comment_id may name a reply to nest deeper)
    path('posts/<uuid:post_id>/comments/<uuid:comment_id>/replies/', views.replies, name='replies'),
    path(
        'posts/<uuid:post_id>/comments/<uuid:comment_id>/replies/<uuid:reply_id>/',
        views.reply_detail,
        name='reply-detail'
    ),
    path(
        'posts/<uuid:post_id>/comments/<uuid:comment_id>/replies/<uuid:reply_id>/like/',
        views.like_reply,
        name='reply-like'
    ),
]
