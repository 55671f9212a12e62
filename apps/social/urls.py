from django.urls import path
from . import views

app_name = 'social'

urlpatterns = [
    # Friend requests
    path('friend-requests/', views.friend_requests, name='friend-requests'),
    path('friend-requests/<uuid:pk>/respond/', views.respond_friend_request, name='friend-request-respond'),

    # Friends
    path('friends/', views.friends, name='friends'),
    path('friends/<uuid:user_id>/', views.friend_detail, name='friend-detail'),

    # Following
    path('follow/<uuid:user_id>/', views.follow, name='follow'),
    path('unfollow/<uuid:user_id>/', views.unfollow, name='unfollow'),
]
