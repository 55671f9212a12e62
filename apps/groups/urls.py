from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'groups'

# Router for ViewSets
router = DefaultRouter()
router.register(r'', views.GroupViewSet, basename='group')

urlpatterns = [
    # Group ViewSet routes
    # GET    /api/groups/                   - Search groups (?search=&category=&sort=)
    # POST   /api/groups/                   - Create group
    # GET    /api/groups/{id}/              - Get group details
    # GET    /api/groups/featured/          - Featured groups
    # GET    /api/groups/popular/           - Most popular groups
    # GET    /api/groups/categories/        - Category list
    # GET    /api/groups/my/                - Groups the user belongs to

    # Custom group actions
    # GET    /api/groups/{id}/members/                  - List members with roles
    # POST   /api/groups/{id}/join/                     - Join
    # POST   /api/groups/{id}/leave/                    - Leave
    # POST   /api/groups/{id}/moderators/               - Promote member (moderator)
    # DELETE /api/groups/{id}/moderators/{user_id}/     - Demote moderator (moderator)
    # DELETE /api/groups/{id}/members/{user_id}/        - Remove member (moderator)
    # POST   /api/groups/{id}/invite/                   - Invite friends
    # POST   /api/groups/{id}/invitations/accept/       - Accept invitation
    # POST   /api/groups/{id}/invitations/decline/      - Decline invitation

    # Additional endpoints
    path('invitations/', views.pending_invitations, name='pending-invitations'),

    # Include router URLs
    path('', include(router.urls)),
]
