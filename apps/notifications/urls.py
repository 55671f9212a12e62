from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'notifications'

router = DefaultRouter()
router.register(r'', views.NotificationViewSet, basename='notification')

urlpatterns = [
    # GET   /api/notifications/              - Recent notifications
    # GET   /api/notifications/count/        - Unread count
    # PATCH /api/notifications/{id}/read/    - Mark one read
    # PATCH /api/notifications/read-all/     - Mark all read
    path('', include(router.urls)),
]
