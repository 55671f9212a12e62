from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .serializers import NotificationSerializer

from apps.notifications.services import (
    list_notifications,
    get_unread_count,
    mark_notification_read,
    mark_all_notifications_read,
    NotificationNotFoundError,
)


class NotificationViewSet(viewsets.GenericViewSet):
    """
    Notification feed for the current user.

    list: Most recent notifications (bounded)
    count: Unread count
    read: Mark one notification read
    read_all: Mark every notification read
    """

    serializer_class = NotificationSerializer
    permission_classes = [IsAuthenticated]

    def list(self, request):
        notifications = list_notifications(user=request.user)
        serializer = self.get_serializer(notifications, many=True)
        return Response(serializer.data)

    @action(detail=False, methods=['get'])
    def count(self, request):
        return Response({'count': get_unread_count(user=request.user)})

    @action(detail=True, methods=['patch'])
    def read(self, request, pk=None):
        """Mark a single notification as read."""
        try:
            notification = mark_notification_read(notification_id=pk, user=request.user)
        except NotificationNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        return Response(self.get_serializer(notification).data)

    @action(detail=False, methods=['patch'], url_path='read-all')
    def read_all(self, request):
        """Mark all notifications as read."""
        updated = mark_all_notifications_read(user=request.user)
        return Response({
            'message': 'All notifications marked as read',
            'updated': updated,
        })
