from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from rest_framework import status

from .serializers import MarkReadSerializer, NotificationSerializer
from .services import (
    get_notifications,
    get_unread_notification_count,
    mark_all_notifications_as_read,
    mark_notification_as_read,
)


class MyNotificationsView(APIView):
    """
    GET /api/notifications/
    GET /api/notifications/?unread=true
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        notifications = get_notifications(request.user.pk)

        unread_only = request.query_params.get("unread")
        if unread_only and unread_only.lower() in ("1", "true", "yes"):
            notifications = [n for n in notifications if not n.read]

        serializer = NotificationSerializer(notifications, many=True)
        return Response(serializer.data)


class UnreadCountView(APIView):
    """GET /api/notifications/unread-count/"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response({"unread": get_unread_notification_count(request.user.pk)})


class MarkReadView(APIView):
    """
    POST /api/notifications/mark-read/

    Body:
    {
      "ids": [1, 2, 3]   # or omit/empty to mark all as read
    }
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = MarkReadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ids = serializer.validated_data.get("ids")

        if ids and len(ids) == 1:
            updated = mark_notification_as_read(ids[0], user_id=request.user.pk)
        else:
            updated = mark_all_notifications_as_read(request.user.pk, ids=ids)

        return Response({"marked_read": updated}, status=status.HTTP_200_OK)
