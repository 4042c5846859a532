from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from portal.services import notifications
from portal.services.notifications import serialize_notification


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def inbox(request):
    return Response({'ok': True, **notifications.inbox(request.user.id)})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def unread_count(request):
    return Response({'ok': True, 'count': notifications.unread_count(request.user.id)})


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def mark_read(request, notification_id: int):
    n = notifications.mark_read(request.user.id, notification_id)
    return Response({'ok': True, 'notification': serialize_notification(n)})


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def mark_all_read(request):
    updated = notifications.mark_all_read(request.user.id)
    return Response({'ok': True, 'message': 'All notifications marked as read', 'updated': updated})


@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def delete(request, notification_id: int):
    notifications.delete(request.user.id, notification_id)
    return Response({'ok': True, 'message': 'Notification deleted'})
