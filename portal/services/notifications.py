"""
Notification inbox and realtime push.

``emit`` is called after a state change has been stored.  A notification
is best effort: failing to store or push it is logged and never undoes or
fails the operation that triggered it.
"""
from __future__ import annotations

import logging
from typing import Optional

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import transaction

from portal.exceptions import NotFoundError
from portal.models import Notification

logger = logging.getLogger(__name__)

INBOX_LIMIT = 50


def group_name(user_id: int) -> str:
    return f"notifications.{user_id}"


def serialize_notification(n: Notification) -> dict:
    sender = None
    if n.sender_id:
        sender = {
            'id': n.sender_id,
            'name': n.sender.first_name,
            'familyName': n.sender.last_name,
        }
    return {
        'id': n.id,
        'recipientId': n.recipient_id,
        'sender': sender,
        'type': n.type,
        'title': n.title,
        'message': n.message,
        'link': n.link,
        'read': n.read,
        'createdAt': n.created_at.isoformat(),
    }


def _push(n: Notification) -> None:
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    payload = {"type": "notification.created", "notification": serialize_notification(n)}
    async_to_sync(channel_layer.group_send)(group_name(n.recipient_id), payload)


def emit(recipient_id: int, sender_id: Optional[int], type: str, title: str, message: str,
         link: str = '') -> Optional[Notification]:
    """Store a notification for ``recipient_id`` and push it to their sockets."""
    try:
        with transaction.atomic():
            n = Notification.objects.create(
                recipient_id=recipient_id,
                sender_id=sender_id,
                type=type,
                title=title,
                message=message,
                link=link,
            )
    except Exception:
        logger.exception('Failed to store %s notification for user %s', type, recipient_id)
        return None

    try:
        _push(n)
    except Exception:
        logger.exception('Failed to push notification %s to user %s', n.id, recipient_id)
    return n


def inbox(user_id: int) -> dict:
    items = (
        Notification.objects.filter(recipient_id=user_id)
        .select_related('sender')
        .order_by('-created_at', '-id')[:INBOX_LIMIT]
    )
    return {
        'notifications': [serialize_notification(n) for n in items],
        'unreadCount': unread_count(user_id),
    }


def unread_count(user_id: int) -> int:
    return Notification.objects.filter(recipient_id=user_id, read=False).count()


def mark_read(user_id: int, notification_id: int) -> Notification:
    n = Notification.objects.select_related('sender').filter(id=notification_id, recipient_id=user_id).first()
    if n is None:
        raise NotFoundError('Notification not found')
    if not n.read:
        n.read = True
        n.save(update_fields=['read'])
    return n


def mark_all_read(user_id: int) -> int:
    return Notification.objects.filter(recipient_id=user_id, read=False).update(read=True)


def delete(user_id: int, notification_id: int) -> None:
    deleted, _ = Notification.objects.filter(id=notification_id, recipient_id=user_id).delete()
    if not deleted:
        raise NotFoundError('Notification not found')
