import pytest
from django.urls import reverse

from portal.models import Notification
from portal.services import notifications

pytestmark = pytest.mark.django_db


class RecordingLayer:
    def __init__(self):
        self.sent = []

    async def group_send(self, group, message):
        self.sent.append((group, message))


def test_emit_stores_and_pushes(monkeypatch, doctor, patient):
    layer = RecordingLayer()
    monkeypatch.setattr(notifications, 'get_channel_layer', lambda: layer)

    n = notifications.emit(patient.id, doctor.id, 'doctor_request', 'Title', 'Body', '/somewhere')

    assert Notification.objects.get().pk == n.pk
    [(group, message)] = layer.sent
    assert group == f'notifications.{patient.id}'
    assert message['type'] == 'notification.created'
    assert message['notification']['id'] == n.id
    assert message['notification']['sender']['id'] == doctor.id


def test_push_failure_keeps_notification(monkeypatch, patient):
    def broken():
        raise RuntimeError('layer down')

    monkeypatch.setattr(notifications, 'get_channel_layer', broken)
    n = notifications.emit(patient.id, None, 'system', 'Title', 'Body')
    assert n is not None
    assert Notification.objects.filter(pk=n.pk).exists()


def test_inbox_endpoints(doctor, patient, client_for):
    first = notifications.emit(patient.id, doctor.id, 'a', 'First', 'one')
    notifications.emit(patient.id, doctor.id, 'b', 'Second', 'two')
    notifications.emit(doctor.id, patient.id, 'c', 'Not yours', 'three')

    client = client_for(patient)
    r = client.get(reverse('notifications'))
    assert r.status_code == 200
    assert [n['title'] for n in r.data['notifications']] == ['Second', 'First']
    assert r.data['unreadCount'] == 2

    r = client.put(reverse('notifications-read', args=[first.id]))
    assert r.data['notification']['read'] is True
    assert client.get(reverse('notifications-unread-count')).data['count'] == 1

    r = client.put(reverse('notifications-mark-all-read'))
    assert r.data['updated'] == 1
    assert client.get(reverse('notifications-unread-count')).data['count'] == 0

    assert client.delete(reverse('notifications-delete', args=[first.id])).status_code == 200
    assert Notification.objects.filter(recipient=patient).count() == 1


def test_cannot_touch_someone_elses_notification(doctor, patient, client_for):
    n = notifications.emit(doctor.id, None, 'a', 'Private', 'x')
    client = client_for(patient)
    assert client.put(reverse('notifications-read', args=[n.id])).status_code == 404
    assert client.delete(reverse('notifications-delete', args=[n.id])).status_code == 404
    n.refresh_from_db()
    assert n.read is False


def test_inbox_is_limited(patient, client_for):
    Notification.objects.bulk_create(
        Notification(recipient=patient, type='bulk', title=f'#{i}', message='x') for i in range(60)
    )
    r = client_for(patient).get(reverse('notifications'))
    assert len(r.data['notifications']) == notifications.INBOX_LIMIT
    assert r.data['unreadCount'] == 60
