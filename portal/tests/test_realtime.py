import pytest
from asgiref.sync import async_to_sync
from channels.db import database_sync_to_async
from channels.routing import URLRouter
from channels.testing import WebsocketCommunicator
from django.urls import path

from portal.authentication import issue_token
from portal.realtime.auth import JWTQueryAuthMiddleware
from portal.realtime.consumers import NotificationsConsumer
from portal.services import notifications

application = JWTQueryAuthMiddleware(URLRouter([
    path('ws/notifications/', NotificationsConsumer.as_asgi()),
]))


@pytest.mark.django_db(transaction=True)
def test_socket_streams_new_notifications(patient, doctor):
    token = issue_token(patient)

    async def scenario():
        communicator = WebsocketCommunicator(application, f'/ws/notifications/?token={token}')
        connected, _ = await communicator.connect()
        assert connected
        welcome = await communicator.receive_json_from()
        await database_sync_to_async(notifications.emit)(
            patient.id, doctor.id, 'doctor_request', 'New Doctor Access Request', 'Please accept'
        )
        event = await communicator.receive_json_from()
        await communicator.disconnect()
        return welcome, event

    welcome, event = async_to_sync(scenario)()
    assert welcome['type'] == 'welcome'
    assert event['type'] == 'notification.created'
    assert event['notification']['recipientId'] == patient.id
    assert event['notification']['title'] == 'New Doctor Access Request'


@pytest.mark.django_db(transaction=True)
def test_socket_without_valid_token_is_closed():
    async def scenario(url):
        communicator = WebsocketCommunicator(application, url)
        connected, code = await communicator.connect()
        await communicator.disconnect()
        return connected, code

    assert async_to_sync(scenario)('/ws/notifications/') == (False, 4001)
    assert async_to_sync(scenario)('/ws/notifications/?token=not-a-jwt') == (False, 4001)


@pytest.mark.django_db(transaction=True)
def test_socket_rejects_unverified_user(make_user):
    pending = make_user(verified=False)
    token = issue_token(pending)

    async def scenario():
        communicator = WebsocketCommunicator(application, f'/ws/notifications/?token={token}')
        connected, code = await communicator.connect()
        await communicator.disconnect()
        return connected, code

    assert async_to_sync(scenario)() == (False, 4001)
