"""
Websocket authentication from a ``?token=<jwt>`` query string.

Browsers cannot set an ``Authorization`` header on a websocket
handshake, so the access token travels in the query string instead.
"""
import logging
from urllib.parse import parse_qs

from channels.db import database_sync_to_async
from channels.middleware import BaseMiddleware
from django.contrib.auth.models import AnonymousUser
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import AccessToken

from portal.models import User

logger = logging.getLogger(__name__)


@database_sync_to_async
def _user_for_token(raw: str):
    try:
        token = AccessToken(raw)
    except TokenError as e:
        logger.info('Rejected websocket token: %s', e)
        return AnonymousUser()
    user_id = token.get(api_settings.USER_ID_CLAIM)
    user = User.objects.filter(pk=user_id, is_active=True, is_verified=True).first()
    return user or AnonymousUser()


class JWTQueryAuthMiddleware(BaseMiddleware):
    async def __call__(self, scope, receive, send):
        params = parse_qs(scope.get('query_string', b'').decode())
        raw = (params.get('token') or [None])[0]
        scope['user'] = await _user_for_token(raw) if raw else AnonymousUser()
        return await super().__call__(scope, receive, send)
