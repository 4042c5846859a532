import json

from channels.generic.websocket import AsyncWebsocketConsumer

from portal.services.notifications import group_name


class NotificationsConsumer(AsyncWebsocketConsumer):
    """Streams the connected user's new notifications."""

    async def connect(self):
        user = self.scope.get("user")
        if not (user and user.is_authenticated):
            await self.close(code=4001)
            return
        self.group_name = group_name(user.id)
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()
        await self.send(json.dumps({"type": "welcome", "message": "connected"}))

    async def disconnect(self, close_code):
        if hasattr(self, "group_name"):
            await self.channel_layer.group_discard(self.group_name, self.channel_name)

    async def notification_created(self, event):
        # event: {"type": "notification.created", "notification": {...}}
        await self.send(json.dumps(event))
