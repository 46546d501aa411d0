import json

from channels.generic.websocket import AsyncWebsocketConsumer

from equipment.services.alerts import ALERTS_GROUP


class AlertsConsumer(AsyncWebsocketConsumer):
    """Pushes alert creations and resolutions to connected dashboards."""

    async def connect(self):
        await self.channel_layer.group_add(ALERTS_GROUP, self.channel_name)
        await self.accept()
        await self.send(json.dumps({"type": "welcome", "message": "connected"}))

    async def disconnect(self, close_code):
        await self.channel_layer.group_discard(ALERTS_GROUP, self.channel_name)

    async def alert_created(self, event):
        # event: {"type": "alert.created", "alert": {...}}
        await self.send(json.dumps(event))

    async def alert_resolved(self, event):
        await self.send(json.dumps(event))
