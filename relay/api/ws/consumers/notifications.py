from fastapi import APIRouter
from pydantic import ValidationError
from starlette.websockets import WebSocket

from relay.api.ws.constants import CLIENT_EVENTS, EventKind
from relay.api.ws.websocket import RelayWebSocketEndpoint
from relay.logging import logger
from relay.schemas.event import ClientEventModel
from relay.utils.metrics import ws_messages_received_total

router = APIRouter()


@router.websocket_route("/ws")
class NotificationConsumer(RelayWebSocketEndpoint):
    """
    Realtime channel for notification broadcasts.

    Clients receive `{"event": "notification", "data": <record>}` frames.
    They may send `{"event": "join_room", "data": "<group>"}` or
    `{"event": "leave_room", "data": "<group>"}`; the server echoes the
    frame back as acknowledgement. Anything else gets an `error` frame and
    the connection stays open.
    """

    async def on_receive(self, websocket: WebSocket, data: str) -> None:
        ws_messages_received_total.inc()

        try:
            frame = ClientEventModel.model_validate_json(data)
        except ValidationError:
            logger.debug(f"Received invalid data: {data!r}")
            self.send_event(EventKind.ERROR, {"msg": "Malformed frame"})
            return

        if frame.event not in CLIENT_EVENTS:
            self.send_event(
                EventKind.ERROR, {"msg": f"Unsupported event {frame.event}"}
            )
            return

        group = frame.data
        if not isinstance(group, str) or not group.strip():
            self.send_event(
                EventKind.ERROR, {"msg": "Room name must be a non-empty string"}
            )
            return

        if frame.event == EventKind.JOIN_ROOM:
            self.registry.join(self.connection_id, group)
        else:
            self.registry.leave(self.connection_id, group)

        self.send_event(frame.event, group)
