from typing import Any

from starlette import status
from starlette.endpoints import WebSocketEndpoint
from starlette.websockets import WebSocket

from relay.api.ws.constants import EventKind
from relay.constants import WS_POLICY_VIOLATION_CODE
from relay.exceptions import DeliveryError
from relay.logging import clear_log_context, logger, set_log_context
from relay.managers.connection import Connection
from relay.managers.connection_registry import ConnectionRegistry
from relay.middlewares.correlation_id import set_correlation_id
from relay.schemas.event import EventEnvelope
from relay.settings import app_settings
from relay.utils.metrics import ws_connections_total


class RelayWebSocketEndpoint(WebSocketEndpoint):  # type: ignore[misc]
    """
    WebSocket endpoint bridging transport lifecycle events to the registry.

    A connection is registered once after the handshake and unregistered
    exactly once when the receive loop ends, whatever the cause (client
    close, network failure, server shutdown or handler error). The ASGI
    `websocket.disconnect` message is the only close signal used.
    """

    encoding = "text"

    async def dispatch(self) -> None:
        """
        Manage the WebSocket connection lifecycle.

        1. Calls on_connect; stops there if the connection was rejected.
        2. Receives messages until `websocket.disconnect`, passing each
           text frame to on_receive.
        3. Always calls on_disconnect for accepted connections.
        """
        websocket = WebSocket(self.scope, receive=self.receive, send=self.send)
        if not await self.on_connect(websocket):
            return

        close_code = status.WS_1000_NORMAL_CLOSURE

        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.receive":
                    data = await self.decode(websocket, message)
                    await self.on_receive(websocket, data)
                elif message["type"] == "websocket.disconnect":
                    close_code = int(
                        message.get("code") or status.WS_1000_NORMAL_CLOSURE
                    )
                    break
        except Exception as exc:
            close_code = status.WS_1011_INTERNAL_ERROR
            raise exc
        finally:
            await self.on_disconnect(websocket, close_code)

    async def decode(self, websocket: WebSocket, message: dict[str, Any]) -> str:
        if message.get("text") is not None:
            return message["text"]
        # Binary frames are decoded as UTF-8 text
        return (message.get("bytes") or b"").decode("utf-8", errors="replace")

    def origin_allowed(self, websocket: WebSocket) -> bool:
        allowed = app_settings.websocket.ALLOWED_ORIGINS
        if "*" in allowed:
            return True
        return websocket.headers.get("origin") in allowed

    async def on_connect(self, websocket: WebSocket) -> bool:  # type: ignore[override]
        """
        Accept the client and register it.

        Connections from a disallowed Origin are closed with 1008 and never
        registered.

        Returns:
            True if the connection was registered.
        """
        await websocket.accept()

        if not self.origin_allowed(websocket):
            logger.debug(
                f"Rejected websocket from origin {websocket.headers.get('origin')}"
            )
            ws_connections_total.labels(status="rejected_origin").inc()
            await websocket.close(
                code=WS_POLICY_VIOLATION_CODE, reason="Origin not allowed"
            )
            return False

        self.registry: ConnectionRegistry = websocket.app.state.registry
        ws_settings = app_settings.websocket
        self.connection = Connection(
            websocket,
            queue_size=ws_settings.OUTBOUND_QUEUE_SIZE,
            send_timeout=ws_settings.SEND_TIMEOUT_SECONDS,
        )
        self.connection.start()
        self.connection_id = self.registry.register(self.connection)

        set_correlation_id(self.connection_id)
        set_log_context(connection_id=self.connection_id)
        ws_connections_total.labels(status="accepted").inc()

        self.send_event(EventKind.CONNECTED, {"id": self.connection_id})
        logger.debug(
            f"Client connected to websocket (connection_id: {self.connection_id})"
        )
        return True

    def send_event(self, event: EventKind, data: Any) -> None:
        """Queue a frame for this client only."""
        try:
            self.connection.enqueue(
                EventEnvelope(event=event, data=data).to_client_frame()
            )
        except DeliveryError as ex:
            logger.warning(f"Could not queue {event} frame: {ex}")

    async def on_disconnect(self, websocket: WebSocket, close_code: int) -> None:  # type: ignore[override]
        """Unregister the connection and stop its writer."""
        self.registry.unregister(self.connection_id)
        await self.connection.stop()
        logger.debug(
            f"Client {self.connection_id} disconnected with code {close_code}"
        )
        clear_log_context()
