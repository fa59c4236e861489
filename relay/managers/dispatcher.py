from typing import Any, Literal

from relay.api.ws.constants import EventKind
from relay.constants import WS_TRY_AGAIN_LATER_CODE
from relay.exceptions import (
    BroadcastBackendError,
    DeliveryError,
    OutboundQueueFullError,
)
from relay.logging import logger
from relay.managers.broadcast_backends import LocalBroadcastBackend
from relay.managers.connection import Connection
from relay.managers.connection_registry import ConnectionRegistry
from relay.protocols import BroadcastBackend
from relay.schemas.event import EventEnvelope
from relay.utils.metrics import (
    broadcast_deliveries_total,
    broadcast_delivery_failures_total,
    broadcast_messages_total,
)

OverflowPolicy = Literal["drop", "disconnect"]


class Dispatcher:
    """
    Best-effort, at-most-once fan-out of events to live connections.

    `broadcast` and `broadcast_to` hand an envelope to the backend; the
    backend calls `deliver` in every process, which enqueues the frame on
    each connection of a registry snapshot. Delivery failures for one
    connection are logged and never affect the others or the caller. There
    is no acknowledgment, retry or replay.
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        backend: BroadcastBackend | None = None,
        overflow_policy: OverflowPolicy = "disconnect",
    ) -> None:
        """
        Args:
            registry: The registry whose members receive local deliveries.
            backend: Transport for envelopes, in-process when omitted.
            overflow_policy: What to do with a client whose outbound queue
                is full: "drop" the frame for that client, or "disconnect" it.
        """
        self.registry = registry
        self.backend = backend or LocalBroadcastBackend()
        self.overflow_policy = overflow_policy
        self.backend.bind(self.deliver)

    async def start(self) -> None:
        await self.backend.start()
        logger.info(f"Broadcast dispatcher started ({self.backend.name} backend)")

    async def stop(self) -> None:
        await self.backend.stop()
        logger.info("Broadcast dispatcher stopped")

    async def broadcast(self, event: EventKind, payload: Any) -> None:
        """
        Sends `payload` tagged with `event` to every live connection.

        Args:
            event: Event name the clients listen for.
            payload: JSON-serializable data.
        """
        await self._publish(EventEnvelope(event=event, data=payload))

    async def broadcast_to(
        self, group: str, event: EventKind, payload: Any
    ) -> None:
        """
        Sends `payload` tagged with `event` to the members of `group` only.
        """
        await self._publish(EventEnvelope(event=event, data=payload, room=group))

    async def _publish(self, envelope: EventEnvelope) -> None:
        broadcast_messages_total.labels(event=str(envelope.event)).inc()
        try:
            await self.backend.publish(envelope)
        except BroadcastBackendError as ex:
            logger.error(
                f"Failed to publish {envelope.event} broadcast: {ex}",
                extra={"event": str(envelope.event), "room": envelope.room},
            )

    async def deliver(self, envelope: EventEnvelope) -> int:
        """
        Enqueues the envelope on every connection of a registry snapshot.

        Args:
            envelope: The envelope to deliver; `room` narrows the targets.

        Returns:
            Number of connections the frame was queued for.
        """
        targets = self.registry.snapshot(group=envelope.room)
        if not targets:
            return 0

        frame = envelope.to_client_frame()
        delivered = 0
        for connection in targets:
            try:
                connection.enqueue(frame, on_overflow=self._handle_overflow)
            except OutboundQueueFullError as ex:
                self._handle_overflow(connection, ex)
            except DeliveryError as ex:
                # Connection died between snapshot and send
                logger.warning(f"Skipping connection: {ex}")
                broadcast_delivery_failures_total.labels(reason="closed").inc()
            except Exception as ex:
                logger.error(
                    f"Unexpected error delivering to connection {connection.id}: {ex}",
                    exc_info=True,
                )
                broadcast_delivery_failures_total.labels(reason="error").inc()
            else:
                delivered += 1

        broadcast_deliveries_total.inc(delivered)
        logger.debug(
            f"Delivered {envelope.event} to {delivered}/{len(targets)} connections"
        )
        return delivered

    def _handle_overflow(
        self, connection: Connection, ex: OutboundQueueFullError
    ) -> None:
        broadcast_delivery_failures_total.labels(reason="queue_full").inc()
        if self.overflow_policy == "drop":
            logger.warning(f"Dropping frame: {ex}")
            return

        logger.warning(f"Disconnecting slow client: {ex}")
        if connection.id is not None:
            self.registry.unregister(connection.id)
        connection.abort(WS_TRY_AGAIN_LATER_CODE)
