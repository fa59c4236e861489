"""
A single live WebSocket session owned by the connection registry.

Each connection has a bounded outbound queue drained by its own writer
task, so a broadcast only enqueues and one slow client never stalls
delivery to the others. Frames to the same connection are sent in the order
they were enqueued.
"""

import asyncio
from typing import Any, Callable

from starlette.websockets import WebSocket, WebSocketDisconnect

from relay.constants import WS_CLOSE_TIMEOUT_SECONDS, WS_NORMAL_CLOSURE_CODE
from relay.exceptions import ConnectionClosedError, OutboundQueueFullError
from relay.logging import logger
from relay.utils.metrics import broadcast_delivery_failures_total


class Connection:
    """
    Handle for one live bidirectional channel to one client.

    Attributes:
        websocket: The underlying WebSocket.
        id: Identifier assigned by the registry on register, None before.
        groups: Names of the groups (rooms) this connection has joined.
        send_timeout: Seconds a single send may take before the client is
            considered stalled.
    """

    def __init__(
        self,
        websocket: WebSocket,
        queue_size: int = 100,
        send_timeout: float = 5.0,
    ) -> None:
        self.websocket = websocket
        self.id: str | None = None
        self.groups: set[str] = set()
        self.send_timeout = send_timeout
        self._outbound: asyncio.Queue[dict[str, Any]] = asyncio.Queue(
            maxsize=queue_size
        )
        self._alive = True
        self._loop: asyncio.AbstractEventLoop | None = None
        self._writer: asyncio.Task | None = None
        self._closer: asyncio.Task | None = None
        self._on_failure: Callable[[str], Any] | None = None

    def __repr__(self) -> str:
        return f"Connection(id={self.id!r}, alive={self._alive})"

    @property
    def alive(self) -> bool:
        return self._alive

    def bind(
        self, connection_id: str, on_failure: Callable[[str], Any]
    ) -> None:
        """
        Attach the registry-assigned id and the callback used to remove
        this connection when its writer detects a broken transport.
        """
        self.id = connection_id
        self._on_failure = on_failure

    def start(self) -> None:
        """Start the writer task. Must be called from a running event loop."""
        if self._writer is None:
            self._loop = asyncio.get_running_loop()
            self._writer = asyncio.create_task(
                self._drain(), name=f"ws-writer-{id(self.websocket)}"
            )

    def _foreign_loop(self) -> bool:
        """True when called outside the loop that owns the writer task."""
        if self._loop is None:
            return False
        try:
            return asyncio.get_running_loop() is not self._loop
        except RuntimeError:
            return True

    def enqueue(
        self,
        frame: dict[str, Any],
        on_overflow: Callable[["Connection", OutboundQueueFullError], Any]
        | None = None,
    ) -> None:
        """
        Queue a frame for sending without blocking.

        May be called from any thread; frames coming from outside the
        writer's event loop are handed over with `call_soon_threadsafe`.
        If the queue turns out to be full once the frame reaches the writer's
        loop, `on_overflow` is called there with this connection.

        Raises:
            ConnectionClosedError: The connection is no longer alive, or the
                loop that owns it has been closed.
            OutboundQueueFullError: The outbound buffer is full.
        """
        if not self._alive:
            raise ConnectionClosedError(self.id)
        if self._foreign_loop():
            if self._outbound.full():
                raise OutboundQueueFullError(self.id)
            try:
                self._loop.call_soon_threadsafe(
                    self._put_from_owner, frame, on_overflow
                )
            except RuntimeError:
                # Owning loop is closed
                self._alive = False
                raise ConnectionClosedError(self.id)
            return
        try:
            self._outbound.put_nowait(frame)
        except asyncio.QueueFull:
            raise OutboundQueueFullError(self.id)

    def _put_from_owner(
        self,
        frame: dict[str, Any],
        on_overflow: Callable[["Connection", OutboundQueueFullError], Any]
        | None,
    ) -> None:
        if not self._alive:
            return
        try:
            self._outbound.put_nowait(frame)
        except asyncio.QueueFull:
            if on_overflow is not None:
                on_overflow(self, OutboundQueueFullError(self.id))
                return
            logger.warning(f"Dropping frame for connection {self.id}: queue full")
            broadcast_delivery_failures_total.labels(reason="queue_full").inc()

    def pending(self) -> int:
        """Number of frames waiting to be sent."""
        return self._outbound.qsize()

    async def _drain(self) -> None:
        while True:
            frame = await self._outbound.get()
            try:
                await asyncio.wait_for(
                    self.websocket.send_json(frame), timeout=self.send_timeout
                )
            except asyncio.TimeoutError:
                self._fail("send_timeout", "send timed out")
            except (WebSocketDisconnect, ConnectionError, RuntimeError) as e:
                # RuntimeError: WebSocket in invalid state (already closed)
                self._fail("send_error", str(e))
            except Exception as e:
                # Catch-all for unexpected send errors
                self._fail("send_error", f"unexpected error: {e}")
            else:
                continue
            await self._close_transport(WS_NORMAL_CLOSURE_CODE)
            return

    def _fail(self, reason: str, detail: str) -> None:
        logger.warning(
            f"Failed to send to connection {self.id}: {detail}",
            extra={"connection_id": self.id, "reason": reason},
        )
        broadcast_delivery_failures_total.labels(reason=reason).inc()
        self._alive = False
        if self._on_failure is not None and self.id is not None:
            self._on_failure(self.id)

    def abort(self, code: int = WS_NORMAL_CLOSURE_CODE) -> None:
        """
        Mark the connection dead and close it in the background.

        Used by the dispatcher when the client cannot keep up; never blocks
        the caller.
        """
        self._alive = False
        if self._foreign_loop():
            try:
                self._loop.call_soon_threadsafe(self._abort_in_owner, code)
            except RuntimeError:
                logger.debug(f"Loop of connection {self.id} already closed")
        else:
            self._abort_in_owner(code)

    def _abort_in_owner(self, code: int) -> None:
        if self._writer is not None and not self._writer.done():
            self._writer.cancel()
        if self._closer is None:
            self._closer = asyncio.create_task(self._close_transport(code))

    async def close(self, code: int = WS_NORMAL_CLOSURE_CODE) -> None:
        """Stop the writer and close the transport (best-effort)."""
        if self._foreign_loop():
            future = asyncio.run_coroutine_threadsafe(self.close(code), self._loop)
            await asyncio.wrap_future(future)
            return
        await self.stop()
        await self._close_transport(code)

    async def stop(self) -> None:
        """Stop the writer, e.g. after the client has closed the transport."""
        self._alive = False
        writer, self._writer = self._writer, None
        if writer is not None and not writer.done():
            writer.cancel()
        pending = [t for t in (writer, self._closer) if t is not None]
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    async def _close_transport(self, code: int) -> None:
        try:
            await asyncio.wait_for(
                self.websocket.close(code=code),
                timeout=WS_CLOSE_TIMEOUT_SECONDS,
            )
        except (
            asyncio.TimeoutError,
            WebSocketDisconnect,
            ConnectionError,
            RuntimeError,
        ) as e:
            logger.debug(f"Close of connection {self.id} ignored: {e}")
