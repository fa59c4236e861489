"""
Tests for the per-client Connection handle.

Covers the bounded outbound queue, the writer task ordering and the
failure paths that take a connection out of the registry.
"""

import asyncio
import threading
from unittest.mock import AsyncMock, MagicMock

import pytest
from starlette.websockets import WebSocketDisconnect

from relay.exceptions import ConnectionClosedError, OutboundQueueFullError
from relay.managers.connection import Connection
from tests.mocks.websocket_mocks import (
    create_mock_websocket,
    sent_frames,
    wait_until,
)


class TestConnectionEnqueue:
    """Tests for Connection.enqueue without a running writer."""

    def test_enqueue_counts_pending_frames(self):
        connection = Connection(create_mock_websocket(), queue_size=5)

        connection.enqueue({"event": "notification", "data": 1})
        connection.enqueue({"event": "notification", "data": 2})

        assert connection.pending() == 2

    def test_enqueue_on_full_queue_raises(self):
        connection = Connection(create_mock_websocket(), queue_size=1)
        connection.bind("abc", MagicMock())
        connection.enqueue({"n": 1})

        with pytest.raises(OutboundQueueFullError) as exc_info:
            connection.enqueue({"n": 2})

        assert exc_info.value.connection_id == "abc"
        assert connection.pending() == 1

    @pytest.mark.asyncio
    async def test_enqueue_after_stop_raises(self):
        connection = Connection(create_mock_websocket())
        await connection.stop()

        assert connection.alive is False
        with pytest.raises(ConnectionClosedError):
            connection.enqueue({"n": 1})


class TestConnectionWriter:
    """Tests for the writer task that drains the outbound queue."""

    @pytest.mark.asyncio
    async def test_frames_are_sent_in_enqueue_order(self):
        ws = create_mock_websocket()
        connection = Connection(ws, queue_size=10)
        connection.start()

        for n in range(5):
            connection.enqueue({"n": n})

        await wait_until(lambda: ws.send_json.await_count == 5)
        assert sent_frames(ws) == [{"n": n} for n in range(5)]

        await connection.stop()

    @pytest.mark.asyncio
    async def test_send_error_marks_dead_and_calls_back(self):
        ws = create_mock_websocket()
        ws.send_json = AsyncMock(side_effect=WebSocketDisconnect(code=1006))
        on_failure = MagicMock()

        connection = Connection(ws)
        connection.bind("conn-1", on_failure)
        connection.start()
        connection.enqueue({"n": 1})

        await wait_until(lambda: on_failure.called)
        on_failure.assert_called_once_with("conn-1")
        assert connection.alive is False
        await wait_until(lambda: ws.close.await_count == 1)

        await connection.stop()

    @pytest.mark.asyncio
    async def test_send_timeout_closes_transport(self):
        async def stalled_send(frame):
            await asyncio.sleep(10)

        ws = create_mock_websocket()
        ws.send_json = AsyncMock(side_effect=stalled_send)
        on_failure = MagicMock()

        connection = Connection(ws, send_timeout=0.05)
        connection.bind("slow", on_failure)
        connection.start()
        connection.enqueue({"n": 1})

        await wait_until(lambda: ws.close.await_count == 1)
        on_failure.assert_called_once_with("slow")
        assert connection.alive is False

        await connection.stop()

    @pytest.mark.asyncio
    async def test_stop_prevents_further_sends(self):
        ws = create_mock_websocket()
        connection = Connection(ws)
        connection.start()

        await connection.stop()
        with pytest.raises(ConnectionClosedError):
            connection.enqueue({"n": 1})
        ws.send_json.assert_not_awaited()


class TestConnectionClose:
    """Tests for close and abort."""

    @pytest.mark.asyncio
    async def test_close_sends_close_code(self):
        ws = create_mock_websocket()
        connection = Connection(ws)
        connection.start()

        await connection.close(1001)

        ws.close.assert_awaited_once_with(code=1001)
        assert connection.alive is False

    @pytest.mark.asyncio
    async def test_close_ignores_already_closed_transport(self):
        ws = create_mock_websocket()
        ws.close = AsyncMock(side_effect=RuntimeError("already closed"))
        connection = Connection(ws)

        await connection.close()

        ws.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_abort_closes_in_background(self):
        ws = create_mock_websocket()
        connection = Connection(ws)
        connection.start()

        connection.abort(1013)

        assert connection.alive is False
        await connection.stop()
        ws.close.assert_awaited_once_with(code=1013)


class TestCrossLoopEnqueue:
    """Tests for enqueue calls made outside the writer's event loop."""

    def test_enqueue_after_owner_loop_closed_raises_closed(self):
        connection = Connection(create_mock_websocket())
        owner_loop = asyncio.new_event_loop()

        async def start():
            connection.start()

        owner_loop.run_until_complete(start())
        writers = asyncio.all_tasks(owner_loop)
        for task in writers:
            task.cancel()
        owner_loop.run_until_complete(
            asyncio.gather(*writers, return_exceptions=True)
        )
        owner_loop.close()
        assert connection.alive is True

        with pytest.raises(ConnectionClosedError):
            connection.enqueue({"n": 1})
        assert connection.alive is False

    @pytest.mark.asyncio
    async def test_overflow_in_owner_loop_calls_hook(self):
        release = asyncio.Event()

        async def blocked_send(frame):
            await release.wait()

        ws = create_mock_websocket()
        ws.send_json = AsyncMock(side_effect=blocked_send)
        connection = Connection(ws, queue_size=1, send_timeout=10)
        connection.start()
        connection.enqueue({"n": 0})
        await wait_until(lambda: ws.send_json.await_count == 1)

        on_overflow = MagicMock()

        def enqueue_from_thread():
            connection.enqueue({"n": 1}, on_overflow=on_overflow)
            connection.enqueue({"n": 2}, on_overflow=on_overflow)

        # Blocks the owner loop so both frames are handed over before it runs
        thread = threading.Thread(target=enqueue_from_thread)
        thread.start()
        thread.join()

        await wait_until(lambda: on_overflow.called)
        overflowed, error = on_overflow.call_args.args
        assert overflowed is connection
        assert isinstance(error, OutboundQueueFullError)
        assert connection.pending() == 1

        release.set()
        await connection.stop()
