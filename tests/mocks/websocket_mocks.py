"""
Mock factory functions for WebSocket testing.

Provides mocks for WebSocket connections and small async helpers.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock


def create_mock_websocket():
    """
    Creates a mock WebSocket connection with common methods.

    Returns:
        MagicMock: Mocked WebSocket instance
    """
    from fastapi import WebSocket

    ws_mock = MagicMock(spec=WebSocket)

    # Send operations
    ws_mock.send_json = AsyncMock()
    ws_mock.send_text = AsyncMock()

    # Connection lifecycle
    ws_mock.accept = AsyncMock()
    ws_mock.close = AsyncMock()

    ws_mock.headers = {}
    ws_mock.url = MagicMock()
    ws_mock.url.path = "/ws"

    return ws_mock


def sent_frames(ws_mock) -> list:
    """Frames passed to `send_json`, in call order."""
    return [call.args[0] for call in ws_mock.send_json.await_args_list]


async def wait_until(predicate, timeout: float = 1.0) -> None:
    """
    Yield to the event loop until `predicate()` is true.

    Raises:
        AssertionError: The predicate stayed false for `timeout` seconds.
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("Condition not met before timeout")
        await asyncio.sleep(0.01)
