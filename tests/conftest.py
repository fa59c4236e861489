"""
Pytest configuration and fixtures for testing.

This module provides shared fixtures for the application, the connection
registry, the dispatcher and an in-memory notification store.
"""

import os
import tempfile
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

# Set environment variables for testing before importing app modules
_test_dir = tempfile.mkdtemp(prefix="relay-tests-")
os.environ.setdefault(
    "DATABASE_URL",
    f"sqlite+aiosqlite:///{os.path.join(_test_dir, 'relay-test.db')}",
)
os.environ.setdefault("LOG_FILE_PATH", "")
os.environ.setdefault("BROADCAST_BACKEND", "local")

from relay import application  # noqa: E402
from relay.dependencies import get_dispatcher, get_notification_repository  # noqa: E402
from relay.managers.connection_registry import ConnectionRegistry  # noqa: E402
from relay.managers.dispatcher import Dispatcher  # noqa: E402
from tests.mocks.repository_mocks import InMemoryNotificationStore  # noqa: E402


@pytest.fixture
def registry():
    """Empty connection registry."""
    return ConnectionRegistry()


@pytest.fixture
def dispatcher(registry):
    """Dispatcher over the `registry` fixture with the in-process backend."""
    return Dispatcher(registry)


@pytest.fixture
def notification_store():
    """
    In-memory stand-in for the notification repository.

    Returns:
        InMemoryNotificationStore: Empty store shared with the `app` fixture.
    """
    return InMemoryNotificationStore()


@pytest.fixture
def app(notification_store):
    """Fresh application whose HTTP handlers use the in-memory store."""
    app = application()
    app.dependency_overrides[get_notification_repository] = (
        lambda: notification_store
    )
    return app


@pytest.fixture
def client(app):
    """TestClient with the application lifespan running."""
    with TestClient(app) as client:
        yield client


@pytest.fixture
def mock_dispatcher(app):
    """
    Replaces the dispatcher seen by HTTP handlers with a mock.

    Returns:
        MagicMock: Dispatcher mock with an awaitable `broadcast`.
    """
    dispatcher_mock = MagicMock(spec=Dispatcher)
    dispatcher_mock.broadcast = AsyncMock()
    dispatcher_mock.backend = MagicMock()
    dispatcher_mock.backend.name = "mock"
    dispatcher_mock.backend.ping = AsyncMock(return_value=True)
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher_mock
    return dispatcher_mock
