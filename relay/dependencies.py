"""
Dependency injection configuration for FastAPI.

The connection registry and dispatcher are built once by the application
factory and stored on `app.state`; handlers receive them through these
dependencies instead of importing a module-level singleton, which keeps
them overridable in tests via `app.dependency_overrides`.

Example:
    ```python
    @router.post("/notification")
    async def create(repo: NotificationRepoDep, dispatcher: DispatcherDep):
        ...
    ```
"""

from typing import Annotated

from fastapi import Depends, Request
from sqlmodel.ext.asyncio.session import AsyncSession

from relay.managers.connection_registry import ConnectionRegistry
from relay.managers.dispatcher import Dispatcher
from relay.repositories.notification_repository import NotificationRepository
from relay.storage.db import get_session

# ============================================================================
# Database Session Dependencies
# ============================================================================

SessionDep = Annotated[AsyncSession, Depends(get_session)]


# ============================================================================
# Realtime Dependencies
# ============================================================================


def get_registry(request: Request) -> ConnectionRegistry:
    return request.app.state.registry


def get_dispatcher(request: Request) -> Dispatcher:
    return request.app.state.dispatcher


RegistryDep = Annotated[ConnectionRegistry, Depends(get_registry)]
DispatcherDep = Annotated[Dispatcher, Depends(get_dispatcher)]


# ============================================================================
# Repository Dependencies
# ============================================================================


def get_notification_repository(session: SessionDep) -> NotificationRepository:
    """
    Get notification repository with injected database session.

    Args:
        session: Database session injected by FastAPI.
    """
    return NotificationRepository(session)


NotificationRepoDep = Annotated[
    NotificationRepository, Depends(get_notification_repository)
]
