"""
Mock factory functions and fakes for repository testing.
"""

from unittest.mock import AsyncMock

from relay.exceptions import DatabaseError
from relay.models.notification import Notification
from relay.repositories.notification_repository import NotificationRepository


class InMemoryNotificationStore:
    """
    Notification store keeping records in a list.

    Set `fail` to make every call raise DatabaseError, or `error` to make
    every call raise that exception instead.
    """

    def __init__(self) -> None:
        self.items: list[Notification] = []
        self.fail = False
        self.error: Exception | None = None

    def _check(self) -> None:
        if self.error is not None:
            raise self.error
        if self.fail:
            raise DatabaseError("Internal Server Error")

    async def create(self, entity: Notification) -> Notification:
        self._check()
        entity.id = len(self.items) + 1
        self.items.append(entity)
        return entity

    async def list_for_user(self, user_id: str) -> list[Notification]:
        self._check()
        return [n for n in self.items if n.user_id == user_id]

    async def list(self) -> list[Notification]:
        self._check()
        return list(self.items)


def create_mock_notification_repository():
    """
    Creates a mock NotificationRepository with common methods.

    Returns:
        AsyncMock: Mocked NotificationRepository instance
    """
    repo_mock = AsyncMock(spec=NotificationRepository)
    repo_mock.create = AsyncMock()
    repo_mock.list = AsyncMock(return_value=[])
    repo_mock.list_for_user = AsyncMock(return_value=[])
    return repo_mock
