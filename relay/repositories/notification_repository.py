"""
Repository for notifications.

Implements the NotificationStore contract (`create` / `list`) on top of
BaseRepository.

Example:
    ```python
    from relay.repositories.notification_repository import NotificationRepository
    from relay.storage.db import async_session

    async with async_session() as session:
        repo = NotificationRepository(session)
        notifications = await repo.list()
    ```
"""

from sqlmodel.ext.asyncio.session import AsyncSession

from relay.models.notification import Notification
from relay.repositories.base import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    def __init__(self, session: AsyncSession):
        super().__init__(session, Notification)

    async def list_for_user(self, user_id: str) -> list[Notification]:
        return await self.get_all(user_id=user_id)

    async def list(self) -> list[Notification]:
        """Every stored notification, oldest first."""
        return await self.get_all()
