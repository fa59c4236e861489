"""
Commands for notification business operations.

Example:
    ```python
    command = CreateNotificationCommand(repo)
    record = await command.execute(NotificationCreate(message="hi", userId="u1"))
    ```
"""

from pydantic import BaseModel, Field

from relay.commands.base import BaseCommand
from relay.exceptions import NotFoundError, ValidationError
from relay.logging import logger
from relay.models.notification import Notification
from relay.protocols import NotificationStore
from relay.schemas.notification import NotificationCreate, NotificationRecord
from relay.utils.metrics import notifications_created_total


class ListNotificationsInput(BaseModel):  # type: ignore[misc]
    """Input model for listing notifications."""

    user_id: str | None = Field(default=None, description="Filter by user ID")


class CreateNotificationCommand(
    BaseCommand[NotificationCreate, NotificationRecord]
):
    """
    Validate and persist a notification.

    Broadcasting is left to the caller so that it can happen outside the
    request/response cycle.
    """

    def __init__(self, repository: NotificationStore[Notification]):
        self.repository = repository

    async def execute(self, input_data: NotificationCreate) -> NotificationRecord:
        """
        Raises:
            ValidationError: `message` or `userId` is missing or blank.
            DatabaseError: The store rejected the write.
        """
        message = input_data.message
        user_id = input_data.user_id
        if not message or not message.strip() or not user_id or not user_id.strip():
            raise ValidationError("Bad Request")

        notification = await self.repository.create(
            Notification(message=message, user_id=user_id)
        )
        notifications_created_total.inc()
        logger.info(
            f"Stored notification {notification.id} for user {user_id}"
        )
        return NotificationRecord.model_validate(notification)


class ListNotificationsCommand(
    BaseCommand[ListNotificationsInput, list[NotificationRecord]]
):
    """Return stored notifications, raising NotFoundError when there are none."""

    def __init__(self, repository: NotificationStore[Notification]):
        self.repository = repository

    async def execute(
        self, input_data: ListNotificationsInput
    ) -> list[NotificationRecord]:
        if input_data.user_id is not None:
            notifications = await self.repository.list_for_user(
                input_data.user_id
            )
        else:
            notifications = await self.repository.list()

        if not notifications:
            raise NotFoundError("No Notification Found")

        return [NotificationRecord.model_validate(n) for n in notifications]
