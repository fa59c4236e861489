"""
Notification endpoints.

A successful write is persisted, answered with 201, and then broadcast to
every live WebSocket connection as a background task, so the writer never
waits on (or hears about) realtime delivery.
"""

from fastapi import APIRouter, BackgroundTasks, Query, status

from relay.api.ws.constants import EventKind
from relay.commands.notification_commands import (
    CreateNotificationCommand,
    ListNotificationsCommand,
    ListNotificationsInput,
)
from relay.dependencies import DispatcherDep, NotificationRepoDep
from relay.schemas.notification import NotificationCreate, NotificationRecord
from relay.schemas.response import ApiResponse

router = APIRouter(prefix="/notification", tags=["notification"])


@router.post(
    "",
    response_model=ApiResponse[NotificationRecord],
    status_code=status.HTTP_201_CREATED,
    summary="Store a notification and broadcast it",
)
async def create_notification(
    payload: NotificationCreate,
    repo: NotificationRepoDep,
    dispatcher: DispatcherDep,
    background_tasks: BackgroundTasks,
) -> ApiResponse[NotificationRecord]:
    """
    Persist a notification and broadcast it to all connected clients.

    Args:
        payload: `{"message": str, "userId": str}`.
        repo: Notification repository (injected).
        dispatcher: Broadcast dispatcher (injected).
        background_tasks: Runs the broadcast after the response is sent.

    Returns:
        201 with the stored record. 400 on missing fields, 500 on storage
        failure; in both cases nothing is broadcast.
    """
    command = CreateNotificationCommand(repo)
    record = await command.execute(payload)

    background_tasks.add_task(
        dispatcher.broadcast, EventKind.NOTIFICATION, record.to_payload()
    )

    return ApiResponse[NotificationRecord](
        message="Notification Sent Successfully", success=True, data=record
    )


@router.get(
    "",
    response_model=ApiResponse[list[NotificationRecord]],
    summary="List stored notifications",
)
async def get_notifications(
    repo: NotificationRepoDep,
    user_id: str | None = Query(default=None, alias="userId"),
) -> ApiResponse[list[NotificationRecord]]:
    """
    List stored notifications, oldest first.

    Args:
        repo: Notification repository (injected).
        user_id: Optional filter on the target user.

    Returns:
        200 with the records, 404 when there are none, 500 on storage failure.
    """
    command = ListNotificationsCommand(repo)
    records = await command.execute(ListNotificationsInput(user_id=user_id))
    return ApiResponse[list[NotificationRecord]](
        message="Notifications Fetched Successfully", success=True, data=records
    )
