from datetime import datetime, timezone

from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Notification(SQLModel, table=True):
    """
    SQLModel representing a stored notification.

    This is a clean data model without Active Record methods.
    Use NotificationRepository for all database operations.

    Attributes:
        id: Primary key identifier
        message: Notification text
        user_id: Identifier of the user the notification is addressed to
        read: Whether the user has read it
        created_at: Creation timestamp (UTC)
        updated_at: Last update timestamp (UTC)
    """

    __tablename__ = "notification"
    __table_args__ = {"extend_existing": True}

    id: int | None = Field(default=None, primary_key=True)
    message: str
    user_id: str = Field(index=True)
    read: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
