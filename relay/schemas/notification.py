from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class NotificationCreate(BaseModel):  # type: ignore[misc]
    """
    Body of a write request: `{"message": "...", "userId": "..."}`.

    Both fields are optional at the schema level so that a missing field is
    reported as the same 400 "Bad Request" as an empty one.
    """

    model_config = ConfigDict(populate_by_name=True)

    message: str | None = Field(default=None, description="Notification text")
    user_id: str | None = Field(
        default=None, alias="userId", description="Target user identifier"
    )


class NotificationRecord(BaseModel):  # type: ignore[misc]
    """Wire representation of a stored notification (camelCase keys)."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    id: int
    message: str
    user_id: str
    read: bool = False
    created_at: datetime
    updated_at: datetime

    def to_payload(self) -> dict:
        """JSON-ready dict, identical to what the HTTP API returns."""
        return self.model_dump(mode="json", by_alias=True)
