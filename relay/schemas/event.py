from typing import Any

from pydantic import BaseModel, Field

from relay.api.ws.constants import EventKind


class EventEnvelope(BaseModel):  # type: ignore[misc]
    """
    Frame exchanged over the realtime channel.

    `room` is only used between the dispatcher and its backend to target a
    group; it is never part of the frame sent to clients.
    """

    event: EventKind = Field(frozen=True)
    data: Any = None
    room: str | None = Field(default=None, frozen=True)

    def to_client_frame(self) -> dict[str, Any]:
        """Serialize the envelope for sending over a WebSocket."""
        return self.model_dump(mode="json", exclude={"room"})


class ClientEventModel(BaseModel):  # type: ignore[misc]
    """Frame emitted by a client, e.g. `{"event": "join_room", "data": "ops"}`."""

    event: EventKind
    data: Any = None
