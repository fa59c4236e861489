from enum import Enum


class EventKind(str, Enum):
    """
    Event names exchanged over the realtime channel.

    Shared by server and clients so that neither side hardcodes strings.

    Attributes:
        NOTIFICATION: Server -> client, payload is a persisted notification.
        CONNECTED: Server -> client greeting carrying the connection id.
        ERROR: Server -> client, the previous client frame was rejected.
        JOIN_ROOM: Client -> server, join a named group.
        LEAVE_ROOM: Client -> server, leave a named group.

    Example:
        >>> str(EventKind.NOTIFICATION)
        'notification'
    """

    NOTIFICATION = "notification"
    CONNECTED = "connected"
    ERROR = "error"
    JOIN_ROOM = "join_room"
    LEAVE_ROOM = "leave_room"

    def __str__(self):
        return self.value


# Events a client is allowed to emit
CLIENT_EVENTS = frozenset({EventKind.JOIN_ROOM, EventKind.LEAVE_ROOM})
