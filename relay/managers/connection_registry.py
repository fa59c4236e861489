"""Registry of live WebSocket connections."""

import threading
import uuid
from typing import Iterator

from relay.constants import WS_GOING_AWAY_CODE
from relay.logging import logger
from relay.managers.connection import Connection
from relay.utils.metrics import ws_connections_active


class ConnectionRegistry:
    """
    Single source of truth for which clients are currently reachable.

    Connections are keyed by a uuid4 identifier generated at register time
    for O(1) lookups. All reads and writes of the underlying maps happen
    under one lock so that a snapshot never observes a half-applied
    register/unregister. The lock is never held across an await.
    """

    def __init__(self) -> None:
        self._connections: dict[str, Connection] = {}
        self._groups: dict[str, set[str]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)

    def __contains__(self, connection_id: object) -> bool:
        with self._lock:
            return connection_id in self._connections

    def __iter__(self) -> Iterator[Connection]:
        return iter(self.snapshot())

    def _generate_id(self) -> str:
        # Caller holds the lock
        while True:
            connection_id = str(uuid.uuid4())
            if connection_id not in self._connections:
                return connection_id

    def register(self, connection: Connection) -> str:
        """
        Adds a new connection and assigns its identifier.

        Args:
            connection: A freshly accepted connection.

        Returns:
            The identifier assigned to the connection.
        """
        with self._lock:
            connection_id = self._generate_id()
            connection.bind(connection_id, self.unregister)
            self._connections[connection_id] = connection

        ws_connections_active.inc()
        logger.debug(
            f"websocket object ({id(connection.websocket)}) added to active "
            f"connections with key {connection_id}"
        )
        return connection_id

    def unregister(self, connection_id: str) -> bool:
        """
        Removes a connection and all of its group memberships.

        Safe to call for an id that is already gone, so duplicate close
        signals are harmless.

        Args:
            connection_id: The id returned by `register`.

        Returns:
            True if a connection was removed, False if it was already absent.
        """
        with self._lock:
            connection = self._connections.pop(connection_id, None)
            if connection is None:
                return False
            for group in connection.groups:
                members = self._groups.get(group)
                if members is None:
                    continue
                members.discard(connection_id)
                if not members:
                    del self._groups[group]
            connection.groups.clear()

        ws_connections_active.dec()
        logger.debug(
            f"websocket object ({id(connection.websocket)}) removed from "
            f"active connections for key {connection_id}"
        )
        return True

    def get(self, connection_id: str) -> Connection | None:
        with self._lock:
            return self._connections.get(connection_id)

    def snapshot(self, group: str | None = None) -> tuple[Connection, ...]:
        """
        Copy of the current membership, in registration order.

        Args:
            group: When given, only members of this group are returned.

        Returns:
            An immutable tuple that later registry changes do not affect.
        """
        with self._lock:
            if group is None:
                return tuple(self._connections.values())
            members = self._groups.get(group, set())
            return tuple(
                connection
                for connection_id, connection in self._connections.items()
                if connection_id in members
            )

    def join(self, connection_id: str, group: str) -> bool:
        """
        Adds a connection to a named group. Membership is additive.

        Returns:
            False when the connection is not registered.
        """
        with self._lock:
            connection = self._connections.get(connection_id)
            if connection is None:
                return False
            self._groups.setdefault(group, set()).add(connection_id)
            connection.groups.add(group)
        logger.debug(f"Connection {connection_id} joined group {group}")
        return True

    def leave(self, connection_id: str, group: str) -> bool:
        """
        Removes a connection from a named group.

        Returns:
            True if the connection was a member of the group.
        """
        with self._lock:
            members = self._groups.get(group)
            if members is None or connection_id not in members:
                return False
            members.discard(connection_id)
            if not members:
                del self._groups[group]
            connection = self._connections.get(connection_id)
            if connection is not None:
                connection.groups.discard(group)
        logger.debug(f"Connection {connection_id} left group {group}")
        return True

    def groups(self) -> dict[str, int]:
        """Group names with their member counts."""
        with self._lock:
            return {name: len(ids) for name, ids in self._groups.items()}

    async def close_all(self, code: int = WS_GOING_AWAY_CODE) -> int:
        """
        Closes and unregisters every live connection (process shutdown).

        Returns:
            Number of connections that were closed.
        """
        connections = self.snapshot()
        for connection in connections:
            if connection.id is not None:
                self.unregister(connection.id)
            await connection.close(code)

        if connections:
            logger.info(f"Closed {len(connections)} websocket connections")
        return len(connections)
