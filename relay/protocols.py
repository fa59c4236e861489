"""
Protocol classes for structural subtyping (duck typing with type safety).

Protocols define the seams of the relay without requiring explicit
inheritance: any store implementing `create`/`list` can back the HTTP API,
and any backend implementing `bind`/`start`/`publish`/`stop` can carry
broadcasts.
"""

from typing import Awaitable, Callable, Protocol, TypeVar, runtime_checkable

from relay.schemas.event import EventEnvelope

T = TypeVar("T")

DeliverCallable = Callable[[EventEnvelope], Awaitable[int]]


@runtime_checkable
class NotificationStore(Protocol[T]):
    """
    Durable store collaborator for notification records.

    Type Parameters:
        T: The record type the store manages.
    """

    async def create(self, entity: T) -> T:
        """
        Persist a new record.

        Returns:
            The stored record with generated fields populated.
        """
        ...

    async def list_for_user(self, user_id: str) -> list[T]:
        """Return the records addressed to one user."""
        ...

    async def list(self) -> list[T]:
        """Return every stored record."""
        ...


@runtime_checkable
class BroadcastBackend(Protocol):
    """
    Transport that carries envelopes from `Dispatcher.broadcast` to the
    local fan-out of every process running the relay.
    """

    name: str

    def bind(self, deliver: DeliverCallable) -> None:
        """Attach the local fan-out callback."""
        ...

    async def start(self) -> None:
        """Acquire resources (connections, listener tasks)."""
        ...

    async def publish(self, envelope: EventEnvelope) -> None:
        """
        Publish an envelope.

        Raises:
            BroadcastBackendError: The envelope could not be published.
        """
        ...

    async def stop(self) -> None:
        """Release resources."""
        ...

    async def ping(self) -> bool:
        """Return True when the backend is usable."""
        ...
