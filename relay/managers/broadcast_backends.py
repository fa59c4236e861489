"""
Broadcast backends used by the dispatcher.

The local backend delivers in-process. The Redis backend publishes each
envelope on a pub/sub channel and delivers whatever arrives on that channel,
so every relay process sharing the channel reaches its own connections.
"""

import asyncio

from pydantic import ValidationError
from redis.asyncio import Redis
from redis.exceptions import RedisError

from relay.constants import (
    REDIS_LISTENER_ERROR_BACKOFF_SECONDS,
    REDIS_PUBSUB_POLL_TIMEOUT_SECONDS,
)
from relay.exceptions import BroadcastBackendError
from relay.logging import logger
from relay.protocols import DeliverCallable
from relay.schemas.event import EventEnvelope
from relay.storage.redis import get_redis_connection


class LocalBroadcastBackend:
    """Delivers envelopes to the registry of this process only."""

    name = "local"

    def __init__(self) -> None:
        self._deliver: DeliverCallable | None = None

    def bind(self, deliver: DeliverCallable) -> None:
        self._deliver = deliver

    async def start(self) -> None:
        pass

    async def publish(self, envelope: EventEnvelope) -> None:
        if self._deliver is None:
            raise BroadcastBackendError("Backend is not bound to a dispatcher")
        await self._deliver(envelope)

    async def stop(self) -> None:
        pass

    async def ping(self) -> bool:
        return True


class RedisBroadcastBackend:
    """
    Fans envelopes out through a Redis pub/sub channel.

    Messages published by this process come back through the subscription
    and are delivered locally like everyone else's, so `publish` never
    delivers directly.
    """

    name = "redis"

    def __init__(self, channel: str, redis: Redis | None = None) -> None:
        """
        Args:
            channel: Pub/sub channel shared by all relay processes.
            redis: Redis client; the shared pool is used when omitted.
        """
        self.channel = channel
        self._redis = redis
        self._pubsub = None
        self._task: asyncio.Task | None = None
        self._deliver: DeliverCallable | None = None

    def bind(self, deliver: DeliverCallable) -> None:
        self._deliver = deliver

    async def _get_redis(self) -> Redis:
        if self._redis is None:
            self._redis = await get_redis_connection()
        return self._redis

    async def start(self) -> None:
        await self._get_redis()
        if self._task is None:
            self._task = asyncio.create_task(
                self._listen(), name=f"redis-broadcast-{self.channel}"
            )

    async def publish(self, envelope: EventEnvelope) -> None:
        try:
            redis = await self._get_redis()
            await redis.publish(self.channel, envelope.model_dump_json())
        except (RedisError, ConnectionError, TimeoutError) as ex:
            raise BroadcastBackendError(
                f"Redis publish on {self.channel} failed: {ex}"
            ) from ex

    async def _listen(self) -> None:
        logger.info(f"Started broadcast listener for {self.channel}")
        while True:
            try:
                if self._pubsub is None:
                    redis = await self._get_redis()
                    self._pubsub = redis.pubsub()
                    await self._pubsub.subscribe(self.channel)

                msg = await self._pubsub.get_message(
                    ignore_subscribe_messages=True,
                    timeout=REDIS_PUBSUB_POLL_TIMEOUT_SECONDS,
                )
                if msg:
                    await self.handle(msg["data"])
            except asyncio.CancelledError:
                logger.info(f"Broadcast listener on {self.channel} cancelled")
                raise
            except (RedisError, ConnectionError, TimeoutError) as ex:
                logger.error(f"Error in broadcast listener {self.channel}: {ex}")
                self._pubsub = None
                await asyncio.sleep(REDIS_LISTENER_ERROR_BACKOFF_SECONDS)

    async def handle(self, data: str | bytes) -> int:
        """
        Deliver one raw pub/sub payload locally.

        Returns:
            Number of local connections the envelope was queued for.
        """
        try:
            envelope = EventEnvelope.model_validate_json(data)
        except ValidationError as ex:
            logger.warning(f"Discarding malformed broadcast on {self.channel}: {ex}")
            return 0
        if self._deliver is None:
            return 0
        return await self._deliver(envelope)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)

        pubsub, self._pubsub = self._pubsub, None
        if pubsub is not None:
            try:
                await pubsub.unsubscribe(self.channel)
                await pubsub.aclose()
            except (RedisError, ConnectionError) as ex:
                logger.warning(f"Error closing broadcast subscription: {ex}")

    async def ping(self) -> bool:
        try:
            redis = await self._get_redis()
            return bool(await redis.ping())
        except (RedisError, ConnectionError, TimeoutError) as ex:
            logger.error(f"Redis health check failed: {ex}")
            return False


def create_backend(kind: str, channel: str) -> LocalBroadcastBackend | RedisBroadcastBackend:
    """Build the backend named by the BROADCAST_BACKEND setting."""
    if kind == "redis":
        return RedisBroadcastBackend(channel)
    return LocalBroadcastBackend()
