from redis.asyncio import ConnectionPool, Redis

from relay.logging import logger
from relay.settings import app_settings


class RedisPool:
    """
    Redis connection pool manager.

    Manages Redis connection instances per database index with connection
    pooling. Each database gets its own pool.
    """

    __instances: dict[int, Redis] = {}
    __pools: dict[int, ConnectionPool] = {}

    @classmethod
    async def get_instance(cls, db: int) -> Redis:
        """
        Get or create a Redis instance for the specified database.

        Args:
            db: Redis database index

        Returns:
            Redis: Redis instance connected to the specified database
        """
        if db not in cls.__instances:
            cls.__instances[db] = await cls._create_instance(db)
        return cls.__instances[db]

    @classmethod
    async def _create_instance(cls, db: int) -> Redis:
        settings = app_settings.redis
        pool = ConnectionPool.from_url(
            settings.url,
            db=db,
            encoding="utf-8",
            decode_responses=True,
            max_connections=settings.MAX_CONNECTIONS,
            socket_timeout=settings.SOCKET_TIMEOUT,
            socket_connect_timeout=settings.CONNECT_TIMEOUT,
        )
        cls.__pools[db] = pool
        logger.info(f"Created Redis pool for {settings.url} db {db}")
        return Redis.from_pool(pool)

    @classmethod
    async def close_all(cls) -> None:
        """
        Close all Redis connection pools gracefully.

        Called during application shutdown.
        """
        for db, pool in cls.__pools.items():
            try:
                await pool.disconnect()
                logger.info(f"Closed Redis pool for database {db}")
            except (ConnectionError, OSError) as ex:
                logger.error(f"Error closing Redis pool for database {db}: {ex}")

        cls.__pools.clear()
        cls.__instances.clear()


async def get_redis_connection(db: int | None = None) -> Redis:
    """
    Get the shared Redis connection.

    Args:
        db: Database index, defaults to REDIS_DB.
    """
    if db is None:
        db = app_settings.REDIS_DB
    return await RedisPool.get_instance(db)
