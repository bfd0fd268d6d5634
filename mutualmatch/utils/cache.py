"""Redis cache utilities for the mutualmatch library."""

from typing import Optional, Type, TypeVar

import redis
import sentry_sdk
from pydantic import BaseModel

from mutualmatch.config import get_settings
from mutualmatch.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T", bound=BaseModel)


class RedisClient:
    """
    Singleton holder for the Redis client.

    Caching is optional: when REDIS_URL is missing or the connection pool
    cannot be built, the client is marked failed and every cache call
    becomes a no-op.
    """

    _instance: Optional[redis.Redis] = None
    _failed: bool = False

    @classmethod
    def get_client(cls) -> Optional[redis.Redis]:
        """
        Get or create a Redis client instance.

        Returns:
            Optional[redis.Redis]: Redis client instance or None if unavailable.
        """
        if cls._failed:
            return None

        if cls._instance is None:
            redis_url = get_settings().REDIS_URL
            if not redis_url:
                logger.debug("No Redis configuration found, caching will be disabled")
                cls._failed = True
                return None
            try:
                pool = redis.ConnectionPool.from_url(redis_url, max_connections=10, decode_responses=True)
                cls._instance = redis.Redis(connection_pool=pool)
                logger.info("Redis client initialized")
            except Exception as e:
                logger.warning("Failed to initialize Redis client, caching will be disabled", error=str(e))
                cls._failed = True
                return None
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the cached client so the next call re-reads settings."""
        cls._instance = None
        cls._failed = False


def set_cache_model(key: str, value: BaseModel, expiration: int = 3600) -> None:
    """
    Store a Pydantic model in the cache as JSON.

    Note:
        Silently skips caching if Redis is not available.
    """
    with sentry_sdk.start_span(op="cache.set", name=key) as span:
        span.set_data("expiration", expiration)

        client = RedisClient.get_client()
        if client is None:
            span.set_data("status", "disabled")
            return

        if expiration <= 0:
            logger.warning("Cache set without expiration, forcing default 1h", key=key)
            expiration = 3600

        try:
            client.set(key, value.model_dump_json(), ex=expiration)
            logger.debug("Cache set", key=key, expiration=expiration)
            span.set_data("status", "success")
        except redis.RedisError as e:
            logger.warning("Failed to set cache, continuing without cache", key=key, error=str(e))
            span.set_status("internal_error")


def get_cache_model(key: str, model_class: Type[T]) -> Optional[T]:
    """
    Get a Pydantic model from the cache.

    Returns:
        Optional[T]: Model instance, or None on a miss, a parse failure, or when Redis is unavailable.
    """
    with sentry_sdk.start_span(op="cache.get_model", name=key) as span:
        span.set_data("model", model_class.__name__)

        client = RedisClient.get_client()
        if client is None:
            span.set_data("status", "disabled")
            return None

        try:
            value: Optional[str] = client.get(key)  # type: ignore
        except redis.RedisError as e:
            logger.warning("Failed to get cache", key=key, error=str(e))
            span.set_status("internal_error")
            return None

        if not value:
            span.set_data("status", "miss")
            return None

        try:
            model = model_class.model_validate_json(value)
        except ValueError as e:
            logger.error("Failed to parse cached model", key=key, model=model_class.__name__, error=str(e))
            span.set_status("data_error")
            return None

        span.set_data("status", "hit")
        return model


def delete_cache(key: str) -> None:
    """Delete a value from the cache; skipped when Redis is unavailable."""
    with sentry_sdk.start_span(op="cache.delete", name=key) as span:
        client = RedisClient.get_client()
        if client is None:
            span.set_data("status", "disabled")
            return

        try:
            client.delete(key)
            span.set_data("status", "success")
        except redis.RedisError as e:
            logger.warning("Failed to delete cache, continuing without cache", key=key, error=str(e))
            span.set_status("internal_error")
