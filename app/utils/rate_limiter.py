import logging
from typing import Optional
from redis import Redis, ConnectionPool, RedisError
from app.core.config import settings

logger = logging.getLogger(__name__)

# Simple Redis-based rate limiter
_pool: Optional[ConnectionPool] = None
_client: Optional[Redis] = None


def get_client() -> Redis:
    global _pool, _client
    if _client is None:
        _pool = ConnectionPool.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=settings.DB_CONNECT_TIMEOUT_SECONDS,
        )
        _client = Redis(connection_pool=_pool)
    return _client


def close_client() -> None:
    global _pool, _client
    if _client is not None:
        _client.close()
    if _pool is not None:
        _pool.disconnect()
    _pool = None
    _client = None


def allow(key: str, limit: int, window_seconds: int) -> bool:
    """Return True if action under key is allowed within window, else False.

    Uses INCR + EXPIRE (nx) for a fixed window per key.
    """
    r = get_client()
    with r.pipeline() as pipe:
        pipe.incr(key, 1)
        pipe.expire(key, window_seconds, nx=True)
        count, _ = pipe.execute()
    return int(count) <= limit


def allow_submission(client_ip: str) -> bool:
    """Per-IP limit on waitlist submissions. Fails open when Redis is down."""
    limit = settings.WAITLIST_SUBMIT_LIMIT_PER_MINUTE
    if limit <= 0:
        return True
    try:
        return allow(f"waitlist:submit:{client_ip}", limit, 60)
    except RedisError as e:
        logger.warning("Rate limiter unavailable, allowing submission: %s", e)
        return True
