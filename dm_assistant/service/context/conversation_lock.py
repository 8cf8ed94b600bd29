import asyncio
import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator

from redis import Redis
from redis.exceptions import RedisError

import dm_assistant.config.config as configs
from dm_assistant.client.db.redis import redis_client

logger = logging.getLogger(__name__)

POLL_INTERVAL_SEC = 0.2


# Delete only while the key still holds our token; it may have expired and been retaken.
RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
end
return 0
"""


def _lock_key(coach_id: str, user_handle: str) -> str:
    return f"dm:lock:{coach_id}:{user_handle}"


def try_acquire(r: Redis, key: str, token: str, ttl: int) -> bool:
    return bool(r.set(key, token, nx=True, ex=ttl))


def release(r: Redis, key: str, token: str) -> bool:
    released = r.register_script(RELEASE_SCRIPT)(keys=[key], args=[token])
    return bool(released)


@asynccontextmanager
async def conversation_lock(
    coach_id: str,
    user_handle: str,
    r: Redis | None = None,
    wait_sec: float | None = None,
) -> AsyncIterator[bool]:
    """
    Serialize message processing per (coach, handle). Yields whether the lock is
    held; without redis, or when the wait budget runs out, processing goes on
    unlocked.
    """
    r = r if r is not None else redis_client
    if r is None:
        yield False
        return

    key = _lock_key(coach_id, user_handle)
    token = str(uuid.uuid4())
    deadline = time.monotonic() + (configs.CONVERSATION_LOCK_WAIT if wait_sec is None else wait_sec)
    acquired = False
    try:
        while True:
            acquired = await asyncio.to_thread(try_acquire, r, key, token, configs.CONVERSATION_LOCK_TTL)
            if acquired or time.monotonic() >= deadline:
                break
            await asyncio.sleep(POLL_INTERVAL_SEC)
    except RedisError:
        logger.warning("conversation lock unavailable key=%s, continuing unlocked", key, exc_info=True)
        acquired = False
    else:
        if not acquired:
            logger.warning("conversation lock wait expired key=%s, continuing unlocked", key)

    try:
        yield acquired
    finally:
        if acquired:
            try:
                await asyncio.to_thread(release, r, key, token)
            except RedisError:
                logger.warning("failed to release conversation lock key=%s", key, exc_info=True)
