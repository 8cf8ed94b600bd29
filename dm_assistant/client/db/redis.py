import os

from redis import Redis

import dm_assistant.config.config as configs

redis_client = (
    Redis(
        host=os.getenv("REDIS_HOST", "localhost"),
        port=int(os.getenv("REDIS_PORT", "6379")),
        decode_responses=True,
    )
    if configs.CONVERSATION_LOCK_ENABLED
    else None
)
