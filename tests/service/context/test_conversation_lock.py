import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from dm_assistant.service.context.conversation_lock import RELEASE_SCRIPT, _lock_key, conversation_lock, release


class FakeRedis:
    """SET NX plus the compare-and-delete script; no plain GET/DEL."""

    def __init__(self):
        self.store = {}
        self.scripts = []

    def set(self, key, value, nx=False, ex=None):
        if nx and key in self.store:
            return None
        self.store[key] = value
        return True

    def register_script(self, script):
        self.scripts.append(script)

        def run(keys, args):
            if self.store.get(keys[0]) == args[0]:
                del self.store[keys[0]]
                return 1
            return 0

        return run


class BrokenRedis(FakeRedis):
    def set(self, key, value, nx=False, ex=None):
        raise RedisConnectionError("redis down")


@pytest.mark.asyncio
async def test_lock_is_held_and_released():
    r = FakeRedis()
    key = _lock_key("coach-1", "sam_lifts")

    async with conversation_lock("coach-1", "sam_lifts", r=r) as held:
        assert held is True
        assert key in r.store

    assert key not in r.store


@pytest.mark.asyncio
async def test_second_holder_times_out_and_continues():
    r = FakeRedis()

    async with conversation_lock("coach-1", "sam_lifts", r=r):
        async with conversation_lock("coach-1", "sam_lifts", r=r, wait_sec=0) as held:
            assert held is False

    assert r.store == {}


@pytest.mark.asyncio
async def test_other_conversations_are_not_blocked():
    r = FakeRedis()

    async with conversation_lock("coach-1", "sam_lifts", r=r):
        async with conversation_lock("coach-1", "ana.fit", r=r, wait_sec=0) as held:
            assert held is True


@pytest.mark.asyncio
async def test_foreign_token_is_not_released():
    r = FakeRedis()
    key = _lock_key("coach-1", "sam_lifts")

    async with conversation_lock("coach-1", "sam_lifts", r=r):
        r.store[key] = "someone-else"

    assert r.store[key] == "someone-else"


@pytest.mark.asyncio
async def test_redis_failure_runs_unlocked():
    async with conversation_lock("coach-1", "sam_lifts", r=BrokenRedis()) as held:
        assert held is False


@pytest.mark.asyncio
async def test_lock_disabled_without_redis():
    async with conversation_lock("coach-1", "sam_lifts") as held:
        assert held is False


def test_release_is_a_single_compare_and_delete():
    r = FakeRedis()
    key = _lock_key("coach-1", "sam_lifts")
    r.store[key] = "mine"

    assert release(r, key, "theirs") is False
    assert r.store[key] == "mine"
    assert release(r, key, "mine") is True
    assert key not in r.store
    assert r.scripts == [RELEASE_SCRIPT, RELEASE_SCRIPT]
