import pytest
import redis
import redis.asyncio.client as redis_async_client

from data_wrappers.utils import pipeline_watch
from tests.testing_data.data_generation import redis_pool

pytestmark = pytest.mark.asyncio


class CounterNotFound(Exception):
    pass


def counter_key(name: str) -> str:
    return f"counter:{name}"


class Counters:
    """Increments counters, optionally writing to them mid transaction"""

    def __init__(self, pool, interfere_times: int = 0):
        self.pool = pool
        self.interfere_times = interfere_times
        self.calls = 0

    @pipeline_watch("name", counter_key, CounterNotFound, max_retries=2)
    async def bump(self, pipe: redis_async_client.Pipeline, name: str) -> int:
        self.calls += 1
        value = int(await pipe.get(counter_key(name)))

        if self.calls <= self.interfere_times:
            # Another writer changes the key after it was read
            await self.pool.incrby(counter_key(name), 100)

        pipe.multi()
        pipe.set(counter_key(name), value + 1)
        await pipe.execute()
        return value + 1

    @pipeline_watch("missing", counter_key)
    async def no_param(self, pipe: redis_async_client.Pipeline, name: str) -> None:
        pass


async def test_runs_once_without_interference(redis_pool):
    counters = Counters(redis_pool)
    await redis_pool.set(counter_key("a"), 0)

    assert await counters.bump("a") == 1
    assert counters.calls == 1


async def test_retries_on_watch_error(redis_pool):
    counters = Counters(redis_pool, interfere_times=1)
    await redis_pool.set(counter_key("a"), 0)

    assert await counters.bump(name="a") == 101
    assert counters.calls == 2
    assert int(await redis_pool.get(counter_key("a"))) == 101


async def test_gives_up_after_max_retries(redis_pool):
    counters = Counters(redis_pool, interfere_times=10)
    await redis_pool.set(counter_key("a"), 0)

    with pytest.raises(redis.WatchError):
        await counters.bump("a")

    # First run plus two retries
    assert counters.calls == 3


async def test_key_not_found(redis_pool):
    counters = Counters(redis_pool)

    with pytest.raises(CounterNotFound):
        await counters.bump("b")

    assert counters.calls == 0


async def test_missing_param(redis_pool):
    with pytest.raises(TypeError):
        await Counters(redis_pool).no_param("a")
