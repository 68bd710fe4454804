import os
import uuid

import pytest
from redis.asyncio import Redis
from redis.exceptions import RedisError


@pytest.fixture()
async def redis_client():
    """Real Redis from REDIS_URL; tests are skipped when it is unreachable."""
    client = Redis.from_url(
        os.getenv("REDIS_URL", "redis://localhost:6379/15"),
        decode_responses=True,
        socket_timeout=1.0,
        socket_connect_timeout=1.0,
    )
    try:
        await client.ping()
    except (RedisError, OSError):
        await client.aclose()
        pytest.skip("redis not available")
    yield client
    await client.aclose()


@pytest.fixture()
def key_prefix():
    # isolate every test's keys
    return f"test:{uuid.uuid4().hex}:"
