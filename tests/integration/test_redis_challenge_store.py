import asyncio

from app.infrastructure.redis_cache.challenge_store import RedisChallengeStore


async def test_code_is_single_use(redis_client, key_prefix):
    store = RedisChallengeStore(redis_client, key_prefix=key_prefix, ttl_seconds=60)
    code = await store.issue("u@test.com")

    assert await store.verify("u@test.com", code)
    assert not await store.verify_and_consume("u@test.com", "000000")
    assert await store.verify_and_consume("u@test.com", code)
    assert not await store.verify_and_consume("u@test.com", code)


async def test_concurrent_redemption_has_one_winner(redis_client, key_prefix):
    store = RedisChallengeStore(redis_client, key_prefix=key_prefix, ttl_seconds=60)
    code = await store.issue("u@test.com")

    results = await asyncio.gather(
        *(store.verify_and_consume("u@test.com", code) for _ in range(10))
    )

    assert results.count(True) == 1


async def test_code_expires_with_ttl(redis_client, key_prefix):
    store = RedisChallengeStore(redis_client, key_prefix=key_prefix, ttl_seconds=1)
    code = await store.issue("u@test.com")

    await asyncio.sleep(1.5)

    assert not await store.verify("u@test.com", code)
