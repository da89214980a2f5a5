"""Unit tests for the Redis staging store."""

import asyncio
from datetime import timedelta
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from spendlog.categorization import Category
from spendlog.config import Settings
from spendlog.core.exceptions import StagingDeleteError, StagingReadError, StagingWriteError
from spendlog.schemas.record import StagedRecord
from spendlog.storage.staging import StagingStore, create_redis_client


@pytest.fixture
def body() -> StagedRecord:
    return StagedRecord(
        date="14.11.2023",
        time="10:13",
        month_index=12,
        amount=Decimal("123.45"),
        description="🤖mono: OKKO fuel",
        counter_name="OKKO",
        category=Category.PETROL,
    )


class TestStagingStore:
    @pytest.mark.asyncio
    async def test_put_then_get_round_trip(self, staging_store, body):
        await staging_store.put("tx-1", body, ttl=timedelta(days=30))

        staged = await staging_store.get("tx-1")

        assert staged == body

    @pytest.mark.asyncio
    async def test_put_sets_expiry(self, staging_store, fake_redis, body):
        await staging_store.put("tx-1", body, ttl=timedelta(days=30))

        ttl = await fake_redis.ttl("tx-1")

        assert 0 < ttl <= 30 * 24 * 3600

    @pytest.mark.asyncio
    async def test_value_is_camel_case_json(self, staging_store, fake_redis, body):
        await staging_store.put("tx-1", body, ttl=timedelta(minutes=5))

        raw = await fake_redis.get("tx-1")

        assert '"monthIndex":12' in raw
        assert '"counterName":"OKKO"' in raw
        assert '"amount":123.45' in raw
        assert '"category":"⛽ petrol"' in raw

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, staging_store):
        assert await staging_store.get("missing") is None

    @pytest.mark.asyncio
    async def test_get_expired_returns_none(self, staging_store, fake_redis, body):
        await staging_store.put("tx-1", body, ttl=timedelta(milliseconds=100))
        assert 0 < await fake_redis.pttl("tx-1") <= 100
        assert await staging_store.get("tx-1") == body

        await asyncio.sleep(0.3)

        assert await staging_store.get("tx-1") is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("ttl", [timedelta(0), timedelta(microseconds=500), timedelta(days=-1)])
    async def test_put_rejects_ttl_below_one_millisecond(self, staging_store, fake_redis, body, ttl):
        with pytest.raises(ValueError, match="at least 1ms"):
            await staging_store.put("tx-1", body, ttl=ttl)

        assert await fake_redis.exists("tx-1") == 0

    @pytest.mark.asyncio
    async def test_last_put_wins(self, staging_store, body):
        newer = body.model_copy(update={"amount": Decimal("1")})

        await staging_store.put("tx-1", body, ttl=timedelta(days=1))
        await staging_store.put("tx-1", newer, ttl=timedelta(days=1))

        assert (await staging_store.get("tx-1")).amount == Decimal("1")

    @pytest.mark.asyncio
    async def test_delete(self, staging_store, body):
        await staging_store.put("tx-1", body, ttl=timedelta(days=1))

        assert await staging_store.delete("tx-1") is True
        assert await staging_store.get("tx-1") is None
        assert await staging_store.delete("tx-1") is False

    @pytest.mark.asyncio
    async def test_key_prefix(self, fake_redis, body):
        store = StagingStore(fake_redis, key_prefix="mono:")

        await store.put("tx-1", body, ttl=timedelta(days=1))

        assert await fake_redis.exists("mono:tx-1") == 1
        assert await fake_redis.exists("tx-1") == 0
        assert await store.get("tx-1") == body

    @pytest.mark.asyncio
    async def test_corrupt_value_raises_read_error(self, staging_store, fake_redis):
        await fake_redis.set("tx-1", "{not json")

        with pytest.raises(StagingReadError):
            await staging_store.get("tx-1")


class TestStagingStoreFailures:
    """Backend failures surface as staging errors."""

    @pytest.fixture
    def broken_redis(self):
        redis = AsyncMock()
        error = RedisConnectionError("Connection refused")
        redis.set.side_effect = error
        redis.get.side_effect = error
        redis.delete.side_effect = error
        return redis

    @pytest.mark.asyncio
    async def test_put_failure(self, broken_redis, body):
        with pytest.raises(StagingWriteError) as exc_info:
            await StagingStore(broken_redis).put("tx-1", body, ttl=timedelta(days=1))

        assert "Connection refused" in exc_info.value.detail
        assert exc_info.value.transaction_id == "tx-1"
        assert exc_info.value.http_status == 500

    @pytest.mark.asyncio
    async def test_get_failure(self, broken_redis):
        with pytest.raises(StagingReadError):
            await StagingStore(broken_redis).get("tx-1")

    @pytest.mark.asyncio
    async def test_delete_failure(self, broken_redis):
        with pytest.raises(StagingDeleteError):
            await StagingStore(broken_redis).delete("tx-1")


def test_create_redis_client_uses_settings():
    settings = Settings(
        redis_host="redis.internal",
        redis_port=6380,
        redis_password="s3cret",
        redis_db=2,
        downstream_timeout_seconds=3,
        _env_file=None,
    )

    client = create_redis_client(settings)
    kwargs = client.connection_pool.connection_kwargs

    assert kwargs["host"] == "redis.internal"
    assert kwargs["port"] == 6380
    assert kwargs["password"] == "s3cret"
    assert kwargs["db"] == 2
    assert kwargs["socket_timeout"] == 3
