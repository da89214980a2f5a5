"""Redis-backed staging store for not-yet-committed transaction records."""

from __future__ import annotations

import logging
from datetime import timedelta

from pydantic import ValidationError
from redis.asyncio import Redis
from redis.exceptions import RedisError

from spendlog.config import Settings
from spendlog.core.exceptions import StagingDeleteError, StagingReadError, StagingWriteError
from spendlog.schemas.record import StagedRecord

logger = logging.getLogger(__name__)


def create_redis_client(settings: Settings) -> Redis:
    """Build a Redis client from settings. The caller owns ``aclose()``."""
    password = settings.redis_password.get_secret_value() if settings.redis_password else None
    return Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        db=settings.redis_db,
        password=password,
        decode_responses=True,
        socket_timeout=settings.downstream_timeout_seconds,
        socket_connect_timeout=settings.downstream_timeout_seconds,
    )


class StagingStore:
    """Keyed get / set-with-expiry / delete over Redis.

    Values are ``StagedRecord`` JSON. A missing or expired key reads as
    ``None``; only backend failures raise.
    """

    def __init__(self, redis: Redis, key_prefix: str = ""):
        self.redis = redis
        self.key_prefix = key_prefix

    def key(self, transaction_id: str) -> str:
        return f"{self.key_prefix}{transaction_id}"

    async def put(self, transaction_id: str, body: StagedRecord, ttl: timedelta) -> None:
        """Stage a record; Redis removes it once ``ttl`` elapses."""
        ttl_ms = int(ttl / timedelta(milliseconds=1))
        if ttl_ms <= 0:
            raise ValueError(f"Staging TTL must be at least 1ms, got {ttl}")

        payload = body.model_dump_json(by_alias=True)
        try:
            await self.redis.set(self.key(transaction_id), payload, px=ttl_ms)
        except RedisError as e:
            raise StagingWriteError(str(e), transaction_id=transaction_id) from e

    async def get(self, transaction_id: str) -> StagedRecord | None:
        try:
            payload = await self.redis.get(self.key(transaction_id))
        except RedisError as e:
            raise StagingReadError(str(e), transaction_id=transaction_id) from e

        if payload is None:
            return None

        try:
            return StagedRecord.model_validate_json(payload)
        except ValidationError as e:
            logger.error(
                "Staged value is not a valid record",
                extra={"transaction_id": transaction_id, "error_count": e.error_count()},
            )
            raise StagingReadError(
                f"Staged value for {transaction_id} is not a valid record",
                transaction_id=transaction_id,
            ) from e

    async def delete(self, transaction_id: str) -> bool:
        """Remove a staged record. Returns False when nothing was staged."""
        try:
            removed = await self.redis.delete(self.key(transaction_id))
        except RedisError as e:
            raise StagingDeleteError(str(e), transaction_id=transaction_id) from e
        return removed > 0

    async def ping(self) -> bool:
        return bool(await self.redis.ping())
