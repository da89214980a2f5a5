import sys
from datetime import timezone
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from fakeredis import FakeAsyncRedis
from httpx import ASGITransport, AsyncClient

sys.path.append(str(Path(__file__).parents[1] / "src"))

from spendlog.api.deps import get_classifier, get_sheet_sink, get_staging_store
from spendlog.categorization.rules import Classifier
from spendlog.config import Settings, get_settings
from spendlog.main import app
from spendlog.storage.sheet import SheetSink
from spendlog.storage.staging import StagingStore


def build_webhook(
    transaction_id: str = "ZuHWzqkKGVo=",
    amount: int = -50000,
    description: str = "OKKO fuel",
    time: int = 1700000000,
    counter_name: str = "OKKO",
    **extra,
) -> dict:
    """Build a monobank webhook body in the provider's wire format."""
    item = {
        "id": transaction_id,
        "time": time,
        "description": description,
        "mcc": 5541,
        "originalMcc": 5541,
        "hold": False,
        "amount": amount,
        "operationAmount": amount,
        "currencyCode": 980,
        "commissionRate": 0,
        "cashbackAmount": 0,
        "balance": 1234500,
        "counterName": counter_name,
    }
    item.update(extra)
    return {
        "type": "StatementItem",
        "data": {"account": "acc-1", "statementItem": item},
    }


@pytest.fixture
def make_webhook():
    return build_webhook


@pytest.fixture
def settings() -> Settings:
    """Settings pinned to UTC so rendered dates do not depend on DST tables."""
    return Settings(timezone="UTC", staging_ttl_days=30, _env_file=None)


@pytest.fixture
def utc():
    return timezone.utc


@pytest.fixture
def classifier() -> Classifier:
    return Classifier()


@pytest.fixture
async def fake_redis():
    redis = FakeAsyncRedis(decode_responses=True)
    yield redis
    await redis.flushall()
    await redis.aclose()


@pytest.fixture
def staging_store(fake_redis) -> StagingStore:
    return StagingStore(fake_redis)


@pytest.fixture
def mock_sink():
    """Sheet sink double; appends succeed unless a test sets a side effect."""
    sink = AsyncMock(spec=SheetSink)
    sink.ensure_loaded = AsyncMock()
    sink.append_row = AsyncMock()
    return sink


@pytest.fixture
async def client(settings, staging_store, mock_sink, classifier):
    """Provide test client with store, sink and settings overrides."""
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_staging_store] = lambda: staging_store
    app.dependency_overrides[get_sheet_sink] = lambda: mock_sink
    app.dependency_overrides[get_classifier] = lambda: classifier

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
