"""Unit tests for statement item normalization."""

from datetime import timedelta, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest
from pydantic import ValidationError

from spendlog.categorization import Category, CategoryRule, Classifier
from spendlog.normalization.normalizer import (
    DESCRIPTION_TAG,
    MONTH_INDEX_OFFSET,
    normalize,
    to_major_units,
    to_month_index,
    to_record_time,
    to_local_datetime,
)
from spendlog.schemas.mono import MAX_EPOCH_SECONDS, MonoStatementItem


def make_item(**overrides) -> MonoStatementItem:
    data = {
        "id": "ZuHWzqkKGVo=",
        "time": 1700000000,
        "description": "OKKO fuel",
        "amount": -50000,
        "counterName": "OKKO",
    }
    data.update(overrides)
    return MonoStatementItem.model_validate(data)


class TestNormalize:
    def test_okko_fuel_scenario(self):
        record = normalize(make_item(), timezone.utc)

        assert record.id == "ZuHWzqkKGVo="
        assert record.category == Category.PETROL
        assert record.category.value == "⛽ petrol"
        assert record.amount == Decimal("500")
        assert record.description == "🤖mono: OKKO fuel"
        assert record.counter_name == "OKKO"

    def test_date_time_and_month_in_utc(self):
        # 1700000000 = 2023-11-14 22:13:20 UTC
        record = normalize(make_item(), timezone.utc)

        assert record.date == "14.11.2023"
        assert record.time == "10:13"
        assert record.month_index == 10 + MONTH_INDEX_OFFSET

    def test_date_time_follow_configured_timezone(self):
        # Kyiv is UTC+2 in November, so the same instant is already the 15th
        record = normalize(make_item(), ZoneInfo("Europe/Kyiv"))

        assert record.date == "15.11.2023"
        assert record.time == "12:13"
        assert record.month_index == 12

    def test_zero_padding(self):
        # 2024-01-05 03:07:00 UTC
        record = normalize(make_item(time=1704424020), timezone.utc)

        assert record.date == "05.01.2024"
        assert record.time == "03:07"
        assert record.month_index == 0 + MONTH_INDEX_OFFSET

    @pytest.mark.parametrize(
        "amount,expected",
        [
            (-50000, Decimal("500")),
            (-12345, Decimal("123.45")),
            (-1, Decimal("0.01")),
            (0, Decimal("0")),
            (-999999999999, Decimal("9999999999.99")),
        ],
    )
    def test_amount_is_absolute_major_units(self, amount, expected):
        record = normalize(make_item(amount=amount), timezone.utc)

        assert record.amount == expected
        assert record.amount == Decimal(abs(amount)) / 100

    def test_description_is_tagged(self):
        record = normalize(make_item(description="Сільпо"), timezone.utc)

        assert record.description.startswith(DESCRIPTION_TAG)
        assert record.description == "🤖mono: Сільпо"

    def test_category_uses_untagged_description(self):
        # A rule keyed on the tag itself must never fire
        classifier = Classifier([CategoryRule(Category.HOME, ("mono",))])

        record = normalize(make_item(description="Rozetka"), timezone.utc, classifier)

        assert record.category == Category.OTHER

    def test_empty_description_falls_back(self):
        record = normalize(make_item(description=""), timezone.utc)

        assert record.description == DESCRIPTION_TAG
        assert record.category == Category.OTHER

    def test_body_strips_identifier(self):
        record = normalize(make_item(), timezone.utc)

        body = record.body()

        assert "id" not in body.model_dump()
        assert body.amount == record.amount
        assert body.category == record.category

    def test_is_deterministic(self):
        item = make_item()

        assert normalize(item, timezone.utc) == normalize(item, timezone.utc)


class TestHelpers:
    def test_noon_and_midnight_use_twelve(self):
        tz = timezone.utc
        # 2023-11-14 00:05 and 12:05 UTC
        assert to_record_time(to_local_datetime(1699920300, tz)) == "12:05"
        assert to_record_time(to_local_datetime(1699963500, tz)) == "12:05"

    def test_month_index_december(self):
        # 2023-12-31 12:00 UTC
        assert to_month_index(to_local_datetime(1704024000, timezone.utc)) == 11 + MONTH_INDEX_OFFSET

    def test_to_major_units_discards_sign(self):
        assert to_major_units(-250) == to_major_units(250) == Decimal("2.5")


class TestTimeBounds:
    def test_latest_accepted_time_renders_east_of_utc(self):
        item = make_item(time=MAX_EPOCH_SECONDS)

        record = normalize(item, timezone(timedelta(hours=14)))

        assert record.date == "31.12.9999"

    def test_time_past_year_9999_is_rejected(self):
        with pytest.raises(ValidationError, match="time"):
            make_item(time=MAX_EPOCH_SECONDS + 1)
