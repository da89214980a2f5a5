"""
Statement item normalization.

Turns a monobank statement item into the canonical record that is staged and
appended to the sheet. Pure: the only clock involved is the provider's
timestamp, interpreted in an explicit timezone.
"""

from datetime import datetime, tzinfo
from decimal import Decimal

from spendlog.categorization.rules import Classifier
from spendlog.schemas.mono import MonoStatementItem
from spendlog.schemas.record import CanonicalRecord

DESCRIPTION_TAG = "🤖mono: "

# Added to the 0-based calendar month. Existing sheet formulas depend on it;
# the reason was never recorded.
MONTH_INDEX_OFFSET = 2

MINOR_UNITS_PER_MAJOR = Decimal(100)


def to_local_datetime(seconds: int, tz: tzinfo) -> datetime:
    return datetime.fromtimestamp(seconds, tz=tz)


def to_record_date(moment: datetime) -> str:
    return moment.strftime("%d.%m.%Y")


def to_record_time(moment: datetime) -> str:
    # 12-hour clock without AM/PM marker, as the sheet has always stored it
    return moment.strftime("%I:%M")


def to_month_index(moment: datetime) -> int:
    return (moment.month - 1) + MONTH_INDEX_OFFSET


def to_major_units(amount: int) -> Decimal:
    return Decimal(abs(amount)) / MINOR_UNITS_PER_MAJOR


def to_description(description: str) -> str:
    return f"{DESCRIPTION_TAG}{description}"


def normalize(
    item: MonoStatementItem,
    tz: tzinfo,
    classifier: Classifier | None = None,
) -> CanonicalRecord:
    """Build the canonical record for a statement item.

    The category is inferred from the untagged provider description.
    """
    classifier = classifier or Classifier()
    moment = to_local_datetime(item.time, tz)

    return CanonicalRecord(
        id=item.id,
        date=to_record_date(moment),
        time=to_record_time(moment),
        month_index=to_month_index(moment),
        amount=to_major_units(item.amount),
        description=to_description(item.description),
        counter_name=item.counter_name,
        category=classifier.classify(item.description),
    )
