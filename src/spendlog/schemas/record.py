"""Canonical transaction record schemas.

``StagedRecord`` is the body that is staged in Redis and appended to the
sheet. ``CanonicalRecord`` is the same body plus the provider identifier,
which is only ever used as the staging key.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel

from spendlog.categorization.categories import Category


class StagedRecord(BaseModel):
    """Normalized, categorized transaction body (no identifier).

    Serialized with camelCase keys, which are also the sheet header names.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    date: str = Field(description="DD.MM.YYYY")
    time: str = Field(description="12-hour hh:mm")
    month_index: int = Field(description="0-based calendar month plus MONTH_INDEX_OFFSET")
    amount: Decimal = Field(ge=0, description="Absolute amount in major units")
    description: str = Field(description="Tagged description")
    counter_name: str = Field("", description="Counterparty name")
    category: Category

    @field_serializer("amount", when_used="json")
    def serialize_amount(self, amount: Decimal) -> int | float:
        if amount == amount.to_integral_value():
            return int(amount)
        return float(amount)

    @classmethod
    def column_names(cls) -> list[str]:
        """Sheet header names in declaration order."""
        return [field.alias or name for name, field in cls.model_fields.items()]

    def to_row(self, header: list[str] | None = None) -> list:
        """Row values ordered by ``header`` (defaults to declaration order).

        Header cells that are not record fields are left blank.
        """
        values = self.model_dump(mode="json", by_alias=True)
        columns = header if header is not None else self.column_names()
        return [values.get(column, "") for column in columns]


class CanonicalRecord(StagedRecord):
    """Staged body plus the provider transaction identifier."""

    id: str = Field(min_length=1)

    def body(self) -> StagedRecord:
        return StagedRecord.model_validate(self.model_dump(exclude={"id"}))
