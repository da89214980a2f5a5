"""Pydantic schemas for the monobank personal-API webhook.

See https://api.monobank.ua/docs/ ("WebHook" and "StatementItem").
Only ``id``, ``time``, ``description``, ``amount`` and ``counterName`` flow
downstream; the remaining provider fields are accepted and validated but not
propagated.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

STATEMENT_ITEM_EVENT = "StatementItem"

# 9999-12-31T00:00:00Z; later instants overflow datetime once shifted east of UTC
MAX_EPOCH_SECONDS = 253402214400


class MonoStatementItem(BaseModel):
    """A single account statement entry as sent by monobank.

    Amounts are in minor units of the account currency. Negative amounts are
    spending, positive amounts are incoming funds.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = Field(..., min_length=1, description="Provider transaction identifier")
    time: int = Field(..., ge=0, le=MAX_EPOCH_SECONDS, description="Transaction time, epoch seconds")
    description: str = Field("", description="Free-text description")
    amount: int = Field(..., description="Signed amount in minor units (account currency)")
    counter_name: str = Field("", alias="counterName", description="Counterparty name")

    # Provider metadata, not propagated downstream
    mcc: int | None = None
    original_mcc: int | None = Field(None, alias="originalMcc")
    hold: bool | None = None
    operation_amount: int | None = Field(None, alias="operationAmount")
    currency_code: int | None = Field(None, alias="currencyCode")
    commission_rate: int | None = Field(None, alias="commissionRate")
    cashback_amount: int | None = Field(None, alias="cashbackAmount")
    balance: int | None = None
    comment: str | None = None
    receipt_id: str | None = Field(None, alias="receiptId")
    invoice_id: str | None = Field(None, alias="invoiceId")
    counter_edrpou: str | None = Field(None, alias="counterEdrpou")
    counter_iban: str | None = Field(None, alias="counterIban")

    @field_validator("id")
    @classmethod
    def id_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Transaction id cannot be blank")
        return v

    @property
    def is_incoming(self) -> bool:
        return self.amount > 0


class MonoWebhookData(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    account: str = Field(..., description="Account identifier")
    statement_item: MonoStatementItem = Field(..., alias="statementItem")


class MonoWebhookRequest(BaseModel):
    """Top-level webhook body: ``{type, data: {account, statementItem}}``."""

    model_config = ConfigDict(extra="ignore")

    type: str = Field(..., description="Event type, 'StatementItem' for transactions")
    data: MonoWebhookData | None = None

    @model_validator(mode="before")
    @classmethod
    def drop_foreign_event_data(cls, values):
        # Other event types carry payloads of their own shape
        if isinstance(values, dict) and values.get("type") != STATEMENT_ITEM_EVENT:
            return {**values, "data": None}
        return values

    @model_validator(mode="after")
    def statement_item_has_data(self) -> "MonoWebhookRequest":
        if self.is_statement_item and self.data is None:
            raise ValueError("StatementItem event without data")
        return self

    @property
    def is_statement_item(self) -> bool:
        return self.type == STATEMENT_ITEM_EVENT
