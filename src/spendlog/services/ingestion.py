"""Webhook ingestion service.

This module orchestrates the path of one monobank notification:
1. Filter out incoming funds
2. Normalize and categorize
3. Stage the record in Redis (with expiry)
4. Append the record to the sheet
5. Remove the staged copy (per cleanup policy)

A failed append leaves the staged copy in place as the recovery record; it
can be replayed through the retrieval endpoint until it expires.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta, tzinfo
from enum import Enum

from spendlog.categorization.rules import Classifier
from spendlog.config import Settings, StagingCleanupPolicy
from spendlog.core.exceptions import SinkCommitError, StagingDeleteError, StagingWriteError
from spendlog.normalization.normalizer import normalize
from spendlog.schemas.mono import MonoWebhookRequest
from spendlog.schemas.record import CanonicalRecord
from spendlog.storage.sheet import SheetSink
from spendlog.storage.staging import StagingStore

logger = logging.getLogger(__name__)


class IngestionOutcome(str, Enum):
    SKIPPED_INCOMING = "skipped_incoming"
    SKIPPED_EVENT = "skipped_event"
    COMMITTED = "committed"


@dataclass(frozen=True)
class IngestionResult:
    outcome: IngestionOutcome
    transaction_id: str | None = None
    record: CanonicalRecord | None = None
    staged_copy_removed: bool = False


class IngestionService:
    """Runs the filter → normalize → stage → commit → cleanup pipeline."""

    def __init__(
        self,
        staging: StagingStore,
        sink: SheetSink,
        classifier: Classifier,
        tz: tzinfo,
        staging_ttl: timedelta = timedelta(days=30),
        cleanup_policy: StagingCleanupPolicy = StagingCleanupPolicy.DELETE_AFTER_COMMIT,
    ):
        """Initialize the service.

        Args:
            staging: Staging store the record is written to before commit
            sink: Durable sheet sink
            classifier: Category rule engine
            tz: Timezone used to render provider timestamps
            staging_ttl: Lifetime of a staged record in Redis
            cleanup_policy: Whether to delete the staged copy after commit
        """
        self.staging = staging
        self.sink = sink
        self.classifier = classifier
        self.tz = tz
        self.staging_ttl = staging_ttl
        self.cleanup_policy = cleanup_policy

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        staging: StagingStore,
        sink: SheetSink,
        classifier: Classifier,
    ) -> "IngestionService":
        return cls(
            staging=staging,
            sink=sink,
            classifier=classifier,
            tz=settings.tzinfo,
            staging_ttl=timedelta(days=settings.staging_ttl_days),
            cleanup_policy=settings.staging_cleanup_policy,
        )

    async def ingest(self, request: MonoWebhookRequest) -> IngestionResult:
        """Process one webhook notification.

        Args:
            request: Validated webhook body

        Returns:
            IngestionResult describing what happened

        Raises:
            StagingWriteError: If the record could not be staged (nothing committed)
            SinkCommitError: If the sheet append failed (staged copy retained)
            StagingDeleteError: If the staged copy could not be removed after commit
        """
        if not request.is_statement_item:
            logger.info("Ignoring webhook event", extra={"event_type": request.type})
            return IngestionResult(outcome=IngestionOutcome.SKIPPED_EVENT)

        item = request.data.statement_item
        logger.debug("Statement item received", extra={"payload": item.model_dump_json()})

        # Incoming funds are never logged
        if item.is_incoming:
            logger.info("Skipping incoming transaction", extra={"transaction_id": item.id})
            return IngestionResult(
                outcome=IngestionOutcome.SKIPPED_INCOMING, transaction_id=item.id
            )

        record = normalize(item, self.tz, self.classifier)
        body = record.body()
        logger.info(
            "Transaction normalized",
            extra={"transaction_id": record.id, "category": record.category.name},
        )

        try:
            await self.staging.put(record.id, body, ttl=self.staging_ttl)
        except StagingWriteError:
            logger.error("Staging write failed", extra={"transaction_id": record.id})
            raise

        try:
            await self.sink.ensure_loaded()
            await self.sink.append_row(body)
        except SinkCommitError as e:
            e.transaction_id = record.id
            logger.error(
                "Sheet commit failed, staged copy retained",
                extra={"transaction_id": record.id, "error_code": e.error_code},
            )
            raise

        removed = await self._cleanup(record.id)
        logger.info("Transaction committed", extra={"transaction_id": record.id})
        return IngestionResult(
            outcome=IngestionOutcome.COMMITTED,
            transaction_id=record.id,
            record=record,
            staged_copy_removed=removed,
        )

    async def _cleanup(self, transaction_id: str) -> bool:
        if self.cleanup_policy is StagingCleanupPolicy.RETAIN:
            return False
        try:
            return await self.staging.delete(transaction_id)
        except StagingDeleteError:
            logger.error(
                "Staged copy not removed after commit", extra={"transaction_id": transaction_id}
            )
            raise
