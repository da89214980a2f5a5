"""Staged record lookup and manual replay into the sheet."""

import logging

from spendlog.core.exceptions import RecordNotFoundError, SinkCommitError
from spendlog.schemas.record import StagedRecord
from spendlog.storage.sheet import SheetSink
from spendlog.storage.staging import StagingStore

logger = logging.getLogger(__name__)


class RetrievalService:
    """Reads staged records and, on request, pushes them through the sheet again.

    The staging store doubles as a manual retry queue: a record whose commit
    failed stays staged until it expires or is replayed here.
    """

    def __init__(self, staging: StagingStore, sink: SheetSink):
        self.staging = staging
        self.sink = sink

    async def get(self, transaction_id: str) -> StagedRecord:
        record = await self.staging.get(transaction_id)
        if record is None:
            raise RecordNotFoundError(transaction_id=transaction_id)
        return record

    async def replay(self, transaction_id: str) -> StagedRecord:
        """Append a staged record to the sheet, then drop it from staging.

        Raises:
            RecordNotFoundError: If nothing is staged under ``transaction_id``
            SinkCommitError: If the append failed; the record stays staged
        """
        record = await self.get(transaction_id)

        try:
            await self.sink.ensure_loaded()
            await self.sink.append_row(record)
        except SinkCommitError as e:
            e.transaction_id = transaction_id
            logger.error(
                "Replay commit failed, staged copy retained",
                extra={"transaction_id": transaction_id, "error_code": e.error_code},
            )
            raise

        await self.staging.delete(transaction_id)
        logger.info("Staged transaction replayed", extra={"transaction_id": transaction_id})
        return record
