"""monobank webhook and staged-record endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status

from spendlog.api.deps import get_ingestion_service, get_retrieval_service
from spendlog.schemas.mono import MonoWebhookRequest
from spendlog.services.ingestion import IngestionService
from spendlog.services.retrieval import RetrievalService

router = APIRouter(prefix="/api/mono", tags=["mono"])


@router.post(
    "",
    status_code=status.HTTP_200_OK,
    summary="Receive a monobank statement webhook",
    description="""
    Ingest one statement item.

    - Incoming funds (positive amount) are acknowledged and ignored.
    - Spending is normalized, categorized, staged in Redis and appended to the sheet.

    Always answers 200 with an empty body on success so monobank does not retry.
    """,
)
async def receive_webhook(
    payload: MonoWebhookRequest,
    service: IngestionService = Depends(get_ingestion_service),
) -> Response:
    await service.ingest(payload)
    return Response(status_code=status.HTTP_200_OK)


@router.api_route(
    "",
    methods=["GET", "HEAD", "PUT", "PATCH", "DELETE", "OPTIONS"],
    include_in_schema=False,
)
async def acknowledge_other_methods() -> Response:
    """monobank checks the webhook URL with a GET before enabling it."""
    return Response(status_code=status.HTTP_200_OK)


@router.get(
    "/{transaction_id}",
    summary="Get a staged transaction",
    description="""
    Return the staged record for a transaction identifier.

    With **replay=true** the record is also appended to the sheet and removed
    from staging, which is how a failed commit is retried by hand.
    """,
)
async def get_staged_transaction(
    transaction_id: str,
    replay: Annotated[
        bool, Query(description="Append the staged record to the sheet and unstage it")
    ] = False,
    service: RetrievalService = Depends(get_retrieval_service),
) -> Response:
    if replay:
        record = await service.replay(transaction_id)
    else:
        record = await service.get(transaction_id)

    return Response(
        content=record.model_dump_json(by_alias=True),
        media_type="application/json",
    )
