"""FastAPI dependency injection for the staging store, sheet sink and services.

Clients are created once in the application lifespan and kept on
``app.state``; handlers only ever receive them through these dependencies.
"""

from fastapi import Depends, Request

from spendlog.categorization.rules import Classifier
from spendlog.config import Settings, get_settings
from spendlog.services.ingestion import IngestionService
from spendlog.services.retrieval import RetrievalService
from spendlog.storage.sheet import SheetSink
from spendlog.storage.staging import StagingStore


def get_staging_store(request: Request) -> StagingStore:
    return request.app.state.staging


def get_sheet_sink(request: Request) -> SheetSink:
    return request.app.state.sink


def get_classifier(request: Request) -> Classifier:
    return request.app.state.classifier


async def get_ingestion_service(
    settings: Settings = Depends(get_settings),
    staging: StagingStore = Depends(get_staging_store),
    sink: SheetSink = Depends(get_sheet_sink),
    classifier: Classifier = Depends(get_classifier),
) -> IngestionService:
    """
    Get ingestion service instance.

    Args:
        settings: Application settings
        staging: Staging store
        sink: Sheet sink
        classifier: Category rule engine

    Returns:
        IngestionService instance
    """
    return IngestionService.from_settings(settings, staging, sink, classifier)


async def get_retrieval_service(
    staging: StagingStore = Depends(get_staging_store),
    sink: SheetSink = Depends(get_sheet_sink),
) -> RetrievalService:
    return RetrievalService(staging, sink)
