"""Staging store (Redis) and durable sink (Google Sheets) adapters."""

from .sheet import SheetSink, create_sheets_service
from .staging import StagingStore, create_redis_client

__all__ = ["SheetSink", "StagingStore", "create_redis_client", "create_sheets_service"]
