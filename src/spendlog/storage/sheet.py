"""Google Sheets durable sink.

Every committed transaction becomes one appended row on a titled worksheet
("Logs" by default). The Sheets API client is synchronous, so each call runs
in a worker thread, one at a time, bounded by the downstream timeout.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable

import httplib2
from google.auth.exceptions import GoogleAuthError
from google.oauth2.service_account import Credentials
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import Resource, build
from googleapiclient.errors import Error as GoogleApiError

from spendlog.config import Settings
from spendlog.core.exceptions import SinkCommitError, SinkSchemaError
from spendlog.schemas.record import StagedRecord

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive.file",
]
TOKEN_URI = "https://oauth2.googleapis.com/token"

SINK_ERRORS = (
    GoogleApiError,
    GoogleAuthError,
    httplib2.HttpLib2Error,
    OSError,
)

# USER_ENTERED parses these as the start of a formula
FORMULA_PREFIXES = ("=", "+", "-", "@")


def create_sheets_service(settings: Settings) -> Resource:
    """Build a Sheets v4 client authorized with the configured service account."""
    credentials = Credentials.from_service_account_info(
        {
            "client_email": settings.google_service_account_email,
            "private_key": settings.google_private_key,
            "token_uri": TOKEN_URI,
        },
        scopes=SCOPES,
    )
    http = AuthorizedHttp(
        credentials, http=httplib2.Http(timeout=settings.downstream_timeout_seconds)
    )
    return build("sheets", "v4", http=http, cache_discovery=False)


def quote_title(title: str) -> str:
    """A1-notation sheet reference; titles with spaces or quotes need quoting."""
    return "'" + title.replace("'", "''") + "'"


def as_text_cell(value: Any) -> Any:
    """Keep provider text literal; a leading apostrophe is hidden by Sheets."""
    if isinstance(value, str) and value.startswith(FORMULA_PREFIXES):
        return "'" + value
    return value


class SheetSink:
    """Append-only row log on one worksheet of one spreadsheet.

    ``ensure_loaded`` checks the worksheet exists and reads its header row.
    The result is memoized for ``metadata_ttl`` seconds and dropped after any
    failure, so stale metadata is reloaded on the next call.
    """

    def __init__(
        self,
        service_factory: Callable[[], Resource],
        spreadsheet_id: str,
        title: str = "Logs",
        metadata_ttl: float = 300.0,
        timeout: float = 10.0,
    ):
        self.service_factory = service_factory
        self.spreadsheet_id = spreadsheet_id
        self.title = title
        self.metadata_ttl = metadata_ttl
        self.timeout = timeout

        self._service: Resource | None = None
        self._header: list[str] | None = None
        self._loaded_at: float | None = None
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> SheetSink:
        return cls(
            service_factory=lambda: create_sheets_service(settings),
            spreadsheet_id=settings.google_sheet_id,
            title=settings.sheet_title,
            metadata_ttl=settings.sheet_metadata_ttl_seconds,
            timeout=settings.downstream_timeout_seconds,
        )

    @property
    def is_loaded(self) -> bool:
        if self._header is None or self._loaded_at is None:
            return False
        return (time.monotonic() - self._loaded_at) < self.metadata_ttl

    @property
    def header(self) -> list[str] | None:
        return self._header

    def invalidate(self) -> None:
        self._header = None
        self._loaded_at = None

    async def ensure_loaded(self) -> None:
        """Load worksheet metadata unless a fresh copy is cached."""
        if self.is_loaded:
            return
        header = await self._run(self._load)
        self._header = header
        self._loaded_at = time.monotonic()
        logger.info(
            "Sheet metadata loaded",
            extra={"sheet_title": self.title, "columns": len(header)},
        )

    async def append_row(self, record: StagedRecord) -> None:
        """Append one row; raises ``SinkCommitError`` on any failure."""
        await self.ensure_loaded()
        row = [as_text_cell(value) for value in record.to_row(self._header)]
        await self._run(self._append, row)

    async def close(self) -> None:
        self.invalidate()
        if self._service is not None:
            self._service.close()
            self._service = None

    async def _run(self, fn: Callable[..., Any], *args: Any) -> Any:
        async with self._lock:
            call = asyncio.ensure_future(asyncio.to_thread(fn, *args))
            try:
                return await asyncio.wait_for(asyncio.shield(call), timeout=self.timeout)
            except asyncio.TimeoutError as e:
                self.invalidate()
                # Worker threads cannot be cancelled; keep the lock until this one
                # returns so the shared HTTP client never serves two calls at once.
                await asyncio.gather(call, return_exceptions=True)
                logger.warning("Sheet call timed out", extra={"sheet_title": self.title})
                raise SinkCommitError(f"Sheet call timed out after {self.timeout}s") from e
            except SinkCommitError:
                self.invalidate()
                raise
            except SINK_ERRORS as e:
                self.invalidate()
                raise SinkCommitError(f"{type(e).__name__}: {e}") from e

    def _get_service(self) -> Resource:
        if self._service is None:
            try:
                self._service = self.service_factory()
            except ValueError as e:
                raise SinkCommitError(f"Invalid service account credentials: {e}") from e
        return self._service

    def _load(self) -> list[str]:
        spreadsheets = self._get_service().spreadsheets()

        info = spreadsheets.get(
            spreadsheetId=self.spreadsheet_id, fields="sheets.properties.title"
        ).execute()
        titles = [sheet["properties"]["title"] for sheet in info.get("sheets", [])]
        if self.title not in titles:
            raise SinkSchemaError(f"Worksheet '{self.title}' not found in spreadsheet")

        result = spreadsheets.values().get(
            spreadsheetId=self.spreadsheet_id, range=f"{quote_title(self.title)}!1:1"
        ).execute()
        rows = result.get("values", [])
        header = [str(cell).strip() for cell in rows[0]] if rows else []

        if not any(header):
            header = StagedRecord.column_names()
            spreadsheets.values().update(
                spreadsheetId=self.spreadsheet_id,
                range=f"{quote_title(self.title)}!A1",
                valueInputOption="RAW",
                body={"values": [header]},
            ).execute()
            logger.info("Initialized empty sheet header", extra={"sheet_title": self.title})

        missing = [column for column in StagedRecord.column_names() if column not in header]
        if missing:
            raise SinkSchemaError(
                f"Sheet '{self.title}' header is missing columns: {', '.join(missing)}"
            )

        return header

    def _append(self, row: list) -> None:
        self._get_service().spreadsheets().values().append(
            spreadsheetId=self.spreadsheet_id,
            range=f"{quote_title(self.title)}!A1",
            valueInputOption="USER_ENTERED",
            insertDataOption="INSERT_ROWS",
            body={"values": [row]},
        ).execute()
