"""Custom exception classes for transaction ingestion.

Each exception maps to an error code defined in errors.py and carries the
HTTP status the API layer should answer with.
"""


class IngestionError(Exception):
    """Base exception for all ingestion pipeline errors.

    Attributes:
        error_code: Code from the error catalog (e.g., "STAGE_001")
        detail: Human-readable context, appended to the response text
        http_status: HTTP status code to return (default: 500)
    """

    error_code = "SYS_001"
    http_status = 500

    def __init__(self, detail: str = "", *, transaction_id: str | None = None):
        self.detail = detail
        self.transaction_id = transaction_id
        super().__init__(detail or self.error_code)


class RecordNotFoundError(IngestionError):
    """Requested identifier is absent from the staging store."""

    error_code = "API_001"
    http_status = 404


class StagingError(IngestionError):
    """Base class for staging store failures."""


class StagingWriteError(StagingError):
    """Staging store unreachable or rejected the write.

    Raised before any commit is attempted, so nothing reached the sheet.
    """

    error_code = "STAGE_001"


class StagingReadError(StagingError):
    """Staging store unreachable or holds an unreadable value."""

    error_code = "STAGE_002"


class StagingDeleteError(StagingError):
    """Staged copy could not be removed after a successful commit."""

    error_code = "STAGE_003"


class SinkCommitError(IngestionError):
    """Durable sink unreachable, auth expired, or the append failed.

    The staged copy is retained as the recovery record.
    """

    error_code = "SINK_001"


class SinkSchemaError(SinkCommitError):
    """Worksheet header row does not contain every record field."""

    error_code = "SINK_002"


class RuleConfigError(ValueError):
    """Category rule file is missing, malformed, or names an unknown category."""
