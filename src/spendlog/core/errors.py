"""Error codes and messages.

This module defines the error catalog for transaction ingestion.
Each error has:
- code: Unique identifier
- message: Short description, also used as the plain-text response prefix
- user_message: Longer explanation for whoever reads the response
- retry_allowed: Whether repeating the same request can succeed
"""

ERROR_CATALOG: dict[str, dict] = {
    "API_001": {
        "code": "API_001",
        "message": "Not Found",
        "user_message": "No staged transaction exists with this identifier.",
        "retry_allowed": False,
    },
    "VAL_001": {
        "code": "VAL_001",
        "message": "Bad Request",
        "user_message": "The webhook payload is missing required fields or has invalid values.",
        "retry_allowed": False,
    },
    "STAGE_001": {
        "code": "STAGE_001",
        "message": "Internal Server Error",
        "user_message": "The transaction could not be written to the staging store.",
        "retry_allowed": True,
    },
    "STAGE_002": {
        "code": "STAGE_002",
        "message": "Internal Server Error",
        "user_message": "The staging store could not be read.",
        "retry_allowed": True,
    },
    "STAGE_003": {
        "code": "STAGE_003",
        "message": "Internal Server Error",
        "user_message": "The staged copy could not be removed after commit.",
        "retry_allowed": True,
    },
    "SINK_001": {
        "code": "SINK_001",
        "message": "Internal Server Error",
        "user_message": "The transaction is staged but could not be appended to the sheet.",
        "retry_allowed": True,
    },
    "SINK_002": {
        "code": "SINK_002",
        "message": "Internal Server Error",
        "user_message": "The sheet header does not match the transaction fields.",
        "retry_allowed": False,
    },
    "SYS_001": {
        "code": "SYS_001",
        "message": "Internal Server Error",
        "user_message": "An unexpected error occurred.",
        "retry_allowed": True,
    },
}


def get_error(error_code: str) -> dict:
    """Get error definition by code.

    Args:
        error_code: Error code from the catalog

    Returns:
        Dict with error details; a generic entry for unknown codes
    """
    if error_code not in ERROR_CATALOG:
        return {
            "code": "UNKNOWN",
            "message": "Internal Server Error",
            "user_message": f"Unknown error code: {error_code}",
            "retry_allowed": True,
        }
    return ERROR_CATALOG[error_code]


def is_retryable(error_code: str) -> bool:
    """Check if an error is retryable."""
    return get_error(error_code)["retry_allowed"]
