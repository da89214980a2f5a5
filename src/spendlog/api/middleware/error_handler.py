"""Global error handling.

The webhook caller (monobank) only looks at the status code, so errors are
answered with a short plain-text body: "<message>: <detail>". The error code
travels in the ``X-Error-Code`` header.
"""

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse

from spendlog.config import get_settings
from spendlog.core.errors import get_error
from spendlog.core.exceptions import IngestionError

logger = logging.getLogger(__name__)


def error_response(error_code: str, http_status: int, detail: str = "") -> PlainTextResponse:
    message = get_error(error_code)["message"]
    body = f"{message}: {detail}" if detail else message
    return PlainTextResponse(
        status_code=http_status,
        content=body,
        headers={"X-Error-Code": error_code},
    )


async def handle_ingestion_error(request: Request, exc: IngestionError) -> PlainTextResponse:
    """Handle pipeline exceptions.

    Args:
        request: The incoming request
        exc: The ingestion exception

    Returns:
        PlainTextResponse with the catalog message and the error detail
    """
    extra = {
        "error_code": exc.error_code,
        "path": request.url.path,
        "method": request.method,
        "transaction_id": exc.transaction_id,
    }
    if exc.http_status >= 500:
        logger.error(f"Ingestion error: {exc.error_code}", extra=extra)
    else:
        logger.info(f"Ingestion error: {exc.error_code}", extra=extra)

    return error_response(exc.error_code, exc.http_status, exc.detail)


async def handle_validation_error(
    request: Request, exc: RequestValidationError
) -> PlainTextResponse:
    """Handle malformed webhook payloads.

    Args:
        request: The incoming request
        exc: The validation error

    Returns:
        400 PlainTextResponse listing the offending fields
    """
    error_messages = []
    for error in exc.errors():
        field = ".".join(str(x) for x in error.get("loc", []))
        msg = error.get("msg", "Invalid value")
        error_messages.append(f"{field}: {msg}")

    logger.warning(
        f"Validation error on {request.url.path}",
        extra={"path": request.url.path, "method": request.method, "error_code": "VAL_001"},
    )

    return error_response("VAL_001", status.HTTP_400_BAD_REQUEST, " | ".join(error_messages))


async def handle_generic_error(request: Request, exc: Exception) -> PlainTextResponse:
    """Handle unexpected exceptions.

    Details are only exposed (and the traceback only logged) in debug mode.
    """
    extra = {
        "error_type": type(exc).__name__,
        "path": request.url.path,
        "method": request.method,
    }
    debug = get_settings().debug
    if debug:
        logger.exception(f"Unexpected error on {request.url.path}", extra=extra)
    else:
        logger.error(f"Unexpected error on {request.url.path}", extra=extra)

    detail = f"{type(exc).__name__}: {exc}" if debug else ""
    return error_response("SYS_001", status.HTTP_500_INTERNAL_SERVER_ERROR, detail)
