"""Domain exceptions for the commission ledger and their HTTP rendering.

Services raise these; the FastAPI handler registered in ``main`` turns them
into ``{"error": ..., "error_code": ..., "item_id": ...}`` responses so the
back-office UI can show the message and highlight the offending entry.
"""

import logging
from typing import Any
from uuid import UUID

from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class CommissionLedgerError(Exception):
    """Base class for user-displayable ledger failures."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "ERR_LEDGER"

    def __init__(self, message: str, item_id: UUID | str | None = None):
        self.message = message
        self.item_id = item_id
        super().__init__(message)


class ValidationError(CommissionLedgerError):
    """Malformed or missing input: blank reason, negative amount, mixed currencies."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "ERR_VALIDATION"


class NotFoundError(CommissionLedgerError):
    """Unknown ledger entry, closing or adjustment request."""

    status_code = status.HTTP_404_NOT_FOUND
    error_code = "ERR_NOT_FOUND"


class ConflictError(CommissionLedgerError):
    """Entry already sealed in an active closing, or a concurrent closing won."""

    status_code = status.HTTP_409_CONFLICT
    error_code = "ERR_CONFLICT"


class PermissionDeniedError(CommissionLedgerError):
    """Non-admin actor attempted an admin-only action."""

    status_code = status.HTTP_403_FORBIDDEN
    error_code = "ERR_PERMISSION"


def error_payload(exc: CommissionLedgerError) -> dict[str, Any]:
    return {
        "error": exc.message,
        "error_code": exc.error_code,
        "item_id": str(exc.item_id) if exc.item_id is not None else None,
    }


async def commission_ledger_exception_handler(
    request: Request, exc: CommissionLedgerError
) -> JSONResponse:
    """Render a domain exception as a JSON error response."""
    logger.info(
        "%s %s failed with %s: %s", request.method, request.url.path, exc.error_code, exc.message
    )
    return JSONResponse(status_code=exc.status_code, content=error_payload(exc))
