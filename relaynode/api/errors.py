"""Exception handlers mapping failures onto HTTP responses.

Each failure stays local to the request that raised it:

- malformed input → 400
- unknown payment hash → 404
- node engine failure → 500 with the engine's message
- anything else → 500, logged with traceback
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from relaynode.exceptions import (
    NodeOperationError,
    PaymentNotFoundError,
    RelayNodeError,
    ValidationError,
)
from relaynode.utils.logging import get_logger

from .schemas import ErrorResponse

logger = get_logger(__name__)


def _error_response(status_code: int, error: str, message: str, field: str | None = None):
    body = ErrorResponse(error=error, message=message, field=field)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


async def handle_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    logger.warning("request_rejected", path=request.url.path, error=exc.message, **exc.context)
    return _error_response(400, "validation_error", exc.message, exc.field)


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "path", "query")]
    field = ".".join(loc) or None
    message = first.get("msg", "Invalid request")
    if field:
        message = f"{field}: {message}"
    logger.warning("request_rejected", path=request.url.path, error=message)
    return _error_response(400, "validation_error", message, field)


async def handle_payment_not_found(request: Request, exc: PaymentNotFoundError) -> JSONResponse:
    logger.info("payment_not_found", payment_hash=exc.payment_hash)
    return _error_response(404, "not_found", exc.message)


async def handle_node_operation_error(request: Request, exc: NodeOperationError) -> JSONResponse:
    logger.error(
        "node_operation_failed",
        path=request.url.path,
        operation=exc.operation,
        error=exc.message,
    )
    return _error_response(500, "node_error", exc.message)


async def handle_relaynode_error(request: Request, exc: RelayNodeError) -> JSONResponse:
    logger.error("request_failed", path=request.url.path, error=str(exc))
    return _error_response(500, "internal_error", exc.message)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_request_error", path=request.url.path)
    return _error_response(500, "internal_error", "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    """Install the error mapping on an application."""
    app.add_exception_handler(ValidationError, handle_validation_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(PaymentNotFoundError, handle_payment_not_found)
    app.add_exception_handler(NodeOperationError, handle_node_operation_error)
    app.add_exception_handler(RelayNodeError, handle_relaynode_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
