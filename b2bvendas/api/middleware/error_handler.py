"""Global exception handlers for the FastAPI application.

These handlers are the single place where errors become HTTP responses. Every
response uses the ``{"error", "code"}`` envelope from ``ErrorResponse``:

- ``AppError`` subclasses map to their own ``status_code`` and ``error_code``
- request validation failures and malformed JSON become 400
  ``VALIDATION_ERROR`` with the first message as ``error``
- Starlette ``HTTPException`` (unknown route, wrong method) keeps its status
- anything else is logged with its stack trace and becomes 500
  ``INTERNAL_ERROR``
"""

from collections.abc import Mapping
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response
from loguru import logger
from starlette.exceptions import HTTPException

from b2bvendas.api.schemas.errors import ErrorResponse
from b2bvendas.api.utils.responses import ORJSONResponse
from b2bvendas.core.config import get_settings
from b2bvendas.core.context import RequestContext
from b2bvendas.core.error_context import sanitize_error_context, sanitize_for_log
from b2bvendas.core.exceptions import AppError, ErrorCode

INTERNAL_ERROR_MESSAGE = "Erro interno do servidor"
INVALID_JSON_MESSAGE = "JSON inválido"
VALIDATION_FAILED_MESSAGE = "Dados inválidos"
# Templates are formatted with the pydantic error ctx
FIELD_MESSAGES: dict[str, str] = {
    "missing": "Campo obrigatório",
    "string_type": "Deve ser um texto",
    "string_too_short": "Deve ter no mínimo {min_length} caracteres",
    "string_too_long": "Deve ter no máximo {max_length} caracteres",
    "int_parsing": "Deve ser um número inteiro",
    "int_type": "Deve ser um número inteiro",
    "decimal_parsing": "Deve ser um número",
    "bool_parsing": "Deve ser verdadeiro ou falso",
    "greater_than": "Deve ser maior que {gt}",
    "greater_than_equal": "Deve ser maior ou igual a {ge}",
    "less_than_equal": "Deve ser menor ou igual a {le}",
    "enum": "Valor inválido. Opções: {expected}",
    "literal_error": "Valor inválido. Opções: {expected}",
    "too_short": "Deve ter pelo menos {min_length} item(s)",
    "list_type": "Deve ser uma lista",
    "string_pattern_mismatch": "Formato inválido",
    "decimal_max_places": "Deve ter no máximo {decimal_places} casas decimais",
    "datetime_from_date_parsing": "Data inválida",
    "datetime_parsing": "Data inválida",
}

HTTP_STATUS_CODES: dict[int, ErrorCode] = {
    status.HTTP_400_BAD_REQUEST: ErrorCode.VALIDATION_ERROR,
    status.HTTP_401_UNAUTHORIZED: ErrorCode.UNAUTHORIZED,
    status.HTTP_403_FORBIDDEN: ErrorCode.FORBIDDEN,
    status.HTTP_404_NOT_FOUND: ErrorCode.NOT_FOUND,
    status.HTTP_409_CONFLICT: ErrorCode.CONFLICT,
    422: ErrorCode.BUSINESS_RULE_VIOLATION,
    status.HTTP_429_TOO_MANY_REQUESTS: ErrorCode.RATE_LIMIT_EXCEEDED,
}


def _field_message(error: Mapping[str, Any]) -> str:
    template = FIELD_MESSAGES.get(str(error.get("type")))
    if template is None:
        return str(error.get("msg", "Valor inválido"))
    try:
        return template.format(**error.get("ctx", {}))
    except (KeyError, IndexError):
        return str(error.get("msg", "Valor inválido"))


def error_response(
    status_code: int,
    message: str,
    code: str | ErrorCode,
    details: dict[str, object] | None = None,
) -> ORJSONResponse:
    """Build the JSON error envelope."""
    body = ErrorResponse(
        error=message,
        code=code.value if isinstance(code, ErrorCode) else code,
        details=details,
    )
    return ORJSONResponse(status_code=status_code, content=body.to_content())


async def app_error_handler(request: Request, exc: Exception) -> Response:
    """Handle ``AppError`` exceptions raised by services and dependencies.

    Raises:
        TypeError: If exc is not an AppError instance
    """
    if not isinstance(exc, AppError):
        raise TypeError(f"Expected AppError, got {type(exc).__name__}")

    error_context = sanitize_error_context(
        exc,
        {
            "request_method": request.method,
            "request_path": str(request.url.path),
            "error_code": exc.error_code,
            "fingerprint": exc.fingerprint,
        },
    )
    log = logger.warning if exc.is_expected else logger.error
    log(
        "Handling {}: {}",
        type(exc).__name__,
        exc.message,
        correlation_id=RequestContext.get_correlation_id(),
        status_code=exc.status_code,
        should_alert=exc.should_alert,
        **error_context,
    )

    details = None
    if validation_errors := exc.context.get("validation_errors"):
        details = {"validation_errors": validation_errors}
    return error_response(exc.status_code, exc.message, exc.error_code, details)


async def validation_error_handler(request: Request, exc: Exception) -> Response:
    """Handle FastAPI ``RequestValidationError`` as a 400 ``VALIDATION_ERROR``.

    Field errors are grouped under ``details.validation_errors``; the first
    message becomes the top level ``error`` so clients can show it directly.

    Raises:
        TypeError: If exc is not a RequestValidationError instance
    """
    if not isinstance(exc, RequestValidationError):
        raise TypeError(f"Expected RequestValidationError, got {type(exc).__name__}")

    field_errors: dict[str, list[str]] = {}
    first_message: str | None = None
    for error in exc.errors():
        if error.get("type") == "json_invalid":
            first_message = first_message or INVALID_JSON_MESSAGE
            field_errors.setdefault("body", []).append(INVALID_JSON_MESSAGE)
            continue

        field_path = error.get("loc", ())
        field_name = ".".join(
            str(loc) for loc in field_path[1:] if loc != "__root__"
        )
        message = _field_message(error)
        field_errors.setdefault(field_name or "body", []).append(message)
        first_message = first_message or message

    logger.warning(
        "Request validation failed: {}",
        first_message,
        correlation_id=RequestContext.get_correlation_id(),
        status_code=status.HTTP_400_BAD_REQUEST,
        path=str(request.url.path),
        method=request.method,
        validation_errors=field_errors,
        body=sanitize_for_log(exc.body),
    )

    return error_response(
        status.HTTP_400_BAD_REQUEST,
        first_message or VALIDATION_FAILED_MESSAGE,
        ErrorCode.VALIDATION_ERROR,
        {"validation_errors": field_errors},
    )


async def http_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle Starlette ``HTTPException`` with the standard envelope.

    Raises:
        TypeError: If exc is not an HTTPException instance
    """
    if not isinstance(exc, HTTPException):
        raise TypeError(f"Expected HTTPException, got {type(exc).__name__}")

    code = HTTP_STATUS_CODES.get(exc.status_code, ErrorCode.INTERNAL_ERROR)
    logger.warning(
        "HTTP exception",
        correlation_id=RequestContext.get_correlation_id(),
        status=exc.status_code,
        method=request.method,
        path=str(request.url.path),
        detail=exc.detail,
    )
    response = error_response(exc.status_code, str(exc.detail), code)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def generic_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle every other exception as a 500 ``INTERNAL_ERROR``.

    The exception type is named in the message outside production only.
    """
    error_context = sanitize_error_context(
        exc,
        {
            "request_method": request.method,
            "request_path": str(request.url.path),
        },
    )
    logger.opt(exception=exc).error(
        "Unhandled exception: {}",
        type(exc).__name__,
        correlation_id=RequestContext.get_correlation_id(),
        **error_context,
    )

    if get_settings().environment == "production":
        message = INTERNAL_ERROR_MESSAGE
    else:
        message = f"{INTERNAL_ERROR_MESSAGE}: {type(exc).__name__}"
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, message, ErrorCode.INTERNAL_ERROR
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.info("Exception handlers registered")
