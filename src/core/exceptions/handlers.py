from typing import Any

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.core.config import settings
from src.core.exceptions import AppException
from src.core.logging import get_logger
from src.shared.schemas import ErrorDetail, ErrorResponse

log = get_logger("errors")

# Unique constraints that can race past the service-level duplicate checks.
# Matched by PostgreSQL constraint name or by the SQLite "table.column" text.
UNIQUE_VIOLATIONS: tuple[tuple[tuple[str, ...], str, str], ...] = (
    (
        ("uq_fee_student_year", "fees.student_id, fees.academic_year"),
        "A fee record already exists for this student and academic year.",
        "academic_year",
    ),
    (
        ("uq_fee_structure_year_class_type", "fee_structures.academic_year"),
        "A fee structure already exists for this class and residential type.",
        "class_name",
    ),
    (
        ("uq_exam_result_student", "exam_results.exam_id"),
        "Marks for this student are already being recorded.",
        "student_id",
    ),
    (
        ("fee_installments_receipt_number", "fee_installments.receipt_number"),
        "Receipt number already issued, retry the payment.",
        "receipt_number",
    ),
)


def _error_response(
    status_code: int,
    message: str,
    errors: list[ErrorDetail],
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    body = ErrorResponse(message=message, errors=errors, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Domain errors: message plus machine-readable ``details``."""
    if exc.status_code == 409:
        log.info("Conflict on %s %s: %s", request.method, request.url.path, exc.message)
    return _error_response(
        exc.status_code,
        exc.message,
        [ErrorDetail(field=exc.details.get("field"), message=exc.message)],
        exc.details or None,
    )


def _field_path(loc: tuple) -> str | None:
    # "body" / "query" prefixes say where, not which field
    if loc and loc[0] in ("body", "query", "path"):
        loc = loc[1:]
    return ".".join(str(part) for part in loc) if loc else None


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = [
        ErrorDetail(field=_field_path(tuple(e.get("loc", ()))), message=e.get("msg", "Invalid value"))
        for e in exc.errors()
    ]
    return _error_response(422, "Validation error", errors)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    message = str(exc.detail) if exc.detail else "HTTP error"
    return _error_response(exc.status_code, message, [ErrorDetail(message=message)])


def _friendly_db_error(exc: Exception) -> tuple[str, str | None, int]:
    """
    Map a database error to (message, field, status).

    Raw driver text is only exposed when debug is enabled.
    """
    raw = str(getattr(exc, "orig", exc))
    lower = raw.lower()

    if "does not exist" in lower and "column" in lower:
        return (
            "Database schema is out of date. Run the latest migrations and try again.",
            None,
            500,
        )

    if "unique" in lower or "duplicate key" in lower:
        for markers, message, field in UNIQUE_VIOLATIONS:
            if any(marker in lower for marker in markers):
                return message, field, 409

    if settings.debug:
        return raw, None, 500
    return "Database error", None, 500


async def sqlalchemy_db_error_handler(request: Request, exc: Exception) -> JSONResponse:
    log.error("Database error on %s %s: %s", request.method, request.url.path, exc)
    message, field, status_code = _friendly_db_error(exc)
    return _error_response(status_code, message, [ErrorDetail(field=field, message=message)])
