"""Exception handlers for the API."""

import traceback
import typing as t
from copy import deepcopy

import orjson
import structlog
from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import HttpRequest
from ninja.responses import Response

from events.exceptions import (
    AdmissionError,
    AdmissionValidationError,
    AuditEnforcementError,
    CapacityExceededError,
    ConflictError,
    IneligibleError,
    NotFoundError,
)

logger = structlog.get_logger(__name__)


def handle_general_exception(request: HttpRequest, exc: Exception | t.Type[Exception]) -> Response:
    """Handle a general exception.

    Args:
        request: The incoming HTTP request.
        exc: The exception.

    Returns:
        The response.
    """
    json_payload = None
    if request.method in ("POST", "PUT", "PATCH") and request.headers.get("Content-Type") == "application/json":
        try:
            parsed = orjson.loads(request.body)
        except orjson.JSONDecodeError:  # pragma: no cover
            parsed = None
        if isinstance(parsed, dict):
            json_payload = obfuscate(parsed)
    logger.exception(
        "INTERNAL_SERVER_ERROR",
        method=request.method,
        path=request.path,
        headers=obfuscate(dict(request.headers)),
        json_payload=json_payload,
    )
    data = {"detail": "Internal Server Error."}
    is_staff = getattr(request, "user", None) and request.user.is_staff
    if settings.DEBUG or is_staff:  # pragma: no cover
        data["traceback"] = traceback.format_exc()
    return Response(status=500, data=data)


def handle_django_validation_error(request: HttpRequest, exc: ValidationError | t.Type[ValidationError]) -> Response:
    """Handle a validation error.

    Args:
        request: The incoming HTTP request.
        exc: The exception.
    """
    logger.warning("VALIDATION_ERROR", path=request.path, exc_info=True)
    if hasattr(exc, "error_dict"):
        error_dict = {k: [ee for e in v for ee in e] for k, v in exc.error_dict.items()}
    else:
        error_dict = {"__all__": list(t.cast(ValidationError, exc).messages)}
    return Response(status=400, data={"errors": error_dict})


def _admission_error_response(status: int, exc: AdmissionError) -> Response:
    return Response(status=status, data={"code": exc.code, "detail": exc.message})


def handle_admission_validation_error(
    request: HttpRequest, exc: AdmissionValidationError | t.Type[AdmissionValidationError]
) -> Response:
    """Handle an admission validation error."""
    return _admission_error_response(400, t.cast(AdmissionValidationError, exc))


def handle_not_found_error(request: HttpRequest, exc: NotFoundError | t.Type[NotFoundError]) -> Response:
    """Handle a not found error."""
    return _admission_error_response(404, t.cast(NotFoundError, exc))


def handle_conflict_error(request: HttpRequest, exc: ConflictError | t.Type[ConflictError]) -> Response:
    """Handle a conflict error."""
    return _admission_error_response(409, t.cast(ConflictError, exc))


def handle_ineligible_error(request: HttpRequest, exc: IneligibleError | t.Type[IneligibleError]) -> Response:
    """Handle an ineligible error, returning the evaluator's verdict verbatim."""
    error = t.cast(IneligibleError, exc)
    return Response(
        status=400,
        data={
            "code": error.code,
            "detail": error.message,
            **error.eligibility.model_dump(mode="json"),
        },
    )


def handle_capacity_exceeded_error(
    request: HttpRequest, exc: CapacityExceededError | t.Type[CapacityExceededError]
) -> Response:
    """Handle a capacity exceeded error."""
    return _admission_error_response(422, t.cast(CapacityExceededError, exc))


def handle_audit_enforcement_error(
    request: HttpRequest, exc: AuditEnforcementError | t.Type[AuditEnforcementError]
) -> Response:
    """Handle a failed mandatory audit write. The transition was rolled back."""
    error = t.cast(AuditEnforcementError, exc)
    logger.error("AUDIT_ENFORCEMENT_FAILED", path=request.path, detail=error.message)
    return _admission_error_response(500, error)


SENSITIVE_KEYS = {"password", "token", "x-api-key", "authorization", "authentication", "cookie"}


def obfuscate(data: dict[str, t.Any]) -> dict[str, t.Any]:
    """Obfuscate sensitive data in payloads and headers."""
    new_data = deepcopy(data)
    for key in data.keys():
        if key.lower() in SENSITIVE_KEYS:
            new_data[key] = "********"
    return new_data
