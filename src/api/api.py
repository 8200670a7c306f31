from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import HttpRequest
from ninja_extra import NinjaExtraAPI
from ninja_jwt.controller import NinjaJWTDefaultController

from common.schema import ResponseOk, VersionResponse
from common.throttling import AnonDefaultThrottle, UserDefaultThrottle
from events.controllers.registration import RegistrationController
from events.controllers.registration_admin import RegistrationAdminController
from events.exceptions import (
    AdmissionValidationError,
    AuditEnforcementError,
    CapacityExceededError,
    ConflictError,
    IneligibleError,
    NotFoundError,
)

from .exception_handlers import (
    handle_admission_validation_error,
    handle_audit_enforcement_error,
    handle_capacity_exceeded_error,
    handle_conflict_error,
    handle_django_validation_error,
    handle_general_exception,
    handle_ineligible_error,
    handle_not_found_error,
)

api = NinjaExtraAPI(
    title=f"{settings.SITE_NAME} API",
    docs_url="/docs",
    version=settings.VERSION,
    description=f"{settings.SITE_NAME} API {settings.VERSION}",
    app_name=f"clubhouse-api-{settings.VERSION}",
    urls_namespace="api",
    servers=[
        {"url": settings.SERVICE_URL, "description": settings.SERVICE_DESCRIPTION},
    ],
    throttle=[AnonDefaultThrottle(), UserDefaultThrottle()],
)


@api.get("/version", tags=["Version"], response={200: VersionResponse})
def version(request: HttpRequest) -> tuple[int, VersionResponse]:
    """Get the API version."""
    return 200, VersionResponse(version=settings.VERSION)


@api.get("/healthcheck", tags=["Healthcheck"], response={200: ResponseOk})
def healthcheck(request: HttpRequest) -> tuple[int, ResponseOk]:
    """Check the health of the API."""
    return 200, ResponseOk()


api.register_controllers(
    # Auth controllers
    NinjaJWTDefaultController,
    # Event controllers
    RegistrationController,
    RegistrationAdminController,
)

EXCEPTION_HANDLERS = {
    Exception: handle_general_exception,
    ValidationError: handle_django_validation_error,
    AdmissionValidationError: handle_admission_validation_error,
    NotFoundError: handle_not_found_error,
    ConflictError: handle_conflict_error,
    IneligibleError: handle_ineligible_error,
    CapacityExceededError: handle_capacity_exceeded_error,
    AuditEnforcementError: handle_audit_enforcement_error,
}

for exc, handler in EXCEPTION_HANDLERS.items():
    api.add_exception_handler(exc, handler)
