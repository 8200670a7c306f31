import typing as t

if t.TYPE_CHECKING:
    from events.service.eligibility import EligibilityResult


class AdmissionError(Exception):
    """Base class for admission-control failures.

    ``code`` is a stable machine-readable identifier returned to API clients.
    """

    code: str = "ADMISSION_ERROR"

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class AdmissionValidationError(AdmissionError):
    """Raised on malformed input, or when a transition does not apply to the target's state."""

    code = "VALIDATION_ERROR"


class NotFoundError(AdmissionError):
    """Raised when an event, tier, member or registration does not exist."""

    code = "NOT_FOUND"


class ConflictError(AdmissionError):
    """Raised when the member is already registered or a capacity race was lost."""

    code = "CONFLICT"


class IneligibleError(AdmissionError):
    """Raised when the eligibility evaluator denies the requested tier."""

    code = "INELIGIBLE"

    def __init__(self, message: str, eligibility: "EligibilityResult") -> None:
        super().__init__(message, code=str(eligibility.reason_code))
        self.eligibility = eligibility

    @property
    def reason_code(self) -> str:
        return str(self.eligibility.reason_code)


class CapacityExceededError(AdmissionError):
    """Raised on a manual promotion into a full tier without a capacity override."""

    code = "CAPACITY_EXCEEDED"


class AuditEnforcementError(AdmissionError):
    """Raised under the fail-closed audit policy when the audit entry cannot be written."""

    code = "AUDIT_ENFORCEMENT_FAILED"
