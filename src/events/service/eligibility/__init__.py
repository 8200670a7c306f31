from .enums import ReasonCode
from .evaluator import evaluate_eligibility
from .service import EligibilityService
from .types import (
    CommitteeTenure,
    EligibilityContext,
    EligibilityResult,
    EventEligibilityReport,
    EventSnapshot,
    MemberSnapshot,
    OverrideSnapshot,
    TicketEligibility,
    TierSnapshot,
)

__all__ = [
    "CommitteeTenure",
    "EligibilityContext",
    "EligibilityResult",
    "EligibilityService",
    "EventEligibilityReport",
    "EventSnapshot",
    "MemberSnapshot",
    "OverrideSnapshot",
    "ReasonCode",
    "TicketEligibility",
    "TierSnapshot",
    "evaluate_eligibility",
]
