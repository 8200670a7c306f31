"""Snapshots and results for the ticket eligibility system.

The evaluator only ever sees these immutable snapshots, never model instances.
"""

import datetime
import uuid

from pydantic import BaseModel, ConfigDict, Field

from events.enums import OverrideOutcome

from .enums import ReasonCode


class _Snapshot(BaseModel):
    model_config = ConfigDict(frozen=True)


class CommitteeTenure(_Snapshot):
    committee_id: uuid.UUID
    committee_name: str
    start_date: datetime.date
    end_date: datetime.date | None = None

    def is_current_on(self, day: datetime.date) -> bool:
        return self.start_date <= day and (self.end_date is None or self.end_date >= day)


class MemberSnapshot(_Snapshot):
    member_id: uuid.UUID
    status_code: str
    status_is_active: bool
    joined_on: datetime.date | None = None
    expires_on: datetime.date | None = None
    tenures: tuple[CommitteeTenure, ...] = ()

    def is_active_on(self, day: datetime.date) -> bool:
        """Whether the membership was active on ``day``."""
        if not self.status_is_active:
            return False
        if self.joined_on and self.joined_on > day:
            return False
        return self.expires_on is None or self.expires_on >= day

    def committees_on(self, day: datetime.date) -> dict[uuid.UUID, str]:
        """Committees (id to name) the member sat on on ``day``."""
        return {tenure.committee_id: tenure.committee_name for tenure in self.tenures if tenure.is_current_on(day)}


class EventSnapshot(_Snapshot):
    event_id: uuid.UUID
    occurs_on: datetime.date = Field(description="The event's start date in the club timezone.")
    sponsor_committees: dict[uuid.UUID, str] = Field(default_factory=dict)


class TierSnapshot(_Snapshot):
    tier_id: uuid.UUID
    code: str
    name: str
    category: str
    allowed_member_statuses: tuple[str, ...] = ()


class OverrideSnapshot(_Snapshot):
    outcome: OverrideOutcome
    reason: str = ""


class EligibilityContext(_Snapshot):
    member: MemberSnapshot | None
    event: EventSnapshot
    tier: TierSnapshot
    override: OverrideSnapshot | None = None


class EligibilityResult(BaseModel):
    """Result of an eligibility check for a member on a ticket tier."""

    allowed: bool
    reason_code: ReasonCode
    reason_detail: str | None = None

    @classmethod
    def allow(cls, reason_code: ReasonCode, detail: str | None = None) -> "EligibilityResult":
        return cls(allowed=True, reason_code=reason_code, reason_detail=detail)

    @classmethod
    def deny(cls, reason_code: ReasonCode, detail: str | None = None) -> "EligibilityResult":
        return cls(allowed=False, reason_code=reason_code, reason_detail=detail)


class TicketEligibility(BaseModel):
    tier_id: uuid.UUID
    code: str
    name: str
    eligibility: EligibilityResult


class EventEligibilityReport(BaseModel):
    event_id: uuid.UUID
    member_id: uuid.UUID | None
    ticket_types: list[TicketEligibility]
