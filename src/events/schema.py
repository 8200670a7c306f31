"""Request and response schemas for registration endpoints."""

import datetime
from uuid import UUID

from ninja import ModelSchema, Schema
from pydantic import Field

from common.schema import OneToFiveHundredString, StrippedString
from events.enums import OverrideOutcome, RegistrationStatus
from events.models import EligibilityOverride, Registration
from events.service.operational_status import OperationalStatus, RegistrationState, VisibilityState
from events.service.tier_metrics import EventSummaryMetrics, WaitlistTiming


class RegisterSchema(Schema):
    ticket_tier_id: UUID


class RegistrationSchema(Schema):
    id: UUID
    event_id: UUID
    ticket_tier_id: UUID
    status: RegistrationStatus
    waitlist_position: int | None = None
    registered_at: datetime.datetime

    @staticmethod
    def resolve_ticket_tier_id(obj: Registration) -> UUID:
        return obj.tier_id


class RegistrationCreatedSchema(Schema):
    registration: RegistrationSchema
    message: str


class EventStatusSchema(Schema):
    event_id: UUID
    operational_status: OperationalStatus
    label: str
    visibility: VisibilityState
    registration_state: RegistrationState
    registration_opens_message: str | None = None


class PromoteSchema(Schema):
    override_capacity: bool = False
    notify: bool = True
    notes: StrippedString = Field("", max_length=1000)


class WaitlistEntrySchema(Schema):
    registration_id: UUID
    member_id: UUID
    member_name: str
    ticket_tier_id: UUID
    ticket_tier_name: str
    waitlist_position: int
    registered_at: datetime.datetime

    @staticmethod
    def resolve_registration_id(obj: Registration) -> UUID:
        return obj.pk

    @staticmethod
    def resolve_member_name(obj: Registration) -> str:
        return obj.member.user.get_display_name()

    @staticmethod
    def resolve_ticket_tier_id(obj: Registration) -> UUID:
        return obj.tier_id

    @staticmethod
    def resolve_ticket_tier_name(obj: Registration) -> str:
        return obj.tier.name


class EventCapacitySchema(Schema):
    event_id: UUID
    summary: EventSummaryMetrics
    waitlist_timing: WaitlistTiming
    price_range: str | None = None


class EligibilityOverrideUpsertSchema(Schema):
    member_id: UUID
    ticket_tier_id: UUID
    outcome: OverrideOutcome
    reason: OneToFiveHundredString


class EligibilityOverrideSchema(ModelSchema):
    member_id: UUID
    event_id: UUID
    ticket_tier_id: UUID

    class Meta:
        model = EligibilityOverride
        fields = ["id", "outcome", "reason", "created_at", "updated_at"]

    @staticmethod
    def resolve_ticket_tier_id(obj: EligibilityOverride) -> UUID:
        return obj.tier_id
