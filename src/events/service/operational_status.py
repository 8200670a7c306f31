"""Canonical lifecycle status of an event.

``derive_operational_status`` folds approval, publication, the registration
window and the event's own timing into one state. Two subordinate states,
visibility and registration, are derived independently and the composite never
contradicts either of them.
"""

import datetime
import typing as t
from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from events.enums import EventStatus

if t.TYPE_CHECKING:
    from events.models import Event


class OperationalStatus(StrEnum):
    """Lifecycle status of an event as shown to members and administrators.

    ``ANNOUNCED`` means the event is visible and does not require registration.
    """

    DRAFT = "DRAFT"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    CHANGES_REQUESTED = "CHANGES_REQUESTED"
    APPROVED_SCHEDULED = "APPROVED_SCHEDULED"
    ANNOUNCED = "ANNOUNCED"
    ANNOUNCED_NOT_OPEN = "ANNOUNCED_NOT_OPEN"
    OPEN_FOR_REGISTRATION = "OPEN_FOR_REGISTRATION"
    REGISTRATION_CLOSED = "REGISTRATION_CLOSED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELED = "CANCELED"
    ARCHIVED = "ARCHIVED"


class VisibilityState(StrEnum):
    DRAFT = "DRAFT"
    SCHEDULED = "SCHEDULED"
    VISIBLE = "VISIBLE"


class RegistrationState(StrEnum):
    NOT_REQUIRED = "NOT_REQUIRED"
    SCHEDULED = "SCHEDULED"
    OPEN = "OPEN"
    CLOSED = "CLOSED"


OPERATIONAL_STATUS_LABELS: dict[OperationalStatus, str] = {
    OperationalStatus.DRAFT: "Draft",
    OperationalStatus.PENDING_APPROVAL: "Pending Approval",
    OperationalStatus.CHANGES_REQUESTED: "Changes Requested",
    OperationalStatus.APPROVED_SCHEDULED: "Approved - Scheduled",
    OperationalStatus.ANNOUNCED: "Announced",
    OperationalStatus.ANNOUNCED_NOT_OPEN: "Announced - Registration Opens Soon",
    OperationalStatus.OPEN_FOR_REGISTRATION: "Open for Registration",
    OperationalStatus.REGISTRATION_CLOSED: "Registration Closed",
    OperationalStatus.IN_PROGRESS: "In Progress",
    OperationalStatus.COMPLETED: "Completed",
    OperationalStatus.CANCELED: "Canceled",
    OperationalStatus.ARCHIVED: "Archived",
}

_STATUS_PASSTHROUGH: dict[str, OperationalStatus] = {
    EventStatus.CANCELED: OperationalStatus.CANCELED,
    EventStatus.ARCHIVED: OperationalStatus.ARCHIVED,
    EventStatus.DRAFT: OperationalStatus.DRAFT,
    EventStatus.PENDING_APPROVAL: OperationalStatus.PENDING_APPROVAL,
    EventStatus.CHANGES_REQUESTED: OperationalStatus.CHANGES_REQUESTED,
}


class EventTimeline(BaseModel):
    """The subset of an event that its lifecycle depends on."""

    model_config = ConfigDict(frozen=True)

    status: EventStatus
    start_time: datetime.datetime
    end_time: datetime.datetime | None = None
    publish_at: datetime.datetime | None = None
    published_at: datetime.datetime | None = None
    requires_registration: bool = True
    registration_opens_at: datetime.datetime | None = None
    registration_deadline: datetime.datetime | None = None

    @classmethod
    def from_model(cls, event: "Event") -> "EventTimeline":
        return cls(
            status=event.status,
            start_time=event.start_time,
            end_time=event.end_time,
            publish_at=event.publish_at,
            published_at=event.published_at,
            requires_registration=event.requires_registration,
            registration_opens_at=event.registration_opens_at,
            registration_deadline=event.registration_deadline,
        )

    @property
    def registration_closes_at(self) -> datetime.datetime:
        return self.registration_deadline or self.start_time


def derive_visibility(timeline: EventTimeline, now: datetime.datetime) -> VisibilityState:
    """Whether members can see the event yet."""
    if timeline.status == EventStatus.PUBLISHED:
        return VisibilityState.VISIBLE
    if timeline.published_at is not None and timeline.published_at <= now:
        return VisibilityState.VISIBLE
    if timeline.status == EventStatus.APPROVED and timeline.publish_at is not None:
        return VisibilityState.SCHEDULED if now < timeline.publish_at else VisibilityState.VISIBLE
    return VisibilityState.DRAFT


def derive_registration_state(timeline: EventTimeline, now: datetime.datetime) -> RegistrationState:
    """Where ``now`` falls in the registration window."""
    if not timeline.requires_registration:
        return RegistrationState.NOT_REQUIRED
    if timeline.registration_opens_at is not None and now < timeline.registration_opens_at:
        return RegistrationState.SCHEDULED
    if timeline.registration_closes_at < now:
        return RegistrationState.CLOSED
    return RegistrationState.OPEN


def derive_operational_status(
    timeline: "EventTimeline | Event", now: datetime.datetime
) -> OperationalStatus:
    """Compute the single canonical status of an event at ``now``.

    The checks run in strict precedence: terminal and pre-approval statuses, then
    the event's own timing, then publication, then the registration window.
    """
    if not isinstance(timeline, EventTimeline):
        timeline = EventTimeline.from_model(timeline)

    if timeline.status in _STATUS_PASSTHROUGH:
        return _STATUS_PASSTHROUGH[timeline.status]
    if timeline.end_time is not None and timeline.end_time < now:
        return OperationalStatus.COMPLETED
    if timeline.start_time <= now:
        return OperationalStatus.IN_PROGRESS
    if derive_visibility(timeline, now) != VisibilityState.VISIBLE:
        return OperationalStatus.APPROVED_SCHEDULED

    registration = derive_registration_state(timeline, now)
    match registration:
        case RegistrationState.NOT_REQUIRED:
            return OperationalStatus.ANNOUNCED
        case RegistrationState.SCHEDULED:
            return OperationalStatus.ANNOUNCED_NOT_OPEN
        case RegistrationState.CLOSED:
            return OperationalStatus.REGISTRATION_CLOSED
        case RegistrationState.OPEN:
            return OperationalStatus.OPEN_FOR_REGISTRATION
        case _:
            t.assert_never(registration)


def operational_status_label(status: OperationalStatus) -> str:
    return OPERATIONAL_STATUS_LABELS[status]
