"""Capacity arithmetic for ticket tiers.

Everything here is a pure function over ``TierInput`` and ``RegistrationInput``
values, so the admission controller can feed it a locked snapshot and the
reporting endpoints can feed it a plain read.
"""

import datetime
import typing as t
import uuid
from collections.abc import Iterable, Sequence
from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from events.enums import CAPACITY_HOLDING_STATUSES, TERMINAL_STATUSES, RegistrationStatus

if t.TYPE_CHECKING:
    from events.models import Registration, TicketTier


class CapacityStatus(StrEnum):
    WAITLISTED = "WAITLISTED"
    FULL = "FULL"
    UNDERSUBSCRIBED = "UNDERSUBSCRIBED"
    UNKNOWN = "UNKNOWN"


CAPACITY_STATUS_LABELS: dict[CapacityStatus, str] = {
    CapacityStatus.WAITLISTED: "Waitlist Active",
    CapacityStatus.FULL: "Sold Out",
    CapacityStatus.UNDERSUBSCRIBED: "Spots Available",
    CapacityStatus.UNKNOWN: "Capacity Unknown",
}


class TierInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    tier_id: uuid.UUID
    name: str
    quantity: int
    price_cents: int = 0
    is_active: bool = True

    @classmethod
    def from_model(cls, tier: "TicketTier") -> "TierInput":
        return cls(
            tier_id=tier.pk,
            name=tier.name,
            quantity=tier.quantity,
            price_cents=tier.price_cents,
            is_active=tier.is_active,
        )


class RegistrationInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    tier_id: uuid.UUID | None
    status: RegistrationStatus
    registered_at: datetime.datetime | None = None

    @classmethod
    def from_model(cls, registration: "Registration") -> "RegistrationInput":
        return cls(
            tier_id=registration.tier_id,
            status=registration.status,
            registered_at=registration.registered_at,
        )


class TierMetrics(BaseModel):
    tier_id: uuid.UUID
    tier_name: str
    price_cents: int
    quantity: int
    sold: int
    remaining: int
    waitlisted: int
    is_full: bool
    has_waitlist: bool


class EventSummaryMetrics(BaseModel):
    tier_metrics: list[TierMetrics]
    total_available: int
    total_sold: int
    total_remaining: int
    total_waitlisted: int
    capacity_status: CapacityStatus
    capacity_status_label: str


class WaitlistTiming(BaseModel):
    waitlist_started_at: datetime.datetime | None = None
    waitlist_ended_at: datetime.datetime | None = None
    waitlist_duration_seconds: int | None = None


def compute_tier_metrics(tier: TierInput, registrations: Iterable[RegistrationInput]) -> TierMetrics:
    """Count sold, remaining and waitlisted seats for one tier."""
    sold = 0
    waitlisted = 0
    for registration in registrations:
        if registration.tier_id != tier.tier_id or registration.status in TERMINAL_STATUSES:
            continue
        if registration.status in CAPACITY_HOLDING_STATUSES:
            sold += 1
        elif registration.status == RegistrationStatus.WAITLISTED:
            waitlisted += 1

    remaining = max(0, tier.quantity - sold)
    return TierMetrics(
        tier_id=tier.tier_id,
        tier_name=tier.name,
        price_cents=tier.price_cents,
        quantity=tier.quantity,
        sold=sold,
        remaining=remaining,
        waitlisted=waitlisted,
        is_full=remaining == 0,
        has_waitlist=waitlisted > 0,
    )


def derive_capacity_status(tier_metrics: Sequence[TierMetrics]) -> CapacityStatus:
    if not tier_metrics:
        return CapacityStatus.UNKNOWN
    if any(metrics.waitlisted > 0 for metrics in tier_metrics):
        return CapacityStatus.WAITLISTED
    if sum(metrics.remaining for metrics in tier_metrics) == 0:
        return CapacityStatus.FULL
    return CapacityStatus.UNDERSUBSCRIBED


def capacity_status_label(status: CapacityStatus) -> str:
    return CAPACITY_STATUS_LABELS[status]


def compute_event_summary(
    tiers: Iterable[TierInput], registrations: Iterable[RegistrationInput]
) -> EventSummaryMetrics:
    """Aggregate per-tier metrics for the active tiers of an event.

    Registrations pointing at inactive or unknown tiers never reach a tier's counts.
    """
    registrations = list(registrations)
    tier_metrics = [compute_tier_metrics(tier, registrations) for tier in tiers if tier.is_active]
    status = derive_capacity_status(tier_metrics)
    return EventSummaryMetrics(
        tier_metrics=tier_metrics,
        total_available=sum(m.quantity for m in tier_metrics),
        total_sold=sum(m.sold for m in tier_metrics),
        total_remaining=sum(m.remaining for m in tier_metrics),
        total_waitlisted=sum(m.waitlisted for m in tier_metrics),
        capacity_status=status,
        capacity_status_label=capacity_status_label(status),
    )


def compute_waitlist_timing(registrations: Iterable[RegistrationInput]) -> WaitlistTiming:
    """First and last time anyone joined a waitlist, counting only current waitlist entries."""
    timestamps = sorted(
        r.registered_at
        for r in registrations
        if r.status == RegistrationStatus.WAITLISTED and r.registered_at is not None
    )
    if not timestamps:
        return WaitlistTiming()
    started, ended = timestamps[0], timestamps[-1]
    return WaitlistTiming(
        waitlist_started_at=started,
        waitlist_ended_at=ended,
        waitlist_duration_seconds=int((ended - started).total_seconds()),
    )


def format_price(cents: int) -> str:
    """Format a price for display: "Free", "$10" or "$10.50"."""
    if cents == 0:
        return "Free"
    dollars, remainder = divmod(cents, 100)
    if remainder == 0:
        return f"${dollars}"
    return f"${dollars}.{remainder:02d}"


def price_range(tiers: Iterable[TierInput]) -> str | None:
    """Price span across active tiers, e.g. "Free - $15"."""
    prices = sorted({tier.price_cents for tier in tiers if tier.is_active})
    if not prices:
        return None
    if len(prices) == 1:
        return format_price(prices[0])
    return f"{format_price(prices[0])} - {format_price(prices[-1])}"
