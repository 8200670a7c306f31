"""Read-only capacity and waitlist views for administrators."""

from django.db.models import QuerySet

from events.enums import RegistrationStatus
from events.models import Event, Registration, TicketTier

from .tier_metrics import (
    EventSummaryMetrics,
    RegistrationInput,
    TierInput,
    WaitlistTiming,
    compute_event_summary,
    compute_waitlist_timing,
    price_range,
)


def event_capacity(event: Event) -> tuple[EventSummaryMetrics, WaitlistTiming, str | None]:
    """Summary metrics, waitlist timing and price range for an event."""
    tiers = [TierInput.from_model(tier) for tier in TicketTier.objects.filter(event=event)]
    registrations = [
        RegistrationInput(**row)
        for row in Registration.objects.filter(event=event).values("tier_id", "status", "registered_at")
    ]
    return compute_event_summary(tiers, registrations), compute_waitlist_timing(registrations), price_range(tiers)


def event_waitlist(event: Event) -> QuerySet[Registration]:
    """All waitlisted registrations of an event, grouped by tier in promotion order."""
    return (
        Registration.objects.filter(event=event, status=RegistrationStatus.WAITLISTED)
        .select_related("member__user", "tier")
        .order_by("tier__sort_order", "tier__name", "waitlist_position")
    )
