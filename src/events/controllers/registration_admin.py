from uuid import UUID

from django.db.models import QuerySet
from django.shortcuts import get_object_or_404
from ninja_extra import api_controller, route
from ninja_extra.permissions import IsAdminUser

from common.authentication import I18nJWTAuth
from common.controllers import UserAwareController
from common.throttling import WriteThrottle
from events import schema
from events.models import EligibilityOverride, Event, Registration, TicketTier
from events.service import override_service, reporting
from events.service.admission import AdmissionController, PromotionResult
from events.service.scheduling import DefaultSchedule, compute_default_schedule
from membership.models import Member


@api_controller(
    "/admin",
    auth=I18nJWTAuth(),
    permissions=[IsAdminUser],
    tags=["Registration Admin"],
    throttle=WriteThrottle(),
)
class RegistrationAdminController(UserAwareController):
    @route.post(
        "/registrations/{registration_id}/promote",
        url_name="promote_registration",
        response=PromotionResult,
    )
    def promote(self, registration_id: UUID, payload: schema.PromoteSchema) -> PromotionResult:
        """Promote a waitlisted registration to confirmed.

        Fails with 422 when the tier is full unless `override_capacity` is set, in which
        case the response reports the overage in `spots_available` and `warning`.
        """
        return AdmissionController().promote(
            registration_id,
            override_capacity=payload.override_capacity,
            actor_id=self.user().pk,
            notify=payload.notify,
            notes=payload.notes,
        )

    @route.get("/events/{event_id}/waitlist", url_name="event_waitlist", response=list[schema.WaitlistEntrySchema])
    def waitlist(self, event_id: UUID) -> QuerySet[Registration]:
        """List an event's waitlist, per tier in promotion order."""
        event = get_object_or_404(Event, pk=event_id)
        return reporting.event_waitlist(event)

    @route.get("/events/{event_id}/capacity", url_name="event_capacity", response=schema.EventCapacitySchema)
    def capacity(self, event_id: UUID) -> schema.EventCapacitySchema:
        """Sold, remaining and waitlisted seats for every active tier of an event."""
        event = get_object_or_404(Event, pk=event_id)
        summary, timing, prices = reporting.event_capacity(event)
        return schema.EventCapacitySchema(
            event_id=event.pk, summary=summary, waitlist_timing=timing, price_range=prices
        )

    @route.put(
        "/events/{event_id}/eligibility-overrides",
        url_name="save_eligibility_override",
        response=schema.EligibilityOverrideSchema,
    )
    def save_override(self, event_id: UUID, payload: schema.EligibilityOverrideUpsertSchema) -> EligibilityOverride:
        """Create or replace a member's allow/deny override for one ticket tier."""
        event = get_object_or_404(Event, pk=event_id)
        tier = get_object_or_404(TicketTier, pk=payload.ticket_tier_id, event=event)
        member = get_object_or_404(Member, pk=payload.member_id)
        return override_service.save_override(
            event=event,
            member=member,
            tier=tier,
            outcome=payload.outcome,
            reason=payload.reason,
            actor=self.user(),
        )

    @route.delete(
        "/eligibility-overrides/{override_id}",
        url_name="delete_eligibility_override",
        response={204: None},
    )
    def delete_override(self, override_id: UUID) -> tuple[int, None]:
        """Remove an override so the tier's default rule applies again."""
        override = get_object_or_404(EligibilityOverride, pk=override_id)
        override_service.delete_override(override, actor=self.user())
        return 204, None

    @route.get("/schedule/defaults", url_name="default_schedule", response=DefaultSchedule)
    def default_schedule(self, requires_registration: bool = True) -> DefaultSchedule:
        """Suggested publish and registration-open times for a new event."""
        return compute_default_schedule(requires_registration)
