from uuid import UUID

from django.shortcuts import get_object_or_404
from django.utils import timezone
from ninja_extra import api_controller, route

from common.authentication import I18nJWTAuth
from common.controllers import UserAwareController
from common.throttling import WriteThrottle
from events import schema
from events.enums import RegistrationStatus
from events.models import Event
from events.service.admission import AdmissionController
from events.service.eligibility import EventEligibilityReport
from events.service.operational_status import (
    EventTimeline,
    derive_operational_status,
    derive_registration_state,
    derive_visibility,
    operational_status_label,
)
from events.service.scheduling import format_registration_opens_message
from membership.models import Member


@api_controller("/events", auth=I18nJWTAuth(), tags=["Registration"])
class RegistrationController(UserAwareController):
    def member_id(self) -> UUID | None:
        """The member record of the authenticated user, if any."""
        return Member.objects.filter(user=self.user()).values_list("id", flat=True).first()

    @route.post(
        "/{event_id}/register",
        url_name="register_for_event",
        response={201: schema.RegistrationCreatedSchema},
        throttle=WriteThrottle(),
    )
    def register(self, event_id: UUID, payload: schema.RegisterSchema) -> tuple[int, dict[str, object]]:
        """Register for an event in the given ticket tier.

        The registration is CONFIRMED while the tier has seats left and WAITLISTED
        otherwise, with its 1-based position in the tier's waitlist.
        """
        registration = AdmissionController().register(
            event_id, self.member_id(), payload.ticket_tier_id, actor_id=self.user().pk
        )
        if registration.status == RegistrationStatus.WAITLISTED:
            message = f"Added to waitlist at position {registration.waitlist_position}"
        else:
            message = "Successfully registered for event"
        return 201, {"registration": registration, "message": message}

    @route.delete(
        "/{event_id}/register",
        url_name="cancel_registration",
        response={204: None},
        throttle=WriteThrottle(),
    )
    def cancel(self, event_id: UUID) -> tuple[int, None]:
        """Cancel your active registration for an event.

        If the freed seat can be filled, the next person on the waitlist is confirmed.
        """
        AdmissionController().cancel(event_id, self.member_id(), actor_id=self.user().pk)
        return 204, None

    @route.get("/{event_id}/tickets/eligibility", url_name="ticket_eligibility", response=EventEligibilityReport)
    def eligibility(self, event_id: UUID) -> EventEligibilityReport:
        """Check which ticket tiers of an event you may register for, and why."""
        return AdmissionController().get_eligibility(event_id, self.member_id())

    @route.get("/{event_id}/status", url_name="event_status", response=schema.EventStatusSchema, auth=None)
    def status(self, event_id: UUID) -> schema.EventStatusSchema:
        """Get the current lifecycle status of a published event."""
        now = timezone.now()
        event = get_object_or_404(Event.objects.visible(now), pk=event_id)
        timeline = EventTimeline.from_model(event)
        operational_status = derive_operational_status(timeline, now)
        return schema.EventStatusSchema(
            event_id=event.pk,
            operational_status=operational_status,
            label=operational_status_label(operational_status),
            visibility=derive_visibility(timeline, now),
            registration_state=derive_registration_state(timeline, now),
            registration_opens_message=format_registration_opens_message(
                event.requires_registration, event.registration_opens_at
            ),
        )
