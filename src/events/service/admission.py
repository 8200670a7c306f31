"""Registration admission control.

The AdmissionController is the only writer of Registration rows. Every capacity
read that leads to a write happens while holding a row lock on the ticket tier,
so concurrent requests for the same tier are serialized while other tiers and
events proceed independently.
"""

import datetime
import typing as t
import uuid
from functools import partial

import structlog
from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Max
from django.utils import timezone
from pydantic import BaseModel

from events.enums import CAPACITY_HOLDING_STATUSES, TERMINAL_STATUSES, RegistrationStatus
from events.exceptions import (
    AdmissionValidationError,
    CapacityExceededError,
    ConflictError,
    IneligibleError,
    NotFoundError,
)
from events.models import Event, Registration, TicketTier
from events.tasks import notify_registration_promoted
from membership.models import Member

from . import audit
from .eligibility import EligibilityService, EventEligibilityReport
from .operational_status import OperationalStatus, derive_operational_status, operational_status_label
from .tier_metrics import RegistrationInput, TierInput, TierMetrics, compute_tier_metrics

logger = structlog.get_logger(__name__)


class PromotionResult(BaseModel):
    registration_id: uuid.UUID
    status: RegistrationStatus
    previous_status: RegistrationStatus
    promoted_at: datetime.datetime
    remaining_waitlist: int
    spots_available: int
    warning: str | None = None
    notification_queued: bool = False


class AdmissionController:
    """Registers, cancels and promotes event registrations.

    Promotion on cancellation is controlled by ``auto_promote``. When it is off,
    freed seats stay open until an administrator promotes someone explicitly.
    """

    def __init__(self, *, auto_promote: bool | None = None, write_retries: int | None = None) -> None:
        """Initialize the controller, falling back to the configured policy."""
        self.auto_promote = settings.AUTO_PROMOTE_ON_CANCEL if auto_promote is None else auto_promote
        self.write_retries = settings.ADMISSION_WRITE_RETRIES if write_retries is None else write_retries

    # --- Member-facing operations ---

    def register(
        self,
        event_id: uuid.UUID,
        member_id: uuid.UUID | None,
        tier_id: uuid.UUID,
        *,
        actor_id: uuid.UUID | None = None,
    ) -> Registration:
        """Register a member for a ticket tier, confirming or waitlisting them.

        Args:
            event_id: The event to register for.
            member_id: The authenticated member, or None if the user has no member record.
            tier_id: The requested ticket tier of that event.
            actor_id: Who performed the action, for the audit trail.

        Returns:
            The created registration, CONFIRMED or WAITLISTED with its position.

        Raises:
            NotFoundError: The event or tier does not exist.
            AdmissionValidationError: The tier is inactive or registration is not open.
            ConflictError: The member is already registered, or a write race was lost twice.
            IneligibleError: The eligibility evaluator denied the tier.
        """
        event = self._get_event(event_id)
        tier = TicketTier.objects.filter(pk=tier_id, event=event).first()
        if tier is None:
            raise NotFoundError("Ticket tier not found.", code="TICKET_TIER_NOT_FOUND")
        if not tier.is_active:
            raise AdmissionValidationError("This ticket tier is not available.", code="TIER_INACTIVE")

        status = derive_operational_status(event, timezone.now())
        if status != OperationalStatus.OPEN_FOR_REGISTRATION:
            raise AdmissionValidationError(
                f"Registration is not open ({operational_status_label(status)}).", code="REGISTRATION_NOT_OPEN"
            )

        member = Member.objects.filter(pk=member_id).first() if member_id else None
        if member is not None and self._has_active_registration(event, member):
            raise ConflictError("You are already registered for this event.", code="ALREADY_REGISTERED")

        eligibility = EligibilityService(event, member).check(tier)
        if not eligibility.allowed:
            logger.info(
                "registration_denied",
                event_id=str(event.pk),
                tier_id=str(tier.pk),
                member_id=str(member_id) if member_id else None,
                reason_code=str(eligibility.reason_code),
            )
            raise IneligibleError(eligibility.reason_detail or "Not eligible for this ticket tier.", eligibility)
        if member is None:
            raise NotFoundError("Member not found.", code="MEMBER_NOT_FOUND")

        return self._admit(event, tier, member, actor_id=actor_id or member.user_id)

    def cancel(self, event_id: uuid.UUID, member_id: uuid.UUID | None, *, actor_id: uuid.UUID | None = None) -> None:
        """Cancel the member's active registration and, if configured, promote from the waitlist.

        Raises:
            NotFoundError: The event does not exist or the member has no active registration.
        """
        event = self._get_event(event_id)
        with transaction.atomic():
            found = Registration.objects.active().filter(event=event, member_id=member_id).first()
            if found is None:
                raise NotFoundError("No active registration found.", code="REGISTRATION_NOT_FOUND")

            tier = TicketTier.objects.select_for_update().get(pk=found.tier_id)
            registration = Registration.objects.select_for_update().get(pk=found.pk)
            if not registration.is_active:
                raise NotFoundError("No active registration found.", code="REGISTRATION_NOT_FOUND")

            before = audit.registration_state(registration)
            previous_status = registration.status
            vacated_position = registration.waitlist_position

            registration.status = RegistrationStatus.CANCELLED
            registration.cancelled_at = timezone.now()
            registration.waitlist_position = None
            registration.save()
            audit.emit(
                audit.registration_record(
                    audit.AuditAction.REGISTRATION_CANCELLED,
                    registration,
                    actor_id=actor_id,
                    before=before,
                )
            )

            promoted: Registration | None = None
            if previous_status == RegistrationStatus.WAITLISTED and vacated_position is not None:
                self._compact_waitlist(tier, vacated_position)
            elif previous_status in CAPACITY_HOLDING_STATUSES and self.auto_promote:
                promoted = self._promote_next(tier)

        logger.info(
            "registration_cancelled",
            registration_id=str(registration.pk),
            event_id=str(event.pk),
            tier_id=str(tier.pk),
            previous_status=str(previous_status),
            promoted_registration_id=str(promoted.pk) if promoted else None,
        )

    def get_eligibility(self, event_id: uuid.UUID, member_id: uuid.UUID | None) -> EventEligibilityReport:
        """Evaluate every active tier of an event for a member."""
        event = self._get_event(event_id)
        member = Member.objects.filter(pk=member_id).first() if member_id else None
        return EligibilityService(event, member).report()

    # --- Administrator operations ---

    def promote(
        self,
        registration_id: uuid.UUID,
        *,
        override_capacity: bool = False,
        actor_id: uuid.UUID | None = None,
        notify: bool = True,
        notes: str = "",
    ) -> PromotionResult:
        """Manually promote a waitlisted registration to CONFIRMED.

        Args:
            registration_id: The waitlisted registration.
            override_capacity: Confirm even if the tier is full.
            actor_id: The administrator performing the promotion.
            notify: Queue a confirmation email to the member after commit.
            notes: Free-text operator notes stored on the registration.

        Returns:
            The promotion outcome, including the tier's remaining capacity. ``spots_available``
            is negative when a capacity override put the tier over its quantity.

        Raises:
            NotFoundError: The registration does not exist.
            AdmissionValidationError: The registration is not waitlisted.
            CapacityExceededError: The tier is full and ``override_capacity`` is not set.
        """
        with transaction.atomic():
            found = Registration.objects.filter(pk=registration_id).first()
            if found is None:
                raise NotFoundError("Registration not found.", code="REGISTRATION_NOT_FOUND")

            tier = TicketTier.objects.select_for_update().get(pk=found.tier_id)
            registration = Registration.objects.select_for_update().get(pk=found.pk)
            if registration.status != RegistrationStatus.WAITLISTED:
                raise AdmissionValidationError(
                    f"Only waitlisted registrations can be promoted (current status: {registration.status}).",
                    code="NOT_WAITLISTED",
                )

            metrics = self._live_metrics(tier)
            if metrics.remaining <= 0 and not override_capacity:
                raise CapacityExceededError(f"Ticket tier '{tier.name}' has no remaining capacity.")

            previous_status = RegistrationStatus(registration.status)
            self._confirm_from_waitlist(
                registration,
                tier,
                action=audit.AuditAction.REGISTRATION_PROMOTED,
                actor_id=actor_id,
                notify=notify,
                notes=notes,
                override_capacity=override_capacity,
            )

            after = self._live_metrics(tier)
            spots_available = tier.quantity - after.sold
            warning = None
            if spots_available < 0:
                warning = f"Ticket tier '{tier.name}' is over capacity by {-spots_available}."

        logger.info(
            "registration_promoted",
            registration_id=str(registration.pk),
            tier_id=str(tier.pk),
            actor_id=str(actor_id) if actor_id else None,
            override_capacity=override_capacity,
            spots_available=spots_available,
        )
        return PromotionResult(
            registration_id=registration.pk,
            status=RegistrationStatus(registration.status),
            previous_status=previous_status,
            promoted_at=t.cast(datetime.datetime, registration.promoted_at),
            remaining_waitlist=after.waitlisted,
            spots_available=spots_available,
            warning=warning,
            notification_queued=notify,
        )

    # --- Critical section ---

    def _admit(self, event: Event, tier: TicketTier, member: Member, *, actor_id: uuid.UUID) -> Registration:
        attempts = self.write_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                with transaction.atomic():
                    return self._reserve(event, tier, member, actor_id=actor_id)
            except IntegrityError:
                logger.warning(
                    "registration_write_conflict",
                    event_id=str(event.pk),
                    tier_id=str(tier.pk),
                    member_id=str(member.pk),
                    attempt=attempt,
                )
                if self._has_active_registration(event, member):
                    raise ConflictError("You are already registered for this event.", code="ALREADY_REGISTERED")
        raise ConflictError("Could not secure a place, please try again.", code="CAPACITY_RACE_LOST")

    def _reserve(self, event: Event, tier: TicketTier, member: Member, *, actor_id: uuid.UUID) -> Registration:
        locked_tier = TicketTier.objects.select_for_update().get(pk=tier.pk)
        if self._has_active_registration(event, member):
            raise ConflictError("You are already registered for this event.", code="ALREADY_REGISTERED")

        metrics = self._live_metrics(locked_tier)
        now = timezone.now()
        if metrics.remaining > 0:
            registration = Registration.objects.create(
                member=member,
                event=event,
                tier=locked_tier,
                status=RegistrationStatus.CONFIRMED,
                registered_at=now,
                confirmed_at=now,
            )
        else:
            registration = Registration.objects.create(
                member=member,
                event=event,
                tier=locked_tier,
                status=RegistrationStatus.WAITLISTED,
                waitlist_position=self._next_waitlist_position(locked_tier),
                registered_at=now,
            )

        audit.emit(
            audit.registration_record(
                audit.AuditAction.REGISTRATION_CREATED,
                registration,
                actor_id=actor_id,
                before=None,
                remaining_before=metrics.remaining,
                tier_quantity=locked_tier.quantity,
            )
        )
        logger.info(
            "registration_created",
            registration_id=str(registration.pk),
            event_id=str(event.pk),
            tier_id=str(locked_tier.pk),
            member_id=str(member.pk),
            status=str(registration.status),
            waitlist_position=registration.waitlist_position,
        )
        return registration

    def _promote_next(self, tier: TicketTier) -> Registration | None:
        """Promote the head of the tier's waitlist if a seat is free. Caller holds the tier lock."""
        if self._live_metrics(tier).remaining <= 0:
            return None
        candidate = Registration.objects.waitlist_for(tier).select_for_update().first()
        if candidate is None:
            return None
        self._confirm_from_waitlist(
            candidate, tier, action=audit.AuditAction.REGISTRATION_AUTO_PROMOTED, actor_id=None, notify=True
        )
        return candidate

    def _confirm_from_waitlist(
        self,
        registration: Registration,
        tier: TicketTier,
        *,
        action: audit.AuditAction,
        actor_id: uuid.UUID | None,
        notify: bool,
        notes: str = "",
        **metadata: t.Any,
    ) -> None:
        before = audit.registration_state(registration)
        vacated_position = t.cast(int, registration.waitlist_position)
        now = timezone.now()

        registration.status = RegistrationStatus.CONFIRMED
        registration.waitlist_position = None
        registration.confirmed_at = now
        registration.promoted_at = now
        if notes:
            registration.notes = f"{registration.notes}\n{notes}".strip()
        registration.save()
        self._compact_waitlist(tier, vacated_position)

        audit.emit(
            audit.registration_record(
                action, registration, actor_id=actor_id, before=before, vacated_position=vacated_position, **metadata
            )
        )
        if notify:
            transaction.on_commit(partial(_queue_promotion_notice, registration.pk))

    @staticmethod
    def _compact_waitlist(tier: TicketTier, vacated_position: int) -> None:
        """Close the gap left at ``vacated_position``.

        Rows move up one at a time in ascending order so no two waitlisted rows
        ever share a position, even mid-update.
        """
        now = timezone.now()
        trailing = (
            Registration.objects.waitlist_for(tier)
            .filter(waitlist_position__gt=vacated_position)
            .values_list("pk", "waitlist_position")
        )
        for pk, position in list(trailing):
            Registration.objects.filter(pk=pk).update(waitlist_position=position - 1, updated_at=now)

    # --- Reads ---

    @staticmethod
    def _get_event(event_id: uuid.UUID) -> Event:
        event = Event.objects.filter(pk=event_id).first()
        if event is None:
            raise NotFoundError("Event not found.", code="EVENT_NOT_FOUND")
        return event

    @staticmethod
    def _has_active_registration(event: Event, member: Member) -> bool:
        return Registration.objects.active().filter(event=event, member=member).exists()

    @staticmethod
    def _live_metrics(tier: TicketTier) -> TierMetrics:
        rows = (
            Registration.objects.filter(tier=tier)
            .exclude(status__in=TERMINAL_STATUSES)
            .values("tier_id", "status", "registered_at")
        )
        return compute_tier_metrics(TierInput.from_model(tier), [RegistrationInput(**row) for row in rows])

    @staticmethod
    def _next_waitlist_position(tier: TicketTier) -> int:
        current = Registration.objects.waitlisted().filter(tier=tier).aggregate(top=Max("waitlist_position"))["top"]
        return (current or 0) + 1


def _queue_promotion_notice(registration_id: uuid.UUID) -> None:
    try:
        notify_registration_promoted.delay(str(registration_id))
    except Exception:
        logger.exception("promotion_notification_failed", registration_id=str(registration_id))
