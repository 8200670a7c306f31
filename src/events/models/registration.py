import typing as t

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from common.models import TimeStampedModel
from events.enums import TERMINAL_STATUSES, RegistrationStatus

from .event import Event
from .ticket import TicketTier


class RegistrationQuerySet(models.QuerySet["Registration"]):
    def active(self) -> t.Self:
        """Registrations that are neither cancelled nor refunded."""
        return self.exclude(status__in=TERMINAL_STATUSES)

    def waitlisted(self) -> t.Self:
        return self.filter(status=RegistrationStatus.WAITLISTED)

    def waitlist_for(self, tier: TicketTier) -> t.Self:
        """A tier's waitlist in promotion order."""
        return self.waitlisted().filter(tier=tier).order_by("waitlist_position")


class RegistrationManager(models.Manager["Registration"]):
    def get_queryset(self) -> RegistrationQuerySet:
        return RegistrationQuerySet(self.model, using=self._db)

    def active(self) -> RegistrationQuerySet:
        return self.get_queryset().active()

    def waitlisted(self) -> RegistrationQuerySet:
        return self.get_queryset().waitlisted()

    def waitlist_for(self, tier: TicketTier) -> RegistrationQuerySet:
        return self.get_queryset().waitlist_for(tier)


class Registration(TimeStampedModel):
    """A member's claim on a seat in one tier of an event.

    Rows are only written by the admission controller and are never deleted.
    CANCELLED is terminal; registering again creates a new row.
    """

    Status = RegistrationStatus

    member = models.ForeignKey("membership.Member", on_delete=models.CASCADE, related_name="registrations")
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="registrations")
    tier = models.ForeignKey(TicketTier, on_delete=models.PROTECT, related_name="registrations")
    status = models.CharField(max_length=20, choices=RegistrationStatus.choices, db_index=True)
    waitlist_position = models.PositiveIntegerField(null=True, blank=True)
    registered_at = models.DateTimeField(default=timezone.now)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    promoted_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True, default="")

    objects = RegistrationManager()

    class Meta:
        ordering = ["registered_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["member", "event"],
                condition=~Q(status__in=[RegistrationStatus.CANCELLED, RegistrationStatus.REFUNDED]),
                name="unique_active_registration_per_member_event",
            ),
            models.UniqueConstraint(
                fields=["tier", "waitlist_position"],
                condition=Q(status=RegistrationStatus.WAITLISTED),
                name="unique_waitlist_position_per_tier",
            ),
            models.CheckConstraint(
                condition=Q(
                    status=RegistrationStatus.WAITLISTED,
                    waitlist_position__isnull=False,
                    waitlist_position__gte=1,
                )
                | (~Q(status=RegistrationStatus.WAITLISTED) & Q(waitlist_position__isnull=True)),
                name="waitlist_position_iff_waitlisted",
            ),
        ]
        indexes = [
            models.Index(fields=["tier", "status"], name="registration_tier_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.member} - {self.tier} ({self.status})"

    def clean(self) -> None:
        if self.tier_id and self.event_id and self.tier.event_id != self.event_id:
            raise ValidationError({"tier": _("The ticket tier does not belong to this event.")})

    @property
    def is_active(self) -> bool:
        return self.status not in TERMINAL_STATUSES
