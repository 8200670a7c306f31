import datetime
import typing as t

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from common.models import TimeStampedModel
from events.enums import EventStatus

if t.TYPE_CHECKING:
    from events.service.operational_status import OperationalStatus


class EventQuerySet(models.QuerySet["Event"]):
    def visible(self, now: datetime.datetime | None = None) -> t.Self:
        """Events that members can see, published or past their scheduled publish time."""
        now = now or timezone.now()
        return self.filter(
            Q(status=EventStatus.PUBLISHED)
            | Q(published_at__lte=now)
            | Q(status=EventStatus.APPROVED, publish_at__lte=now)
        )


class EventManager(models.Manager["Event"]):
    def get_queryset(self) -> EventQuerySet:
        return EventQuerySet(self.model, using=self._db)

    def visible(self, now: datetime.datetime | None = None) -> EventQuerySet:
        return self.get_queryset().visible(now)


class Event(TimeStampedModel):
    Status = EventStatus

    title = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True)
    description = models.TextField(blank=True, default="")
    status = models.CharField(max_length=32, choices=EventStatus.choices, default=EventStatus.DRAFT, db_index=True)
    publish_at = models.DateTimeField(null=True, blank=True, help_text="When an approved event becomes visible.")
    published_at = models.DateTimeField(null=True, blank=True)
    requires_registration = models.BooleanField(default=True)
    registration_opens_at = models.DateTimeField(null=True, blank=True)
    registration_deadline = models.DateTimeField(
        null=True, blank=True, help_text="Defaults to the start time when empty."
    )
    start_time = models.DateTimeField(db_index=True)
    end_time = models.DateTimeField(null=True, blank=True)
    sponsoring_committees = models.ManyToManyField(
        "membership.Committee", through="EventSponsorship", related_name="sponsored_events", blank=True
    )

    objects = EventManager()

    class Meta:
        ordering = ["start_time"]

    def __str__(self) -> str:
        return self.title

    def clean(self) -> None:
        errors: dict[str, str] = {}
        if self.end_time and self.start_time and self.end_time < self.start_time:
            errors["end_time"] = _("The event cannot end before it starts.")
        if self.registration_opens_at and self.registration_deadline:
            if self.registration_deadline < self.registration_opens_at:
                errors["registration_deadline"] = _("Registration cannot close before it opens.")
        if errors:
            raise ValidationError(errors)

    def operational_status(self, now: datetime.datetime | None = None) -> "OperationalStatus":
        from events.service.operational_status import derive_operational_status

        return derive_operational_status(self, now or timezone.now())


class EventSponsorship(TimeStampedModel):
    """Links an event to a sponsoring or co-sponsoring committee."""

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="sponsorships")
    committee = models.ForeignKey("membership.Committee", on_delete=models.CASCADE, related_name="sponsorships")
    is_primary = models.BooleanField(default=False)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["event", "committee"], name="unique_event_sponsorship"),
        ]

    def __str__(self) -> str:
        return f"{self.committee} sponsors {self.event}"
