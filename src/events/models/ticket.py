import typing as t

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils.translation import gettext_lazy as _

from common.models import TimeStampedModel
from events.enums import OverrideOutcome, TicketCategory

from .event import Event


class TicketTierQuerySet(models.QuerySet["TicketTier"]):
    def active(self) -> t.Self:
        return self.filter(is_active=True)


class TicketTierManager(models.Manager["TicketTier"]):
    def get_queryset(self) -> TicketTierQuerySet:
        return TicketTierQuerySet(self.model, using=self._db)

    def active(self) -> TicketTierQuerySet:
        return self.get_queryset().active()


class TicketTier(TimeStampedModel):
    """A named, finite allotment of tickets within an event.

    The category selects the default eligibility rule. ``allowed_member_statuses``
    further restricts member-standard tiers to specific membership status codes;
    an empty list accepts any active membership.
    """

    Category = TicketCategory

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="ticket_tiers")
    code = models.SlugField(max_length=64)
    name = models.CharField(max_length=150)
    description = models.TextField(blank=True, default="")
    category = models.CharField(max_length=32, choices=TicketCategory.choices, default=TicketCategory.MEMBER_STANDARD)
    quantity = models.PositiveIntegerField(help_text="Number of seats in this tier.")
    price_cents = models.PositiveIntegerField(default=0)
    sort_order = models.PositiveSmallIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    allowed_member_statuses = models.JSONField(default=list, blank=True)

    objects = TicketTierManager()

    class Meta:
        ordering = ["sort_order", "name"]
        constraints = [
            models.UniqueConstraint(fields=["event", "code"], name="unique_ticket_tier_code_per_event"),
        ]

    def __str__(self) -> str:
        return f"{self.event} - {self.name}"

    def clean(self) -> None:
        statuses = self.allowed_member_statuses
        if not isinstance(statuses, list) or not all(isinstance(code, str) for code in statuses):
            raise ValidationError({"allowed_member_statuses": _("Must be a list of membership status codes.")})


class EligibilityOverride(TimeStampedModel):
    """An explicit per-member allow/deny exception for one tier of one event."""

    Outcome = OverrideOutcome

    member = models.ForeignKey("membership.Member", on_delete=models.CASCADE, related_name="eligibility_overrides")
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="eligibility_overrides")
    tier = models.ForeignKey(TicketTier, on_delete=models.CASCADE, related_name="eligibility_overrides")
    outcome = models.CharField(max_length=8, choices=OverrideOutcome.choices)
    reason = models.TextField(blank=True, default="")
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["member", "event", "tier"], name="unique_eligibility_override"),
        ]

    def __str__(self) -> str:
        return f"{self.outcome} {self.member} for {self.tier}"

    def clean(self) -> None:
        if self.tier_id and self.event_id and self.tier.event_id != self.event_id:
            raise ValidationError({"tier": _("The ticket tier does not belong to this event.")})
