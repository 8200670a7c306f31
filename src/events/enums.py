"""Closed choice sets shared by the events models and the admission services."""

from django.db import models
from django.utils.translation import gettext_lazy as _


class EventStatus(models.TextChoices):
    DRAFT = "DRAFT", _("Draft")
    PENDING_APPROVAL = "PENDING_APPROVAL", _("Pending Approval")
    CHANGES_REQUESTED = "CHANGES_REQUESTED", _("Changes Requested")
    APPROVED = "APPROVED", _("Approved")
    PUBLISHED = "PUBLISHED", _("Published")
    CANCELED = "CANCELED", _("Canceled")
    ARCHIVED = "ARCHIVED", _("Archived")


class TicketCategory(models.TextChoices):
    """Selects the default eligibility rule of a ticket tier."""

    MEMBER_STANDARD = "member_standard", _("Member Standard")
    SPONSOR_COMMITTEE = "sponsor_committee", _("Sponsor Committee")
    WORKING_COMMITTEE = "working_committee", _("Working Committee")


class OverrideOutcome(models.TextChoices):
    ALLOW = "ALLOW", _("Allow")
    DENY = "DENY", _("Deny")


class RegistrationStatus(models.TextChoices):
    CONFIRMED = "CONFIRMED", _("Confirmed")
    PENDING_PAYMENT = "PENDING_PAYMENT", _("Pending Payment")
    WAITLISTED = "WAITLISTED", _("Waitlisted")
    CANCELLED = "CANCELLED", _("Cancelled")
    REFUNDED = "REFUNDED", _("Refunded")


# Registrations in these states hold a seat against the tier quantity.
CAPACITY_HOLDING_STATUSES = frozenset({RegistrationStatus.CONFIRMED, RegistrationStatus.PENDING_PAYMENT})

# Registrations in these states are finished and excluded from every count.
TERMINAL_STATUSES = frozenset({RegistrationStatus.CANCELLED, RegistrationStatus.REFUNDED})
