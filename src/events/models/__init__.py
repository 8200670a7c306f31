from .event import Event, EventQuerySet, EventSponsorship
from .registration import Registration, RegistrationQuerySet
from .ticket import EligibilityOverride, TicketTier, TicketTierQuerySet

__all__ = [
    # Events
    "Event",
    "EventQuerySet",
    "EventSponsorship",
    # Tickets
    "TicketTier",
    "TicketTierQuerySet",
    "EligibilityOverride",
    # Registrations
    "Registration",
    "RegistrationQuerySet",
]
