"""EligibilityService for checking member eligibility for ticket tiers."""

import uuid

from events.models import EligibilityOverride, Event, TicketTier
from events.utils import local_date
from membership.models import Member

from .evaluator import evaluate_eligibility
from .types import (
    CommitteeTenure,
    EligibilityContext,
    EligibilityResult,
    EventEligibilityReport,
    EventSnapshot,
    MemberSnapshot,
    OverrideSnapshot,
    TicketEligibility,
    TierSnapshot,
)


class EligibilityService:
    """Builds eligibility snapshots for one member and one event.

    All reads happen in ``__init__``; each tier check afterwards is an in-memory call
    to the pure evaluator.
    """

    def __init__(self, event: Event, member: Member | None) -> None:
        """Initialize the service, pre-fetching member facts, sponsors and overrides."""
        self.event = event
        self.member = (
            Member.objects.with_eligibility_facts().filter(pk=member.pk).first() if member is not None else None
        )
        self.event_snapshot = self._snapshot_event(event)
        self.member_snapshot = self._snapshot_member(self.member) if self.member is not None else None
        self.overrides: dict[uuid.UUID, OverrideSnapshot] = {}
        if self.member is not None:
            for override in EligibilityOverride.objects.filter(event=event, member=self.member):
                self.overrides[override.tier_id] = OverrideSnapshot(outcome=override.outcome, reason=override.reason)

    @staticmethod
    def _snapshot_event(event: Event) -> EventSnapshot:
        sponsorships = event.sponsorships.select_related("committee")
        return EventSnapshot(
            event_id=event.pk,
            occurs_on=local_date(event.start_time),
            sponsor_committees={s.committee_id: s.committee.name for s in sponsorships},
        )

    @staticmethod
    def _snapshot_member(member: Member) -> MemberSnapshot:
        return MemberSnapshot(
            member_id=member.pk,
            status_code=member.membership_status.code,
            status_is_active=member.membership_status.is_active,
            joined_on=member.joined_on,
            expires_on=member.membership_expires_on,
            tenures=tuple(
                CommitteeTenure(
                    committee_id=cm.committee_id,
                    committee_name=cm.committee.name,
                    start_date=cm.start_date,
                    end_date=cm.end_date,
                )
                for cm in member.committee_memberships.all()
            ),
        )

    @staticmethod
    def _snapshot_tier(tier: TicketTier) -> TierSnapshot:
        return TierSnapshot(
            tier_id=tier.pk,
            code=tier.code,
            name=tier.name,
            category=tier.category,
            allowed_member_statuses=tuple(tier.allowed_member_statuses or ()),
        )

    def check(self, tier: TicketTier) -> EligibilityResult:
        """Evaluate a single tier."""
        context = EligibilityContext(
            member=self.member_snapshot,
            event=self.event_snapshot,
            tier=self._snapshot_tier(tier),
            override=self.overrides.get(tier.pk),
        )
        return evaluate_eligibility(context)

    def report(self) -> EventEligibilityReport:
        """Evaluate every active tier of the event, in display order."""
        tiers = TicketTier.objects.active().filter(event=self.event).order_by("sort_order", "name")
        return EventEligibilityReport(
            event_id=self.event.pk,
            member_id=self.member.pk if self.member is not None else None,
            ticket_types=[
                TicketEligibility(tier_id=tier.pk, code=tier.code, name=tier.name, eligibility=self.check(tier))
                for tier in tiers
            ],
        )
