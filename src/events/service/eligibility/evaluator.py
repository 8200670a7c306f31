"""Pure eligibility policy.

Precedence is fixed: an explicit override wins outright, a missing member record
fails closed, an unknown category is not applicable, and only then does the
tier category's default rule run. Nothing here touches the database.
"""

import datetime
import typing as t

from events.enums import OverrideOutcome, TicketCategory

from .enums import EXTENDED_STATUS, NEWCOMER_STATUS, ReasonCode
from .types import EligibilityContext, EligibilityResult, EventSnapshot, MemberSnapshot, OverrideSnapshot, TierSnapshot


def evaluate_eligibility(context: EligibilityContext) -> EligibilityResult:
    """Decide whether a member may take a ticket in the given tier."""
    if context.override is not None:
        return _apply_override(context.override)

    member = context.member
    if member is None:
        return EligibilityResult.deny(ReasonCode.NOT_A_MEMBER, "No member record was found.")

    try:
        category = TicketCategory(context.tier.category)
    except ValueError:
        return EligibilityResult.deny(
            ReasonCode.NOT_APPLICABLE, f"Ticket category '{context.tier.category}' has no eligibility rule."
        )

    day = context.event.occurs_on
    match category:
        case TicketCategory.MEMBER_STANDARD:
            return _member_standard_rule(member, context.tier, day)
        case TicketCategory.SPONSOR_COMMITTEE:
            return _sponsor_committee_rule(member, context.event, day)
        case TicketCategory.WORKING_COMMITTEE:
            return _working_committee_rule(member, day)
        case _:
            t.assert_never(category)


def _apply_override(override: OverrideSnapshot) -> EligibilityResult:
    detail = override.reason or None
    outcome = OverrideOutcome(override.outcome)
    match outcome:
        case OverrideOutcome.ALLOW:
            return EligibilityResult.allow(ReasonCode.OVERRIDE_ALLOWED, detail)
        case OverrideOutcome.DENY:
            return EligibilityResult.deny(ReasonCode.OVERRIDE_DENIED, detail)
        case _:
            t.assert_never(outcome)


def _member_standard_rule(member: MemberSnapshot, tier: TierSnapshot, day: datetime.date) -> EligibilityResult:
    if not member.is_active_on(day):
        return EligibilityResult.deny(
            ReasonCode.NOT_MEMBER_ON_EVENT_DATE,
            f"Membership status '{member.status_code}' is not active on {day.isoformat()}.",
        )

    allowed_statuses = tier.allowed_member_statuses
    if not allowed_statuses:
        return EligibilityResult.allow(ReasonCode.ALLOWED)

    if member.status_code not in allowed_statuses:
        return EligibilityResult.deny(
            ReasonCode.WRONG_MEMBER_LEVEL,
            f"Requires one of: {', '.join(allowed_statuses)}.",
        )

    newcomer_only = NEWCOMER_STATUS in allowed_statuses and EXTENDED_STATUS not in allowed_statuses
    if newcomer_only and member.status_code == NEWCOMER_STATUS:
        return EligibilityResult.allow(ReasonCode.NEWBIE_TO_NEWCOMER_ALLOWED, "Newcomer ticket.")
    return EligibilityResult.allow(ReasonCode.ALLOWED)


def _sponsor_committee_rule(member: MemberSnapshot, event: EventSnapshot, day: datetime.date) -> EligibilityResult:
    if not event.sponsor_committees:
        return EligibilityResult.deny(
            ReasonCode.NOT_IN_SPONSORING_COMMITTEE, "Event has no sponsoring committees configured."
        )

    member_committees = member.committees_on(day)
    shared = [name for committee_id, name in event.sponsor_committees.items() if committee_id in member_committees]
    if shared:
        return EligibilityResult.allow(
            ReasonCode.ALLOWED, f"Member of sponsoring committee: {', '.join(sorted(shared))}."
        )

    sponsors = ", ".join(sorted(event.sponsor_committees.values()))
    return EligibilityResult.deny(
        ReasonCode.NOT_IN_SPONSORING_COMMITTEE, f"Requires membership in a sponsoring committee: {sponsors}."
    )


def _working_committee_rule(member: MemberSnapshot, day: datetime.date) -> EligibilityResult:
    if member.committees_on(day):
        return EligibilityResult.allow(ReasonCode.ALLOWED)
    return EligibilityResult.deny(
        ReasonCode.NOT_IN_WORKING_COMMITTEE, f"No committee membership on {day.isoformat()}."
    )
