import structlog
from django.db import transaction

from accounts.models import ClubUser
from events.enums import OverrideOutcome
from events.models import EligibilityOverride, Event, TicketTier
from membership.models import Member

from . import audit

logger = structlog.get_logger(__name__)


@transaction.atomic
def save_override(
    *,
    event: Event,
    member: Member,
    tier: TicketTier,
    outcome: OverrideOutcome,
    reason: str,
    actor: ClubUser,
) -> EligibilityOverride:
    """Create or replace the override for (member, event, tier)."""
    existing = EligibilityOverride.objects.select_for_update().filter(member=member, event=event, tier=tier).first()
    before = audit.override_state(existing) if existing else None

    override, created = EligibilityOverride.objects.update_or_create(
        member=member,
        event=event,
        tier=tier,
        defaults={"outcome": outcome, "reason": reason, "created_by": actor},
    )
    audit.emit(
        audit.AuditRecord(
            action=audit.AuditAction.OVERRIDE_SAVED,
            resource_type="eligibility_override",
            resource_id=str(override.pk),
            actor_id=str(actor.pk),
            before=before,
            after=audit.override_state(override),
        )
    )
    logger.info(
        "eligibility_override_saved",
        override_id=str(override.pk),
        event_id=str(event.pk),
        tier_id=str(tier.pk),
        member_id=str(member.pk),
        outcome=str(outcome),
        created=created,
    )
    return override


@transaction.atomic
def delete_override(override: EligibilityOverride, *, actor: ClubUser) -> None:
    before = audit.override_state(override)
    override_id = str(override.pk)
    override.delete()
    audit.emit(
        audit.AuditRecord(
            action=audit.AuditAction.OVERRIDE_DELETED,
            resource_type="eligibility_override",
            resource_id=override_id,
            actor_id=str(actor.pk),
            before=before,
            after=None,
        )
    )
    logger.info("eligibility_override_deleted", override_id=override_id)
