"""Audit emission for admission transitions.

By default a record is handed to a Celery task once the surrounding transaction
commits, and a failure to enqueue is logged without affecting the transition.
With ``AUDIT_FAIL_CLOSED`` the row is written inside the transaction instead, and
a failed write aborts the transition.
"""

import datetime
import typing as t
import uuid
from enum import StrEnum
from functools import partial

import structlog
from django.conf import settings
from django.db import DatabaseError, transaction
from django.utils import timezone
from pydantic import BaseModel, Field

from common.models import AuditLog
from common.tasks import record_audit_entry
from events.exceptions import AuditEnforcementError

if t.TYPE_CHECKING:
    from events.models import EligibilityOverride, Registration

logger = structlog.get_logger(__name__)


class AuditAction(StrEnum):
    REGISTRATION_CREATED = "registration.created"
    REGISTRATION_CANCELLED = "registration.cancelled"
    REGISTRATION_PROMOTED = "registration.promoted"
    REGISTRATION_AUTO_PROMOTED = "registration.auto_promoted"
    OVERRIDE_SAVED = "eligibility_override.saved"
    OVERRIDE_DELETED = "eligibility_override.deleted"


class AuditRecord(BaseModel):
    action: AuditAction
    resource_type: str
    resource_id: str
    actor_id: str | None = None
    before: dict[str, t.Any] | None = None
    after: dict[str, t.Any] | None = None
    metadata: dict[str, t.Any] = Field(default_factory=dict)
    timestamp: datetime.datetime = Field(default_factory=timezone.now)


def registration_state(registration: "Registration") -> dict[str, t.Any]:
    return {
        "status": str(registration.status),
        "waitlist_position": registration.waitlist_position,
        "member_id": str(registration.member_id),
        "event_id": str(registration.event_id),
        "tier_id": str(registration.tier_id),
    }


def override_state(override: "EligibilityOverride") -> dict[str, t.Any]:
    return {
        "outcome": str(override.outcome),
        "reason": override.reason,
        "member_id": str(override.member_id),
        "event_id": str(override.event_id),
        "tier_id": str(override.tier_id),
    }


def registration_record(
    action: AuditAction,
    registration: "Registration",
    *,
    actor_id: uuid.UUID | str | None,
    before: dict[str, t.Any] | None,
    **metadata: t.Any,
) -> AuditRecord:
    return AuditRecord(
        action=action,
        resource_type="registration",
        resource_id=str(registration.pk),
        actor_id=str(actor_id) if actor_id else None,
        before=before,
        after=registration_state(registration),
        metadata=metadata,
    )


def emit(record: AuditRecord) -> None:
    """Emit one audit record for a transition in the current transaction."""
    if settings.AUDIT_FAIL_CLOSED:
        _write_now(record)
        return
    transaction.on_commit(partial(_enqueue, record.model_dump(mode="json")))


def _enqueue(payload: dict[str, t.Any]) -> None:
    try:
        record_audit_entry.delay(payload)
    except Exception:
        logger.exception(
            "audit_emission_failed",
            action=payload["action"],
            resource_type=payload["resource_type"],
            resource_id=payload["resource_id"],
        )


def _write_now(record: AuditRecord) -> None:
    try:
        with transaction.atomic():
            AuditLog.objects.create(
                action=record.action,
                resource_type=record.resource_type,
                resource_id=record.resource_id,
                actor_id=record.actor_id,
                before=record.before,
                after=record.after,
                metadata=record.metadata,
                created_at=record.timestamp,
            )
    except DatabaseError as exc:
        logger.error(
            "audit_enforcement_failed",
            action=str(record.action),
            resource_type=record.resource_type,
            resource_id=record.resource_id,
        )
        raise AuditEnforcementError(
            f"Failed to create audit entry for {record.action} {record.resource_type}/{record.resource_id}"
        ) from exc
