import typing as t

import structlog
from celery import shared_task
from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from common.models import AuditLog

logger = structlog.get_logger(__name__)


@shared_task
def send_email(*, to: str | list[str], subject: str, body: str, html_body: str | None = None) -> None:
    """Send an email.

    Args:
        to (str | list[str]): The recipient address or addresses.
        subject (str): The email subject.
        body (str): The plain-text email body.
        html_body (str | None): The HTML email body.
    """
    recipients = [to] if isinstance(to, str) else to
    email_msg = EmailMultiAlternatives(
        subject=subject,
        body=body,
        from_email=settings.DEFAULT_FROM_EMAIL,
        bcc=recipients,
    )
    if html_body:
        email_msg.attach_alternative(html_body, "text/html")
    email_msg.send(fail_silently=False)
    logger.info("email_sent", subject=subject, recipient_count=len(recipients))


@shared_task
def record_audit_entry(payload: dict[str, t.Any]) -> str:
    """Persist an audit record emitted after a committed transition.

    Args:
        payload: A JSON-serialized audit record.

    Returns:
        The id of the created audit log entry.
    """
    entry = AuditLog.objects.create(
        action=payload["action"],
        resource_type=payload["resource_type"],
        resource_id=payload["resource_id"],
        actor_id=payload.get("actor_id"),
        before=payload.get("before"),
        after=payload.get("after"),
        metadata=payload.get("metadata") or {},
        created_at=parse_datetime(payload["timestamp"]) or timezone.now(),
    )
    logger.info("audit_entry_recorded", action=entry.action, resource_id=entry.resource_id)
    return str(entry.pk)
