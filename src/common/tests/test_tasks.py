import pytest
from django.core import mail

from common.models import AuditLog
from common.tasks import record_audit_entry, send_email

pytestmark = pytest.mark.django_db


def test_record_audit_entry_persists_payload() -> None:
    payload = {
        "action": "registration.created",
        "resource_type": "registration",
        "resource_id": "3f1c6f0e-0000-4000-8000-000000000001",
        "actor_id": None,
        "before": None,
        "after": {"status": "CONFIRMED"},
        "metadata": {"tier_quantity": 2},
        "timestamp": "2026-05-01T12:00:00Z",
    }

    entry_id = record_audit_entry(payload)

    entry = AuditLog.objects.get(pk=entry_id)
    assert entry.action == "registration.created"
    assert entry.after == {"status": "CONFIRMED"}
    assert entry.metadata == {"tier_quantity": 2}
    assert entry.created_at.isoformat() == "2026-05-01T12:00:00+00:00"


def test_send_email_to_single_recipient() -> None:
    send_email(to="member@example.com", subject="Hello", body="Plain", html_body="<p>Rich</p>")

    assert len(mail.outbox) == 1
    message = mail.outbox[0]
    assert message.bcc == ["member@example.com"]
    assert message.alternatives[0][0] == "<p>Rich</p>"  # type: ignore[attr-defined]
